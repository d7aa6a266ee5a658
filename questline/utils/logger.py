# questline/utils/logger.py

import logging
import logging.config
from typing import Optional

from questline.config import QuestlineConfig, config as default_config

def setup_logging(cfg: Optional[QuestlineConfig] = None) -> logging.Logger:
    cfg = cfg or default_config
    if cfg.log_to_file:
        cfg.log_dir.mkdir(exist_ok=True, parents=True)
    logging.config.dictConfig(cfg.get_logging_config())
    logger = logging.getLogger()
    logger.debug(f"Логирование настроено: уровень {cfg.log_level.value}")
    return logger
