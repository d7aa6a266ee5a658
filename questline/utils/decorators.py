import functools

def synchronized(func):
    """Выполнить метод под блокировкой экземпляра (self._lock)"""
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return func(self, *args, **kwargs)
    return wrapper
