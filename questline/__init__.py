#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Questline - движок прогресса для трекера целей, привычек и пороков

Version: 1.0.0
"""

__version__ = "1.0.0"
