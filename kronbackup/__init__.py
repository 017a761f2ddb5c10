"""
Motor de backup para bases de datos heterogéneas
"""
__version__ = "0.1.0"

from .config import Config
from .logger import LoggerService

__all__ = ['Config', 'LoggerService']
