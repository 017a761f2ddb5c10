"""
Servicio de logging siguiendo principio Single Responsibility
"""
import logging
import sys
from datetime import datetime
from .config import Config


class LoggerService:
    """Servicio centralizado de logging"""

    ROOT_NAME = "kronbackup"

    _loggers = {}
    _root_configured = False

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Obtiene o crea un logger hijo de `kronbackup`

        Args:
            name: Nombre del componente (ej. "BackupService")

        Returns:
            Logger configurado
        """
        if name in cls._loggers:
            return cls._loggers[name]

        cls._setup_root()
        logger = logging.getLogger(f"{cls.ROOT_NAME}.{name}")
        cls._loggers[name] = logger
        return logger

    @classmethod
    def _setup_root(cls):
        """
        Configura una única vez el logger raíz de la aplicación: un archivo
        diario en LOG_DIR y la salida estándar. Los loggers hijos solo propagan.
        """
        if cls._root_configured:
            return

        root = logging.getLogger(cls.ROOT_NAME)
        root.setLevel(Config.LOG_LEVEL)
        cls._root_configured = True

        # Evitar duplicar handlers si otro código ya configuró el logger
        if root.handlers:
            return

        formatter = logging.Formatter(Config.LOG_FORMAT)

        Config.LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_file = Config.LOG_DIR / f"kronbackup_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(Config.LOG_LEVEL)
        file_handler.setFormatter(formatter)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(Config.LOG_LEVEL)
        console_handler.setFormatter(formatter)

        root.addHandler(file_handler)
        root.addHandler(console_handler)
