"""
Configuración centralizada del sistema de backup
"""
import logging
import os
from pathlib import Path
from dotenv import load_dotenv, find_dotenv

class Config:
    """Configuración centralizada del sistema"""

    ENV_FILE = find_dotenv(usecwd=True)

    # Cargar variables de entorno desde la raíz real del proyecto
    load_dotenv(ENV_FILE)

    # BASE_DIR es la raíz donde está main.py
    BASE_DIR = Path(ENV_FILE).parent if ENV_FILE else Path(__file__).resolve().parents[1]

    BACKUP_DIR = Path(os.getenv("BACKUP_DIR")) if os.getenv("BACKUP_DIR") else (BASE_DIR / "Backups")
    LOG_DIR = Path(os.getenv("LOG_DIR")) if os.getenv("LOG_DIR") else (BASE_DIR / "Logs")
    CONFIG_FILE = Path(os.getenv("KRONBACKUP_CONFIG")) if os.getenv("KRONBACKUP_CONFIG") else (BASE_DIR / "config.json")

    LOG_LEVEL = logging.INFO
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Orden en que se procesan los motores en cada ejecución
    BACKEND_ORDER = ['sqlite', 'mysql', 'postgres', 'mongodb']

    DEFAULT_CONFIG = {
        "databases": {
            "sqlite": {
                "host": "/var/lib/app/databases",
                "port": 0,
                "user": "",
                "password": "",
                "databases": ["app.db"]
            },
            "mysql": {
                "host": "localhost",
                "port": 3306,
                "user": "${MYSQL_USER}",
                "password": "${MYSQL_PASSWORD}",
                "databases": ["production_db"],
                "strategy": "dump"
            },
            "postgres": {
                "host": "localhost",
                "port": 5432,
                "user": "${PG_USER}",
                "password": "${PG_PASSWORD}",
                "databases": ["main_db"]
            },
            "mongodb": {
                "host": "localhost",
                "port": 27017,
                "user": "${MONGO_USER}",
                "password": "${MONGO_PASSWORD}",
                "databases": ["app_data"]
            }
        },
        "storage": {
            "type": "local",
            "path": "Backups"
        },
        "backup_settings": {
            "schedule": ["02:00"],
            "retention_days": 30,
            "command_timeout": 3600
        }
    }

    @classmethod
    def ensure_directories(cls):
        """Crea los directorios necesarios si no existen"""
        cls.BACKUP_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)
