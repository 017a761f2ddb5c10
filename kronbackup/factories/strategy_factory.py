"""
Factory para crear las conexiones/estrategias de backup
"""
from typing import List, Optional
from ..errors import ConfigError, DatabaseError
from ..models import BackendConfig, BackupSettings
from ..strategies.base_strategy import BackupStrategy
from ..strategies.process_runner import ProcessRunner
from ..strategies.sqlite_strategy import SQLiteBackupStrategy
from ..strategies.mysql_strategy import MySQLBackupStrategy
from ..strategies.mysql_native import MySQLNativeBackupStrategy
from ..strategies.postgresql_strategy import PostgreSQLBackupStrategy
from ..strategies.mongodb_strategy import MongoDBBackupStrategy


class DatabaseConnectionFactory:
    """Factory para crear estrategias de backup (Factory Pattern)"""

    # Conjunto cerrado de motores soportados; MySQL admite dos estrategias
    _strategies = {
        'sqlite': {'dump': SQLiteBackupStrategy},
        'mysql': {'dump': MySQLBackupStrategy, 'native': MySQLNativeBackupStrategy},
        'postgres': {'dump': PostgreSQLBackupStrategy},
        'mongodb': {'dump': MongoDBBackupStrategy},
    }

    @classmethod
    def create(cls, db_type: str, config: BackendConfig,
               settings: Optional[BackupSettings] = None,
               runner: Optional[ProcessRunner] = None) -> BackupStrategy:
        """
        Crea la estrategia de backup según el tipo de base de datos

        Args:
            db_type: Tipo de base de datos (sqlite, mysql, postgres, mongodb)
            config: Configuración del motor
            settings: Parámetros generales de backup
            runner: Ejecutor de procesos externos

        Returns:
            Instancia de BackupStrategy ligada a la configuración

        Raises:
            DatabaseError: si el tipo no es soportado
            ConfigError: si la estrategia elegida no existe para el tipo
        """
        variants = cls._strategies.get(db_type)
        if variants is None:
            raise DatabaseError(f"Unsupported database type: {db_type}")

        strategy_name = str(config.strategy or 'dump').lower()
        strategy_class = variants.get(strategy_name)
        if strategy_class is None:
            raise ConfigError(
                f"Estrategia '{config.strategy}' no soportada para {db_type} "
                f"(disponibles: {', '.join(variants)})"
            )
        return strategy_class(config, settings, runner)

    @classmethod
    def get_supported_types(cls) -> List[str]:
        """
        Obtiene lista de tipos de base de datos soportados

        Returns:
            Lista de tipos soportados
        """
        return list(cls._strategies.keys())
