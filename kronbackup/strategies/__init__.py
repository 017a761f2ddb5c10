"""
Estrategias de backup para diferentes motores de BD
"""
from .base_strategy import BackupStrategy
from .process_runner import ProcessRunner, ProcessResult
from .sqlite_strategy import SQLiteBackupStrategy
from .mysql_strategy import MySQLBackupStrategy
from .mysql_native import MySQLNativeBackupStrategy
from .postgresql_strategy import PostgreSQLBackupStrategy
from .mongodb_strategy import MongoDBBackupStrategy

__all__ = [
    'BackupStrategy',
    'ProcessRunner',
    'ProcessResult',
    'SQLiteBackupStrategy',
    'MySQLBackupStrategy',
    'MySQLNativeBackupStrategy',
    'PostgreSQLBackupStrategy',
    'MongoDBBackupStrategy'
]
