"""
Exportación nativa de MySQL vía ODBC (sin mysqldump)
"""
from .mysql_native_strategy import MySQLNativeBackupStrategy

__all__ = ['MySQLNativeBackupStrategy']
