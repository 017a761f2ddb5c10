"""
Jerarquía de errores del sistema de backup
"""
from typing import Optional


class KronBackupError(Exception):
    """Error base de todas las fallas del sistema"""

    prefix = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return f"{self.prefix}: {self.message}"


class ConfigError(KronBackupError):
    """Configuración faltante, inválida o mal formada"""
    prefix = "Configuration error"


class DatabaseError(KronBackupError):
    """Fallas de conectividad, consultas o herramientas de dump"""
    prefix = "Database error"


class StorageError(KronBackupError):
    """Fallas al ubicar el artefacto en el almacenamiento"""
    prefix = "Storage error"


class BackupError(KronBackupError):
    """Fallas al crear el archivo comprimido del backup"""
    prefix = "Backup error"


class RestoreError(KronBackupError):
    """Reservado para la restauración (no implementada)"""
    prefix = "Restore error"


class IOFailure(KronBackupError):
    """Falla de entrada/salida del sistema de archivos o de procesos"""
    prefix = "I/O error"

    def __init__(self, error: OSError, message: Optional[str] = None):
        super().__init__(message or str(error))
        self.__cause__ = error
