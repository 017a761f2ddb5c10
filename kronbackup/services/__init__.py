"""
Servicios de la aplicación
"""
from .backup_service import BackupService
from .cleanup_service import CleanupService
from .storage_service import LocalStorage, create_storage
from .scheduler_service import SchedulerService

__all__ = [
    'BackupService',
    'CleanupService',
    'LocalStorage',
    'create_storage',
    'SchedulerService'
]
