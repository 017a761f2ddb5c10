"""
Servicio para limpiar backups antiguos (Single Responsibility)
"""
from datetime import datetime, timedelta
from pathlib import Path
from ..logger import LoggerService


class CleanupService:
    """Servicio para limpiar backups antiguos"""

    ARCHIVE_PATTERN = 'backup-*.tar.gz'

    def __init__(self, retention_days: int):
        """
        Inicializa el servicio de limpieza

        Args:
            retention_days: Días de retención de backups
        """
        self.retention_days = retention_days
        self.logger = LoggerService.get_logger("CleanupService")

    def cleanup_old_backups(self, backup_dir: Path) -> int:
        """
        Elimina archivos de backup más antiguos que retention_days

        Args:
            backup_dir: Directorio de backups

        Returns:
            Cantidad de archivos eliminados
        """
        if not backup_dir.exists():
            self.logger.warning(f"Directorio de backups no existe: {backup_dir}")
            return 0

        now = datetime.now()
        cutoff_date = now - timedelta(days=self.retention_days)
        deleted_count = 0

        for backup_file in backup_dir.glob(self.ARCHIVE_PATTERN):
            try:
                file_mtime = datetime.fromtimestamp(backup_file.stat().st_mtime)

                if file_mtime < cutoff_date:
                    file_size = backup_file.stat().st_size / (1024 * 1024)  # MB
                    backup_file.unlink()
                    deleted_count += 1
                    self.logger.info(
                        f"Eliminado backup antiguo: {backup_file.name} "
                        f"({file_size:.2f} MB, {(now - file_mtime).days} días)"
                    )
            except OSError as e:
                self.logger.error(f"Error al eliminar {backup_file.name}: {e}")

        if deleted_count > 0:
            self.logger.info(
                f"Limpieza completada: {deleted_count} archivo(s) eliminado(s)"
            )
        else:
            self.logger.info("No hay backups antiguos para eliminar")

        return deleted_count

    def get_backup_stats(self, backup_dir: Path) -> dict:
        """
        Obtiene estadísticas de los backups

        Args:
            backup_dir: Directorio de backups

        Returns:
            Diccionario con estadísticas
        """
        stats = {
            'total_files': 0,
            'total_size_mb': 0,
            'oldest_backup': None,
            'newest_backup': None
        }
        if not backup_dir.exists():
            return stats

        files = list(backup_dir.glob(self.ARCHIVE_PATTERN))
        if not files:
            return stats

        oldest = min(files, key=lambda f: f.stat().st_mtime)
        newest = max(files, key=lambda f: f.stat().st_mtime)

        stats['total_files'] = len(files)
        stats['total_size_mb'] = sum(f.stat().st_size for f in files) / (1024 * 1024)
        stats['oldest_backup'] = datetime.fromtimestamp(oldest.stat().st_mtime)
        stats['newest_backup'] = datetime.fromtimestamp(newest.stat().st_mtime)
        return stats
