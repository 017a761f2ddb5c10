"""
Almacenamiento de los backups completados
"""
import shutil
import tarfile
import tempfile
from pathlib import Path
from ..errors import BackupError, StorageError
from ..logger import LoggerService
from ..models import StorageSettings


class LocalStorage:
    """Comprime el directorio de una ejecución y lo ubica en disco local"""

    def __init__(self, base_path: Path):
        """
        Args:
            base_path: Directorio donde se guardan los archivos comprimidos
        """
        self.base_path = Path(base_path)
        self.logger = LoggerService.get_logger("LocalStorage")

    def store(self, source_dir: Path, backup_id: str) -> Path:
        """
        Comprime `source_dir` como <backup_id>.tar.gz y lo mueve al almacenamiento

        Args:
            source_dir: Directorio con los artefactos de la ejecución
            backup_id: Identificador único del backup

        Returns:
            Ruta final del archivo comprimido

        Raises:
            BackupError: si falla la creación del archivo comprimido
            StorageError: si falla la ubicación en el almacenamiento
        """
        archive_name = f"{backup_id}.tar.gz"

        with tempfile.TemporaryDirectory(prefix="kronbackup-archive-") as work_dir:
            temp_archive = Path(work_dir) / archive_name
            try:
                with tarfile.open(temp_archive, "w:gz") as tar:
                    tar.add(str(source_dir), arcname=".")
            except (OSError, tarfile.TarError) as e:
                raise BackupError(f"Failed to create tar archive: {e}")

            final_path = self.base_path / archive_name
            try:
                self.base_path.mkdir(parents=True, exist_ok=True)
                shutil.move(str(temp_archive), str(final_path))
            except OSError as e:
                raise StorageError(f"No se pudo guardar {archive_name} en {self.base_path}: {e}")

        size_mb = final_path.stat().st_size / (1024 * 1024)
        self.logger.info(f"Backup almacenado: {final_path} ({size_mb:.2f} MB)")
        return final_path


def create_storage(settings: StorageSettings, default_path: Path) -> LocalStorage:
    """
    Construye el almacenamiento configurado

    Args:
        settings: Configuración de almacenamiento
        default_path: Ruta usada cuando la configuración no indica una

    Raises:
        StorageError: si el tipo no está soportado
    """
    storage_type = (settings.type or "local").lower()
    if storage_type == "local":
        return LocalStorage(Path(settings.path) if settings.path else default_path)
    if storage_type == "s3":
        raise StorageError("El almacenamiento S3 aún no está soportado")
    raise StorageError(f"Tipo de almacenamiento desconocido: {settings.type}")
