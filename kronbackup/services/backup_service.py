"""
Servicio principal que orquesta los backups
"""
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from ..config import Config
from ..errors import ConfigError, DatabaseError, KronBackupError
from ..factories.strategy_factory import DatabaseConnectionFactory
from ..logger import LoggerService
from ..models import BackendConfig, BackupResult, ConnectionState, RunConfig
from ..strategies.process_runner import ProcessRunner
from .cleanup_service import CleanupService
from .storage_service import create_storage


def format_size(size: Optional[int]) -> str:
    """Tamaño legible: 1536 -> '1.50 KB'"""
    if size is None:
        return "tamaño desconocido"
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.2f} {unit}"
        value /= 1024
    return f"{value:.2f} GB"


class BackupService:
    """Servicio principal que orquesta los backups"""

    def __init__(self, run_config: RunConfig, factory=DatabaseConnectionFactory,
                 runner: Optional[ProcessRunner] = None, storage_dir: Optional[Path] = None):
        """
        Inicializa el servicio de backup

        Args:
            run_config: Configuración completa de la ejecución
            factory: Factory que construye las estrategias
            runner: Ejecutor de procesos externos compartido por las estrategias
            storage_dir: Directorio de almacenamiento por defecto
        """
        self.run_config = run_config
        self.backup_settings = run_config.backup_settings
        self.factory = factory
        self.runner = runner
        self.storage_dir = Path(storage_dir) if storage_dir else Config.BACKUP_DIR
        self.logger = LoggerService.get_logger("BackupService")

        # Servicio de limpieza
        self.cleanup_service = CleanupService(self.backup_settings.retention_days)

    def configured_backends(self) -> List[tuple]:
        """Motores presentes en la configuración, en el orden de ejecución"""
        return [
            (db_type, self.run_config.databases[db_type])
            for db_type in Config.BACKEND_ORDER
            if self.run_config.databases.get(db_type) is not None
        ]

    def run_backup(self) -> Path:
        """
        Ejecución completa: backup de todos los motores, compresión,
        almacenamiento y limpieza de archivos antiguos

        Returns:
            Ruta del archivo comprimido almacenado
        """
        if not self.configured_backends():
            raise ConfigError("No database configurations found")

        self.logger.info("=" * 70)
        self.logger.info("INICIANDO PROCESO DE BACKUP")
        self.logger.info("=" * 70)

        backup_id = datetime.now(timezone.utc).strftime("backup-%Y%m%dT%H%M%S")
        storage = create_storage(self.run_config.storage, self.storage_dir)

        with tempfile.TemporaryDirectory(prefix="kronbackup-") as work_dir:
            self.backup_all_databases(Path(work_dir))
            archive = storage.store(Path(work_dir), backup_id)

        self.logger.info("-" * 70)
        self.cleanup_service.cleanup_old_backups(storage.base_path)
        self.logger.info(f"Backup completado: {backup_id}")
        return archive

    def backup_all_databases(self, destination: Path) -> List[BackupResult]:
        """
        Realiza backup de todos los motores configurados, uno a la vez

        Args:
            destination: Directorio compartido donde escribe cada motor

        Returns:
            Lista de resultados por motor

        Raises:
            ConfigError: si no hay ningún motor configurado
            KronBackupError: el primer error, si stop_on_error está activo
                o si ningún motor terminó correctamente
        """
        backends = self.configured_backends()
        if not backends:
            raise ConfigError("No database configurations found")

        results = []
        first_error = None

        for db_type, backend_config in backends:
            self.logger.info("-" * 70)
            self.logger.info(f"Iniciando backup de {db_type}")
            start_time = time.time()
            try:
                results.append(self._backup_backend(db_type, backend_config, destination))
            except KronBackupError as e:
                results.append(BackupResult(
                    backend=db_type,
                    success=False,
                    databases=list(backend_config.databases),
                    error=str(e),
                    duration_seconds=time.time() - start_time
                ))
                if self.backup_settings.stop_on_error:
                    self._print_summary(results)
                    raise
                first_error = first_error or e

        self._print_summary(results)

        if not any(r.success for r in results):
            raise first_error
        return results

    def _backup_backend(self, db_type: str, backend_config: BackendConfig, destination: Path) -> BackupResult:
        """
        Conduce un motor por el contrato: validación, conectividad,
        listado, estimación y backup

        Raises:
            KronBackupError: si la conexión o el backup fallan
        """
        strategy = self.factory.create(db_type, backend_config, self.backup_settings, self.runner)
        strategy.validate_config(backend_config)

        status = strategy.probe()
        if status.state is ConnectionState.ERROR:
            raise DatabaseError(f"Failed to connect to {db_type} database: {status.message}")
        if status.state is ConnectionState.DISCONNECTED:
            raise DatabaseError(f"{db_type} database is disconnected")
        self.logger.info(f"Conexión exitosa con {db_type}")

        infos = strategy.list_databases()
        self.logger.info(f"Se encontraron {len(infos)} base(s) de datos para backup:")
        for info in infos:
            version = f", versión {info.version}" if info.version else ""
            self.logger.info(f"  - {info.name} ({format_size(info.size)}{version})")

        estimated_size = strategy.estimate_size()
        self.logger.info(f"Tamaño estimado del backup: {format_size(estimated_size)}")

        result = strategy.execute_backup(destination)
        result.estimated_size = estimated_size
        return result

    def _print_summary(self, results: List[BackupResult]):
        """
        Imprime resumen de la operación de backup

        Args:
            results: Lista de resultados
        """
        success_count = sum(1 for r in results if r.success)
        failed_count = len(results) - success_count
        total_time = sum(r.duration_seconds for r in results)

        self.logger.info("=" * 70)
        self.logger.info("RESUMEN DEL PROCESO DE BACKUP")
        self.logger.info("=" * 70)

        for result in results:
            status = "✓ EXITOSO" if result.success else "✗ FALLIDO"
            self.logger.info(f"{status}: {result.backend} ({result.duration_seconds:.2f}s)")
            if not result.success:
                self.logger.error(f"  Error: {result.error}")

        self.logger.info("-" * 70)
        self.logger.info(f"Motores procesados: {len(results)}")
        self.logger.info(f"Backups exitosos: {success_count}")
        self.logger.info(f"Backups fallidos: {failed_count}")
        self.logger.info(f"Tiempo total: {total_time:.2f}s")
        self.logger.info("=" * 70)

        if failed_count > 0:
            self.logger.warning(
                f"ATENCIÓN: {failed_count} backup(s) fallaron. "
                "Revisa los errores arriba."
            )
