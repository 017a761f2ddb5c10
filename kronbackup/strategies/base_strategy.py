"""
Estrategia base para backups (Strategy Pattern)
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional
import shutil
import time

from ..errors import ConfigError, DatabaseError, IOFailure, KronBackupError
from ..logger import LoggerService
from ..models import BackendConfig, BackupResult, BackupSettings, ConnectionStatus, DatabaseInfo
from .process_runner import ProcessRunner, ProcessResult


class BackupStrategy(ABC):
    """Contrato común de todos los motores de base de datos"""

    database_type = ""
    file_extension = ""
    size_overhead = 1.0

    def __init__(self, config: BackendConfig, settings: Optional[BackupSettings] = None,
                 runner: Optional[ProcessRunner] = None):
        """
        Inicializa la estrategia

        Args:
            config: Configuración del motor (solo lectura)
            settings: Parámetros generales de backup
            runner: Ejecutor de procesos externos
        """
        self.config = config
        self.settings = settings or BackupSettings()
        self.runner = runner or ProcessRunner(timeout=self.settings.command_timeout)
        self.logger = LoggerService.get_logger(self.__class__.__name__)

    @abstractmethod
    def probe(self) -> ConnectionStatus:
        """
        Prueba liviana de conectividad. Nunca lanza por problemas de conexión.

        Returns:
            Estado de la conexión
        """
        pass

    @abstractmethod
    def list_databases(self) -> List[DatabaseInfo]:
        """
        Obtiene tamaño y versión de cada base configurada

        Returns:
            Una entrada por cada nombre configurado, con datos parciales si
            alguna consulta falla
        """
        pass

    @abstractmethod
    def estimate_size(self) -> int:
        """
        Estima el tamaño en disco del artefacto de backup

        Returns:
            Tamaño estimado en bytes
        """
        pass

    @abstractmethod
    def backup(self, destination: Path) -> None:
        """
        Ejecuta el backup dentro del directorio indicado

        Args:
            destination: Directorio de destino (se crea si no existe)

        Raises:
            KronBackupError: si el backup falla
        """
        pass

    @abstractmethod
    def validate_config(self, config: BackendConfig) -> None:
        """
        Verifica precondiciones de la configuración sin efectos secundarios

        Raises:
            ConfigError: si la configuración no es válida
        """
        pass

    def execute_backup(self, destination: Path) -> BackupResult:
        """
        Template method para ejecutar backup con medición de tiempo

        Args:
            destination: Directorio de destino

        Returns:
            Resultado del backup exitoso

        Raises:
            KronBackupError: si el backup falla
        """
        self.logger.info(f"Iniciando backup de {self.database_type}: {', '.join(self.config.databases)}")
        start_time = time.time()

        try:
            self.backup(destination)
        except KronBackupError as e:
            self.logger.error(f"Backup fallido ({time.time() - start_time:.2f}s): {e}")
            raise
        except OSError as e:
            failure = IOFailure(e)
            self.logger.error(f"Backup fallido ({time.time() - start_time:.2f}s): {failure}")
            raise failure

        result = BackupResult(
            backend=self.database_type,
            success=True,
            databases=list(self.config.databases),
            output_dir=str(destination),
            duration_seconds=time.time() - start_time
        )
        self.logger.info(f"Backup completado para {self.database_type} ({result.duration_seconds:.2f}s)")
        return result

    def _apply_overhead(self, raw_size: int) -> int:
        """Aplica el multiplicador de formato del motor"""
        return int(raw_size * self.size_overhead)

    def _require(self, value: str, label: str):
        if not value:
            raise ConfigError(f"{label} cannot be empty")

    def _require_databases(self, config: BackendConfig):
        if not config.databases:
            raise ConfigError("At least one database must be specified")

    def _ensure_directory(self, destination: Path):
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailure(e, f"No se pudo crear {destination}: {e}")

    def _validate_tools(self, tools: list):
        """
        Valida que las herramientas necesarias estén disponibles

        Args:
            tools: Lista de herramientas requeridas

        Raises:
            DatabaseError: si alguna herramienta no está instalada
        """
        for tool in tools:
            if not self.runner.which(tool):
                raise DatabaseError(f"La herramienta {tool} no está instalada")

    def _run_checked(self, args: List[str], env=None, stdout_path: Optional[Path] = None) -> ProcessResult:
        """
        Ejecuta un comando y convierte un código de salida distinto de cero en error

        Raises:
            DatabaseError: con el stderr capturado
        """
        result = self.runner.run(args, env=env, stdout_path=stdout_path)
        if not result.success:
            raise DatabaseError(f"{args[0]} failed: {result.stderr.strip()}")
        return result

    @staticmethod
    def _first_line(output: str) -> Optional[str]:
        for line in output.splitlines():
            if line.strip():
                return line.strip()
        return None

    @staticmethod
    def _discard(path: Path):
        """Elimina un artefacto parcial para no dejarlo con nombre engañoso"""
        try:
            if path.exists():
                path.unlink()
        except OSError as e:
            raise IOFailure(e, f"No se pudo eliminar el artefacto parcial {path}: {e}")

    @staticmethod
    def _discard_tree(path: Path):
        """Elimina un directorio parcial generado por la herramienta de dump"""
        try:
            if path.exists():
                shutil.rmtree(path)
        except OSError as e:
            raise IOFailure(e, f"No se pudo eliminar el directorio parcial {path}: {e}")

    @staticmethod
    def _promote(partial_file: Path, output_file: Path) -> int:
        """
        Renombra el artefacto parcial a su nombre definitivo

        Returns:
            Tamaño final en bytes

        Raises:
            IOFailure: si el renombrado falla
        """
        try:
            partial_file.replace(output_file)
            return output_file.stat().st_size
        except OSError as e:
            raise IOFailure(e, f"No se pudo renombrar {partial_file} a {output_file.name}: {e}")
