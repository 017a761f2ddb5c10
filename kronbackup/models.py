"""
Modelos de datos del sistema
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


@dataclass
class BackendConfig:
    """Configuración de un motor de base de datos"""
    host: str
    port: int = 0
    user: str = ""
    password: str = ""
    databases: List[str] = field(default_factory=list)
    strategy: str = "dump"
    odbc_driver: Optional[str] = None

    def __post_init__(self):
        """Normaliza la lista de bases de datos"""
        self.databases = [str(name) for name in (self.databases or [])]


@dataclass(frozen=True)
class DatabaseInfo:
    """Información descriptiva de una base de datos lógica"""
    name: str
    size: Optional[int] = None
    version: Optional[str] = None


class ConnectionState(Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"


@dataclass(frozen=True)
class ConnectionStatus:
    """Resultado de una prueba de conectividad"""
    state: ConnectionState
    message: Optional[str] = None

    @classmethod
    def connected(cls) -> "ConnectionStatus":
        return cls(ConnectionState.CONNECTED)

    @classmethod
    def disconnected(cls) -> "ConnectionStatus":
        return cls(ConnectionState.DISCONNECTED)

    @classmethod
    def error(cls, message: str) -> "ConnectionStatus":
        return cls(ConnectionState.ERROR, message)

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    def __str__(self):
        if self.state is ConnectionState.ERROR:
            return f"error: {self.message}"
        return self.state.value


@dataclass
class BackupSettings:
    """Configuración de backups"""
    schedule: List[str] = field(default_factory=lambda: ["02:00"])
    retention_days: int = 30
    command_timeout: int = 3600
    sqlite_step_pages: int = 10
    sqlite_step_sleep: float = 1.0
    native_batch_rows: int = 1000
    stop_on_error: bool = True

    def __post_init__(self):
        """Validación después de inicialización"""
        if isinstance(self.schedule, str):
            self.schedule = [self.schedule]
        if self.retention_days < 1:
            raise ValueError("retention_days debe ser mayor a 0")
        if self.command_timeout < 1:
            raise ValueError("command_timeout debe ser mayor a 0")
        if self.sqlite_step_pages < 1:
            raise ValueError("sqlite_step_pages debe ser mayor a 0")
        if self.sqlite_step_sleep < 0:
            raise ValueError("sqlite_step_sleep no puede ser negativo")
        if self.native_batch_rows < 1:
            raise ValueError("native_batch_rows debe ser mayor a 0")
        for time_str in self.schedule:
            if not self._validate_time_format(time_str):
                raise ValueError("El formato de schedule debe ser HH:MM")

    @staticmethod
    def _validate_time_format(time_str: str) -> bool:
        """Valida formato de hora HH:MM"""
        try:
            parts = time_str.split(":")
            if len(parts) != 2:
                return False
            hours, minutes = int(parts[0]), int(parts[1])
            return 0 <= hours < 24 and 0 <= minutes < 60
        except (ValueError, AttributeError):
            return False


@dataclass
class StorageSettings:
    """Destino de los artefactos de backup"""
    type: str = "local"
    path: Optional[str] = None
    bucket: Optional[str] = None
    region: Optional[str] = None


@dataclass
class RunConfig:
    """Configuración completa de una ejecución"""
    databases: Dict[str, BackendConfig] = field(default_factory=dict)
    storage: StorageSettings = field(default_factory=StorageSettings)
    backup_settings: BackupSettings = field(default_factory=BackupSettings)


@dataclass
class BackupResult:
    """Resultado del backup de un motor de base de datos"""
    backend: str
    success: bool
    databases: List[str] = field(default_factory=list)
    output_dir: Optional[str] = None
    estimated_size: Optional[int] = None
    error: Optional[str] = None
    duration_seconds: float = 0.0

    def __str__(self):
        if self.success:
            return f"✓ {self.backend}: {', '.join(self.databases)} ({self.duration_seconds:.2f}s)"
        else:
            return f"✗ {self.backend}: {self.error}"
