"""
Repositorio para manejar configuración (Dependency Inversion)
"""
import json
import os
from pathlib import Path
from typing import Dict, Optional
from ..config import Config
from ..errors import ConfigError
from ..logger import LoggerService
from ..models import BackendConfig, BackupSettings, RunConfig, StorageSettings


class ConfigRepository:
    """Repositorio para manejar configuración"""

    def __init__(self, config_file: Optional[Path] = None):
        """
        Inicializa el repositorio de configuración

        Args:
            config_file: Ruta al archivo de configuración (opcional)
        """
        self.config_file = Path(config_file) if config_file else Config.CONFIG_FILE
        self.logger = LoggerService.get_logger("ConfigRepository")
        self._raw_config = None

    def load(self) -> Dict:
        """
        Carga configuración desde archivo JSON

        Returns:
            Diccionario con la configuración

        Raises:
            ConfigError: si el archivo no existe o no es JSON válido
        """
        if not self.config_file.exists():
            raise ConfigError(f"Failed to open config file: {self.config_file} no existe")

        try:
            with open(self.config_file, "r", encoding='utf-8') as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse config: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to read config file: {e}")

        if not isinstance(raw, dict):
            raise ConfigError("Failed to parse config: se esperaba un objeto JSON")

        self._raw_config = raw
        self.logger.info(f"Configuración cargada exitosamente: {self.config_file}")
        return self._raw_config

    def save(self, config: Dict) -> bool:
        """
        Guarda configuración en archivo JSON

        Args:
            config: Diccionario con la configuración

        Returns:
            True si se guardó exitosamente
        """
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w", encoding='utf-8') as f:
                json.dump(config, f, indent=4, ensure_ascii=False)
            self.logger.info(f"Configuración guardada exitosamente: {self.config_file}")
            return True
        except OSError as e:
            self.logger.error(f"Error al guardar la configuración: {str(e)}")
            return False

    def get_run_config(self) -> RunConfig:
        """
        Construye la configuración completa de una ejecución

        Returns:
            Objeto RunConfig
        """
        return RunConfig(
            databases=self.get_databases(),
            storage=self.get_storage_settings(),
            backup_settings=self.get_backup_settings()
        )

    def get_databases(self) -> Dict[str, BackendConfig]:
        """
        Obtiene la configuración de cada motor presente en el archivo

        Returns:
            Diccionario tipo de motor -> BackendConfig

        Raises:
            ConfigError: si una sección es inválida o el tipo es desconocido
        """
        if self._raw_config is None:
            self.load()

        sections = self._raw_config.get('databases', {})
        if not isinstance(sections, dict):
            raise ConfigError("'databases' debe ser un objeto con una sección por motor")

        databases = {}
        for db_type, db_dict in sections.items():
            if db_type not in Config.BACKEND_ORDER:
                raise ConfigError(f"Tipo de base de datos desconocido en configuración: {db_type}")
            if db_dict is None:
                continue
            if not isinstance(db_dict, dict):
                raise ConfigError(f"La sección '{db_type}' debe ser un objeto")

            names = db_dict.get('databases', [])
            if isinstance(names, str) or not isinstance(names, list):
                raise ConfigError(f"'{db_type}.databases' debe ser una lista de nombres")

            try:
                port = int(db_dict.get('port', 0))
            except (TypeError, ValueError):
                raise ConfigError(f"'{db_type}.port' debe ser numérico")

            strategy = db_dict.get('strategy', 'dump')
            if not isinstance(strategy, str):
                raise ConfigError(f"'{db_type}.strategy' debe ser un texto (ej. \"dump\" o \"native\")")

            databases[db_type] = BackendConfig(
                host=self._resolve_credential(str(db_dict.get('host', ''))),
                port=port,
                user=self._resolve_credential(str(db_dict.get('user', ''))),
                password=self._resolve_credential(str(db_dict.get('password', ''))),
                databases=names,
                strategy=strategy,
                odbc_driver=db_dict.get('odbc_driver')
            )
        return databases

    def get_backup_settings(self) -> BackupSettings:
        """
        Obtiene configuración de backups

        Returns:
            Objeto BackupSettings

        Raises:
            ConfigError: si algún valor es inválido
        """
        if self._raw_config is None:
            self.load()

        settings_dict = self._raw_config.get('backup_settings', {}) or {}
        defaults = BackupSettings()
        try:
            return BackupSettings(
                schedule=settings_dict.get('schedule', defaults.schedule),
                retention_days=settings_dict.get('retention_days', defaults.retention_days),
                command_timeout=settings_dict.get('command_timeout', defaults.command_timeout),
                sqlite_step_pages=settings_dict.get('sqlite_step_pages', defaults.sqlite_step_pages),
                sqlite_step_sleep=settings_dict.get('sqlite_step_sleep', defaults.sqlite_step_sleep),
                native_batch_rows=settings_dict.get('native_batch_rows', defaults.native_batch_rows),
                stop_on_error=settings_dict.get('stop_on_error', defaults.stop_on_error)
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Configuración de backups inválida: {e}")

    def get_storage_settings(self) -> StorageSettings:
        """
        Obtiene el destino de almacenamiento

        Returns:
            Objeto StorageSettings
        """
        if self._raw_config is None:
            self.load()

        storage_dict = self._raw_config.get('storage', {}) or {}
        if not isinstance(storage_dict, dict):
            raise ConfigError("'storage' debe ser un objeto")

        path = storage_dict.get('path')
        return StorageSettings(
            type=storage_dict.get('type', 'local'),
            path=self._resolve_credential(path) if path else None,
            bucket=storage_dict.get('bucket'),
            region=storage_dict.get('region')
        )

    def _resolve_credential(self, value: str) -> str:
        """
        Resuelve credencial desde variable de entorno si es necesario

        Args:
            value: Valor que puede contener referencia a variable de entorno

        Returns:
            Valor resuelto
        """
        if value.startswith("${") and value.endswith("}"):
            env_var = value[2:-1]
            resolved = os.getenv(env_var, "")
            if not resolved:
                self.logger.warning(f"Variable de entorno no encontrada: {env_var}")
            return resolved
        return value

    def create_example_config(self) -> bool:
        """
        Crea un archivo de configuración de ejemplo

        Returns:
            True si se creó exitosamente
        """
        return self.save(Config.DEFAULT_CONFIG)
