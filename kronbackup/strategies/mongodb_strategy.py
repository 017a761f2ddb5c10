"""
Estrategia de backup para MongoDB usando mongodump
"""
import json
from pathlib import Path
from typing import List, Optional

from .base_strategy import BackupStrategy
from ..errors import DatabaseError, KronBackupError
from ..models import BackendConfig, ConnectionStatus, DatabaseInfo


class MongoDBBackupStrategy(BackupStrategy):
    """Estrategia de backup para MongoDB"""

    database_type = "mongodb"
    file_extension = ""
    size_overhead = 1.25

    ADMIN_DATABASE = "admin"
    SHELL = "mongosh"

    def connection_args(self) -> List[str]:
        return [
            f'--host={self.config.host}',
            f'--port={self.config.port}',
            f'--username={self.config.user}',
            f'--password={self.config.password}',
            '--authenticationDatabase=admin',
        ]

    def eval_args(self, database: str, command: str) -> List[str]:
        return [self.SHELL] + self.connection_args() + [
            '--quiet',
            '--eval', command,
            database,
        ]

    def dump_args(self, database: str, destination: Path) -> List[str]:
        return ['mongodump'] + self.connection_args() + [
            f'--db={database}',
            f'--out={destination}',
            '--gzip',
        ]

    def _eval(self, database: str, command: str) -> str:
        return self._run_checked(self.eval_args(database, command)).stdout

    def _data_size(self, db_name: str) -> Optional[int]:
        output = self._eval(db_name, "JSON.stringify(db.stats())")
        try:
            stats = json.loads(output.strip())
        except ValueError:
            self.logger.warning(f"Respuesta de db.stats() no válida para {db_name}")
            return None
        size = stats.get("dataSize") if isinstance(stats, dict) else None
        return int(size) if isinstance(size, (int, float)) else None

    def probe(self) -> ConnectionStatus:
        try:
            self._eval(self.ADMIN_DATABASE, "db.runCommand({ ping: 1 })")
            return ConnectionStatus.connected()
        except KronBackupError as e:
            return ConnectionStatus.error(str(e))

    def list_databases(self) -> List[DatabaseInfo]:
        info = []
        for db_name in self.config.databases:
            size = None
            version = None
            try:
                size = self._data_size(db_name)
            except KronBackupError as e:
                self.logger.warning(f"Failed to get stats for database {db_name}: {e}")
            try:
                version = (self._first_line(self._eval(db_name, "db.version()")) or "").strip('"') or None
            except KronBackupError as e:
                self.logger.warning(f"No se pudo obtener la versión de {db_name}: {e}")
            info.append(DatabaseInfo(name=db_name, size=size, version=version))
        return info

    def estimate_size(self) -> int:
        total_size = 0
        for db_name in self.config.databases:
            try:
                total_size += self._data_size(db_name) or 0
            except KronBackupError as e:
                self.logger.warning(f"Failed to get stats for database {db_name}: {e}")
        # 25% adicional por BSON y compresión
        return self._apply_overhead(total_size)

    def backup(self, destination: Path) -> None:
        self._validate_tools(['mongodump'])
        self._ensure_directory(destination)

        for db_name in self.config.databases:
            # mongodump administra su propio subdirectorio <destino>/<db>/
            output_dir = destination / db_name
            self.logger.info(f"Ejecutando mongodump de {db_name}")
            try:
                self._run_checked(self.dump_args(db_name, destination))
            except DatabaseError:
                self._discard_tree(output_dir)
                raise
            self.logger.info(f"  ✓ {output_dir.name}/")

    def validate_config(self, config: BackendConfig) -> None:
        self._require(config.host, "MongoDB host")
        self._require(config.user, "MongoDB user")
        self._require(config.password, "MongoDB password")
        self._require_databases(config)
