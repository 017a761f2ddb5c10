"""
Estrategia de backup para PostgreSQL
"""
from pathlib import Path
from typing import Dict, List, Optional

from .base_strategy import BackupStrategy
from ..errors import DatabaseError, KronBackupError
from ..models import BackendConfig, ConnectionStatus, DatabaseInfo


class PostgreSQLBackupStrategy(BackupStrategy):
    """Estrategia de backup para PostgreSQL"""

    database_type = "postgres"
    file_extension = ".dump"
    size_overhead = 1.15

    ADMIN_DATABASE = "postgres"

    def connection_args(self) -> List[str]:
        return [
            f'--host={self.config.host}',
            f'--port={self.config.port}',
            f'--username={self.config.user}',
        ]

    def password_env(self) -> Dict[str, str]:
        """La contraseña viaja por entorno para no aparecer en la lista de procesos"""
        return {'PGPASSWORD': self.config.password}

    def query_args(self, database: str, query: str) -> List[str]:
        return ['psql'] + self.connection_args() + [
            f'--dbname={database}',
            '--no-password',
            '--tuples-only',
            '--no-align',
            f'--command={query}',
        ]

    def dump_args(self, database: str, output_file: Path) -> List[str]:
        return ['pg_dump'] + self.connection_args() + [
            f'--dbname={database}',
            '--no-password',
            '--clean',               # Incluir DROP statements
            '--create',              # Incluir CREATE DATABASE
            '--if-exists',           # Usar IF EXISTS en DROP
            '--format=custom',
            f'--file={output_file}',
        ]

    def _query(self, database: str, query: str) -> str:
        return self._run_checked(self.query_args(database, query), env=self.password_env()).stdout

    def _database_size(self, db_name: str) -> Optional[int]:
        line = self._first_line(self._query(db_name, "SELECT pg_database_size(current_database());"))
        return int(line) if line else None

    def probe(self) -> ConnectionStatus:
        try:
            self._query(self.ADMIN_DATABASE, "SELECT 1;")
            return ConnectionStatus.connected()
        except KronBackupError as e:
            return ConnectionStatus.error(str(e))

    def list_databases(self) -> List[DatabaseInfo]:
        info = []
        for db_name in self.config.databases:
            size = None
            version = None
            try:
                size = self._database_size(db_name)
            except (KronBackupError, ValueError) as e:
                self.logger.warning(f"No se pudo obtener el tamaño de {db_name}: {e}")
            try:
                version = self._first_line(self._query(db_name, "SELECT version();"))
            except KronBackupError as e:
                self.logger.warning(f"No se pudo obtener la versión de {db_name}: {e}")
            info.append(DatabaseInfo(name=db_name, size=size, version=version))
        return info

    def estimate_size(self) -> int:
        total_size = 0
        for db_name in self.config.databases:
            try:
                total_size += self._database_size(db_name) or 0
            except (KronBackupError, ValueError) as e:
                self.logger.warning(f"No se pudo obtener el tamaño de {db_name}: {e}")
        # 15% adicional por el formato custom de pg_dump
        return self._apply_overhead(total_size)

    def backup(self, destination: Path) -> None:
        self._validate_tools(['pg_dump'])
        self._ensure_directory(destination)

        for db_name in self.config.databases:
            output_file = destination / f"{db_name}{self.file_extension}"
            partial_file = output_file.with_name(output_file.name + ".partial")
            self.logger.info(f"Ejecutando pg_dump de {db_name}")
            try:
                self._run_checked(self.dump_args(db_name, partial_file), env=self.password_env())
            except DatabaseError:
                self._discard(partial_file)
                raise
            self._promote(partial_file, output_file)
            self.logger.info(f"  ✓ {output_file.name}")

    def validate_config(self, config: BackendConfig) -> None:
        self._require(config.host, "PostgreSQL host")
        self._require(config.user, "PostgreSQL user")
        self._require_databases(config)
