"""
Estrategia de backup para MySQL/MariaDB usando mysqldump
"""
from pathlib import Path
from typing import List, Optional

from .base_strategy import BackupStrategy
from ..errors import DatabaseError, KronBackupError
from ..models import BackendConfig, ConnectionStatus, DatabaseInfo


class MySQLBackupStrategy(BackupStrategy):
    """Estrategia de backup para MySQL/MariaDB"""

    database_type = "mysql"
    file_extension = ".sql"
    size_overhead = 1.2

    def connection_args(self) -> List[str]:
        return [
            f'--host={self.config.host}',
            f'--port={self.config.port}',
            f'--user={self.config.user}',
            f'--password={self.config.password}',
        ]

    def query_args(self, query: str, database: Optional[str] = None) -> List[str]:
        """Comando `mysql` para una consulta con salida sin encabezados"""
        cmd = ['mysql'] + self.connection_args() + [
            '--batch',
            '--skip-column-names',
            f'--execute={query}',
        ]
        if database:
            cmd.append(database)
        return cmd

    def dump_args(self, database: str) -> List[str]:
        return ['mysqldump'] + self.connection_args() + [
            '--single-transaction',  # Para InnoDB sin bloqueo
            '--routines',            # Incluir procedures y functions
            '--triggers',            # Incluir triggers
            '--events',              # Incluir eventos
            '--add-drop-database',   # Agregar DROP DATABASE
            '--create-options',
            '--quick',               # Para tablas grandes
            '--databases',
            database,
        ]

    def _query(self, query: str) -> str:
        return self._run_checked(self.query_args(query)).stdout

    def _size_query(self, db_name: str) -> str:
        escaped = db_name.replace("'", "''")
        return (
            "SELECT COALESCE(SUM(data_length + index_length), 0) "
            f"FROM information_schema.tables WHERE table_schema='{escaped}'"
        )

    def _database_size(self, db_name: str) -> Optional[int]:
        line = self._first_line(self._query(self._size_query(db_name)))
        return int(float(line)) if line else None

    def probe(self) -> ConnectionStatus:
        try:
            self._query("SELECT 1")
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
                version = self._first_line(self._query("SELECT VERSION()"))
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
        # 20% adicional por el formato SQL del dump
        return self._apply_overhead(total_size)

    def backup(self, destination: Path) -> None:
        self._validate_tools(['mysqldump'])
        self._ensure_directory(destination)

        for db_name in self.config.databases:
            output_file = destination / f"{db_name}{self.file_extension}"
            partial_file = output_file.with_name(output_file.name + ".partial")
            self.logger.info(f"Ejecutando mysqldump de {db_name}")
            try:
                self._run_checked(self.dump_args(db_name), stdout_path=partial_file)
            except DatabaseError:
                # Limpiar archivo de salida en caso de error
                self._discard(partial_file)
                raise
            self._promote(partial_file, output_file)
            self.logger.info(f"  ✓ {output_file.name}")

    def validate_config(self, config: BackendConfig) -> None:
        self._require(config.host, "MySQL host")
        self._require(config.user, "MySQL user")
        self._require_databases(config)
