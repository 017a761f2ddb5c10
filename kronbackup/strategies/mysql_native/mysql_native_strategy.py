from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .connection_pool import ConnectionPool
from .data_generator import DataGenerator
from .schema_generator import SchemaGenerator, quote_identifier
from ..base_strategy import BackupStrategy
from ...errors import DatabaseError
from ...models import BackendConfig, ConnectionStatus, DatabaseInfo


class MySQLNativeBackupStrategy(BackupStrategy):
    """Exporta MySQL sin mysqldump: esquema y datos vía ODBC, fila por fila"""

    database_type = "mysql"
    file_extension = ".sql"
    size_overhead = 1.2

    DEFAULT_DRIVER = "MySQL ODBC 8.0 Unicode Driver"
    LOGIN_TIMEOUT = 30
    WRITE_BUFFER = 1024 * 1024

    def __init__(self, config: BackendConfig, settings=None, runner=None, connect=None):
        """
        Args:
            connect: Función de conexión alternativa a pyodbc.connect
        """
        super().__init__(config, settings, runner)
        self.connect = connect

    def connection_string(self) -> str:
        driver = self.config.odbc_driver or self.DEFAULT_DRIVER
        return (
            f"DRIVER={{{driver}}};"
            f"SERVER={self.config.host};"
            f"PORT={self.config.port};"
            f"UID={self.config.user};"
            f"PWD={self.config.password};"
            f"CHARSET=utf8mb4;"
        )

    def _create_pool(self) -> ConnectionPool:
        self.logger.info(f"[MYSQL] Connecting to {self.config.host}:{self.config.port}")
        return ConnectionPool(self.connection_string(), timeout=self.LOGIN_TIMEOUT, connect=self.connect)

    def _scalar(self, pool: ConnectionPool, query: str, *params):
        with pool.acquire() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(query, *params)
                row = cursor.fetchone()
            finally:
                cursor.close()
        return row[0] if row else None

    def _database_size(self, pool: ConnectionPool, db_name: str) -> Optional[int]:
        size = self._scalar(
            pool,
            "SELECT COALESCE(SUM(data_length + index_length), 0) "
            "FROM information_schema.tables WHERE table_schema = ?",
            db_name
        )
        return int(size) if size is not None else None

    def probe(self) -> ConnectionStatus:
        try:
            pool = self._create_pool()
        except Exception as e:
            return ConnectionStatus.error(f"[MYSQL] Connection error: {e}")
        try:
            self._scalar(pool, "SELECT 1")
            return ConnectionStatus.connected()
        except Exception as e:
            return ConnectionStatus.error(f"[MYSQL] Connection error: {e}")
        finally:
            pool.close()

    def list_databases(self) -> List[DatabaseInfo]:
        try:
            pool = self._create_pool()
        except Exception as e:
            self.logger.warning(f"[MYSQL] Connection error: {e}")
            return [DatabaseInfo(name=db_name) for db_name in self.config.databases]

        info = []
        try:
            for db_name in self.config.databases:
                size = None
                version = None
                try:
                    size = self._database_size(pool, db_name)
                except Exception as e:
                    self.logger.warning(f"No se pudo obtener el tamaño de {db_name}: {e}")
                try:
                    version = self._scalar(pool, "SELECT VERSION()")
                except Exception as e:
                    self.logger.warning(f"No se pudo obtener la versión de {db_name}: {e}")
                info.append(DatabaseInfo(name=db_name, size=size, version=version))
        finally:
            pool.close()
        return info

    def estimate_size(self) -> int:
        total_size = 0
        try:
            pool = self._create_pool()
        except Exception as e:
            self.logger.warning(f"[MYSQL] Connection error: {e}")
            return 0
        try:
            for db_name in self.config.databases:
                try:
                    total_size += self._database_size(pool, db_name) or 0
                except Exception as e:
                    self.logger.warning(f"No se pudo obtener el tamaño de {db_name}: {e}")
        finally:
            pool.close()
        return self._apply_overhead(total_size)

    def backup(self, destination: Path) -> None:
        self._ensure_directory(destination)
        try:
            pool = self._create_pool()
        except Exception as e:
            raise DatabaseError(f"[MYSQL] Connection error: {e}")

        try:
            for db_name in self.config.databases:
                self._export_database(pool, db_name, destination)
        finally:
            pool.close()

    def _export_database(self, pool: ConnectionPool, db_name: str, destination: Path):
        output_file = destination / f"{db_name}{self.file_extension}"
        partial_file = output_file.with_name(output_file.name + ".partial")
        schema = SchemaGenerator(self.logger)
        data = DataGenerator(self.logger, batch_rows=self.settings.native_batch_rows)

        try:
            with pool.acquire() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute(f"USE {quote_identifier(db_name)}")
                    tables = schema.list_tables(cursor)

                    with open(partial_file, "w", encoding="utf-8", buffering=self.WRITE_BUFFER) as f:
                        f.write(f"-- BACKUP OF DATABASE: {db_name}\n")
                        f.write(f"-- DATE: {datetime.now()}\n\n")
                        f.write(f"CREATE DATABASE IF NOT EXISTS {quote_identifier(db_name)};\n")
                        f.write(f"USE {quote_identifier(db_name)};\n")
                        f.write("SET FOREIGN_KEY_CHECKS=0;\n")

                        schema.generate(cursor, tables, f)
                        data.generate(cursor, tables, f)

                        f.write("SET FOREIGN_KEY_CHECKS=1;\n")
                finally:
                    cursor.close()
        except Exception as e:
            self._discard(partial_file)
            self.logger.error(f"[BACKUP] ERROR: {e}")
            raise DatabaseError(f"Native export of {db_name} failed: {e}")

        size_mb = self._promote(partial_file, output_file) / (1024 * 1024)
        self.logger.info(f"[BACKUP] Completed {output_file} ({size_mb:.2f} MB)")

    def validate_config(self, config: BackendConfig) -> None:
        self._require(config.host, "MySQL host")
        self._require(config.user, "MySQL user")
        self._require_databases(config)
