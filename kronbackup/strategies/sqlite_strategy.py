"""
Estrategia de backup para SQLite (copia en línea por páginas)
"""
import math
import sqlite3
import time
from pathlib import Path
from typing import List, Optional

from .base_strategy import BackupStrategy
from ..errors import ConfigError, DatabaseError
from ..models import BackendConfig, ConnectionStatus, DatabaseInfo


class SQLiteBackupStrategy(BackupStrategy):
    """Estrategia de backup para archivos SQLite"""

    database_type = "sqlite"
    file_extension = ".bak"
    size_overhead = 1.0

    def _database_path(self, db_name: str) -> Path:
        return Path(self.config.host) / db_name

    @staticmethod
    def _open_read_only(path: Path) -> sqlite3.Connection:
        """Abre el archivo en modo solo lectura sin bloquear a otros procesos"""
        return sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)

    def probe(self) -> ConnectionStatus:
        for db_name in self.config.databases:
            db_path = self._database_path(db_name)
            try:
                conn = self._open_read_only(db_path)
                try:
                    conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
                finally:
                    conn.close()
            except sqlite3.Error as e:
                return ConnectionStatus.error(f"Failed to open SQLite database {db_path}: {e}")
        return ConnectionStatus.connected()

    def list_databases(self) -> List[DatabaseInfo]:
        info = []
        for db_name in self.config.databases:
            db_path = self._database_path(db_name)
            size = self._file_size(db_path)
            version = None
            if db_path.exists():
                try:
                    conn = self._open_read_only(db_path)
                    try:
                        version = conn.execute("SELECT sqlite_version()").fetchone()[0]
                    finally:
                        conn.close()
                except sqlite3.Error as e:
                    self.logger.warning(f"No se pudo obtener la versión de {db_name}: {e}")
            else:
                self.logger.warning(f"Archivo de base de datos no encontrado: {db_path}")
            info.append(DatabaseInfo(name=db_name, size=size, version=version))
        return info

    def estimate_size(self) -> int:
        total_size = 0
        for db_name in self.config.databases:
            size = self._file_size(self._database_path(db_name))
            if size is not None:
                total_size += size
        # La copia conserva el mismo formato
        return self._apply_overhead(total_size)

    def backup(self, destination: Path) -> None:
        for db_name in self.config.databases:
            source_path = self._database_path(db_name)
            if not source_path.exists():
                raise DatabaseError(f"Database file not found: {source_path}")

            self._ensure_directory(destination)
            dest_path = destination / f"{db_name}{self.file_extension}"

            self.logger.info(f"Copiando {source_path} -> {dest_path}")
            steps = self.copy_database(source_path, dest_path)
            self.logger.info(f"  ✓ {db_name}: copia completada en {steps} paso(s)")

    def copy_database(self, source_path: Path, dest_path: Path) -> int:
        """
        Copia en línea un archivo SQLite por bloques de páginas

        Copia `sqlite_step_pages` páginas por paso y espera `sqlite_step_sleep`
        segundos entre pasos, de modo que el origen sigue disponible para
        otros lectores y escritores durante la copia.

        Args:
            source_path: Archivo de origen
            dest_path: Archivo de destino (se crea o se sobrescribe)

        Returns:
            Cantidad de pasos ejecutados

        Raises:
            DatabaseError: si falla la apertura, la copia o el cierre
        """
        step_pages = self.settings.sqlite_step_pages
        step_sleep = self.settings.sqlite_step_sleep
        steps = 0

        def on_step(status, remaining, total):
            nonlocal steps
            steps += 1
            self.logger.debug(f"    paso {steps}: {total - remaining}/{total} páginas")
            if remaining > 0 and step_sleep > 0:
                time.sleep(step_sleep)

        try:
            source_conn = self._open_read_only(source_path)
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to open source SQLite DB: {e}")

        dest_conn: Optional[sqlite3.Connection] = None
        failure: Optional[DatabaseError] = None
        try:
            dest_conn = sqlite3.connect(str(dest_path))
            page_count = source_conn.execute("PRAGMA page_count").fetchone()[0]
            self.logger.info(
                f"  {page_count} páginas en {math.ceil(page_count / step_pages) if page_count else 0} "
                f"paso(s) de {step_pages}"
            )
            source_conn.backup(dest_conn, pages=step_pages, progress=on_step)
        except sqlite3.Error as e:
            failure = DatabaseError(f"Failed to execute backup: {e}")
        finally:
            # Orden de cierre: origen antes que destino, también ante errores
            try:
                source_conn.close()
            except sqlite3.Error as e:
                failure = failure or DatabaseError(f"Failed to close source connection: {e}")
            if dest_conn is not None:
                try:
                    dest_conn.close()
                except sqlite3.Error as e:
                    failure = failure or DatabaseError(f"Failed to close destination connection: {e}")

        if failure is not None:
            self._discard(dest_path)
            raise failure
        return steps

    def validate_config(self, config: BackendConfig) -> None:
        if not config.host:
            raise ConfigError("SQLite host (directory path) cannot be empty")
        if not config.databases:
            raise ConfigError("At least one database file must be specified")

        host_path = Path(config.host)
        if not host_path.is_dir():
            raise ConfigError(f"SQLite host directory does not exist: {config.host}")

        for db_name in config.databases:
            db_path = host_path / db_name
            if not db_path.exists():
                raise ConfigError(f"SQLite database file does not exist: {db_path}")

    def _file_size(self, db_path: Path) -> Optional[int]:
        try:
            return db_path.stat().st_size
        except OSError as e:
            self.logger.warning(f"No se pudo obtener el tamaño de {db_path}: {e}")
            return None
