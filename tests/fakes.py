"""
Dobles de prueba compartidos por los tests
"""
from pathlib import Path
from typing import Callable, List, Optional

from kronbackup.models import BackendConfig, ConnectionStatus, DatabaseInfo
from kronbackup.strategies.base_strategy import BackupStrategy
from kronbackup.strategies.process_runner import ProcessResult, ProcessRunner


class FakeRunner(ProcessRunner):
    """Registra los comandos y responde según `handler(args)` sin lanzar procesos"""

    def __init__(self, handler: Optional[Callable] = None, missing_tools=()):
        super().__init__(timeout=10)
        self.handler = handler or (lambda args: ProcessResult(0, "", ""))
        self.missing_tools = set(missing_tools)
        self.calls = []

    def which(self, tool):
        return None if tool in self.missing_tools else f"/usr/bin/{tool}"

    def run(self, args, env=None, stdout_path=None):
        self.calls.append({'args': list(args), 'env': env, 'stdout_path': stdout_path})
        result = self.handler(list(args))
        if stdout_path is not None:
            Path(stdout_path).write_text(result.stdout, encoding='utf-8')
            return ProcessResult(result.returncode, "", result.stderr)
        return result


class FakeCursor:
    """Cursor ODBC mínimo sobre un diccionario {base: {tabla: (ddl, columnas, filas)}}"""

    def __init__(self, server):
        self.server = server
        self.description = None
        self._rows = []
        self.current_db = None
        self.executed = []

    def execute(self, sql, *params):
        self.executed.append((sql, params))
        sql = sql.strip()
        if sql.startswith("USE "):
            self.current_db = sql[4:].strip("`")
            self._rows = []
        elif sql.startswith("SHOW FULL TABLES"):
            self._rows = [(name, 'BASE TABLE') for name in self.server[self.current_db]]
        elif sql.startswith("SHOW CREATE TABLE"):
            table = sql.split()[-1].strip("`")
            self._rows = [(table, self.server[self.current_db][table][0])]
        elif sql.startswith("SELECT * FROM"):
            table = sql.split()[-1].strip("`")
            _, columns, rows = self.server[self.current_db][table]
            self.description = [(c, None, None, None, None, None, True) for c in columns]
            self._rows = list(rows)
        elif "information_schema" in sql:
            self._rows = [(12345,)] if params and params[0] in self.server else [(None,)]
        elif "VERSION()" in sql:
            self._rows = [("8.0.36",)]
        elif sql == "SELECT 1":
            self._rows = [(1,)]
        else:
            raise RuntimeError(f"unexpected query: {sql}")
        return self

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def fetchmany(self, size):
        rows, self._rows = self._rows[:size], self._rows[size:]
        return rows

    def close(self):
        pass


class FakeConnection:
    def __init__(self, server):
        self.server = server
        self.closed = False

    def cursor(self):
        return FakeCursor(self.server)

    def close(self):
        self.closed = True


class FakeODBC:
    """Reemplazo de pyodbc.connect que registra cada conexión abierta"""

    def __init__(self, server, fail: Optional[Exception] = None):
        self.server = server
        self.fail = fail
        self.connections: List[FakeConnection] = []
        self.connection_strings = []

    def __call__(self, connection_string, timeout):
        self.connection_strings.append(connection_string)
        if self.fail is not None:
            raise self.fail
        conn = FakeConnection(self.server)
        self.connections.append(conn)
        return conn


class ScriptedStrategy(BackupStrategy):
    """Estrategia con respuestas predefinidas para probar el orquestador"""

    database_type = "scripted"

    def __init__(self, config: BackendConfig, settings=None, runner=None,
                 status: Optional[ConnectionStatus] = None, backup_error: Optional[Exception] = None,
                 calls: Optional[list] = None, db_type: str = "scripted"):
        super().__init__(config, settings, runner)
        self.database_type = db_type
        self.status = status or ConnectionStatus.connected()
        self.backup_error = backup_error
        self.calls = calls if calls is not None else []

    def probe(self):
        self.calls.append((self.database_type, 'probe'))
        return self.status

    def list_databases(self):
        self.calls.append((self.database_type, 'list_databases'))
        return [DatabaseInfo(name=name, size=2048) for name in self.config.databases]

    def estimate_size(self):
        self.calls.append((self.database_type, 'estimate_size'))
        return 4096

    def backup(self, destination: Path):
        self.calls.append((self.database_type, 'backup'))
        if self.backup_error is not None:
            raise self.backup_error
        destination.mkdir(parents=True, exist_ok=True)
        for name in self.config.databases:
            (destination / f"{name}.{self.database_type}").write_text("ok")

    def validate_config(self, config):
        self.calls.append((self.database_type, 'validate_config'))


class ScriptedFactory:
    """Factory que devuelve ScriptedStrategy configuradas por tipo"""

    def __init__(self, statuses=None, errors=None):
        self.statuses = statuses or {}
        self.errors = errors or {}
        self.calls = []
        self.created = []

    def create(self, db_type, config, settings=None, runner=None):
        self.created.append(db_type)
        return ScriptedStrategy(
            config, settings, runner,
            status=self.statuses.get(db_type),
            backup_error=self.errors.get(db_type),
            calls=self.calls,
            db_type=db_type
        )
