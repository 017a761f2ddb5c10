from contextlib import contextmanager
from typing import Callable, List, Optional

from ...errors import DatabaseError


class ConnectionPool:
    """Short-lived ODBC connection pool, scoped to a single backup call"""

    def __init__(self, connection_string: str, max_size: int = 2, timeout: int = 30,
                 connect: Optional[Callable] = None):
        self.connection_string = connection_string
        self.max_size = max_size
        self.timeout = timeout
        self._connect = connect or self._odbc_connect
        self._idle: List = []
        self._in_use = 0
        self._closed = False

    def _odbc_connect(self, connection_string: str, timeout: int):
        # pyodbc carga libodbc al importarse; solo la estrategia nativa lo requiere
        import pyodbc
        return pyodbc.connect(connection_string, timeout=timeout)

    @contextmanager
    def acquire(self):
        if self._closed:
            raise DatabaseError("Connection pool is closed")
        if self._idle:
            conn = self._idle.pop()
        elif self._in_use < self.max_size:
            conn = self._connect(self.connection_string, self.timeout)
        else:
            raise DatabaseError(f"Connection pool exhausted ({self.max_size} connections)")

        self._in_use += 1
        try:
            yield conn
        finally:
            self._in_use -= 1
            self._idle.append(conn)

    def close(self):
        self._closed = True
        while self._idle:
            self._idle.pop().close()
