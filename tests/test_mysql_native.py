"""
Tests para la exportación nativa de MySQL vía ODBC
"""
import io
import logging
import shutil
import tempfile
import unittest
from decimal import Decimal
from pathlib import Path
import sys

# Agregar la raíz del proyecto al path
sys.path.insert(0, str(Path(__file__).parent.parent))

from kronbackup.errors import DatabaseError
from kronbackup.models import BackendConfig, BackupSettings, ConnectionState
from kronbackup.strategies.mysql_native import MySQLNativeBackupStrategy
from kronbackup.strategies.mysql_native.connection_pool import ConnectionPool
from kronbackup.strategies.mysql_native.data_generator import DataGenerator, render_value
from kronbackup.strategies.mysql_native.schema_generator import quote_identifier
from tests.fakes import FakeCursor, FakeODBC


USERS_DDL = "CREATE TABLE `users` (`id` int NOT NULL, `name` varchar(50), PRIMARY KEY (`id`))"
ORDERS_DDL = "CREATE TABLE `orders` (`id` int NOT NULL, `total` decimal(10,2))"


def sample_server(order_rows=2):
    return {
        "shop": {
            "users": (USERS_DDL, ["id", "name"], [(1, "Ana"), (2, "O'Brien"), (3, None)]),
            "orders": (ORDERS_DDL, ["id", "total"],
                       [(i, Decimal("9.99")) for i in range(1, order_rows + 1)]),
        }
    }


class WriterSpy(io.StringIO):
    """Registra el tamaño de cada escritura de INSERTs"""

    def __init__(self):
        super().__init__()
        self.insert_batches = []

    def write(self, text):
        if text.startswith("INSERT"):
            self.insert_batches.append(text.count("\n"))
        return super().write(text)


class TestRenderValue(unittest.TestCase):

    def test_literals(self):
        self.assertEqual(render_value(None), "NULL")
        self.assertEqual(render_value(True), "1")
        self.assertEqual(render_value(42), "42")
        self.assertEqual(render_value(Decimal("1.50")), "1.50")
        self.assertEqual(render_value("it's"), "'it''s'")
        self.assertEqual(render_value("a\\b"), "'a\\\\b'")
        self.assertEqual(render_value(b"\x01\xff"), "0x01ff")
        self.assertEqual(render_value(b""), "''")

    def test_non_finite_numbers_become_null(self):
        self.assertEqual(render_value(float("nan")), "NULL")
        self.assertEqual(render_value(float("inf")), "NULL")
        self.assertEqual(render_value(float("-inf")), "NULL")
        self.assertEqual(render_value(Decimal("NaN")), "NULL")
        self.assertEqual(render_value(Decimal("Infinity")), "NULL")
        self.assertEqual(render_value(2.5), "2.5")

    def test_unrenderable_value_becomes_null(self):
        class Broken:
            def __str__(self):
                raise RuntimeError("no text form")

        self.assertEqual(render_value(Broken()), "NULL")

    def test_quote_identifier(self):
        self.assertEqual(quote_identifier("weird`name"), "`weird``name`")


class TestDataGenerator(unittest.TestCase):

    def test_flushes_in_bounded_batches(self):
        """2500 filas con lote de 1000 se escriben como 1000, 1000 y 500"""
        server = {"big": {"events": ("", ["id"], [(i,) for i in range(2500)])}}
        cursor = FakeCursor(server)
        cursor.execute("USE `big`")
        writer = WriterSpy()

        rows = DataGenerator(logging.getLogger("test"), batch_rows=1000).export_table(cursor, "events", writer)

        self.assertEqual(rows, 2500)
        self.assertEqual(writer.insert_batches, [1000, 1000, 500])
        self.assertIn("INSERT INTO `events` (`id`) VALUES (2499);", writer.getvalue())


class TestConnectionPool(unittest.TestCase):

    def test_reuses_idle_connections(self):
        odbc = FakeODBC(sample_server())
        pool = ConnectionPool("DSN=x", connect=odbc)
        with pool.acquire() as first:
            pass
        with pool.acquire() as second:
            pass
        self.assertIs(first, second)
        self.assertEqual(len(odbc.connections), 1)

    def test_exhausted_and_closed(self):
        pool = ConnectionPool("DSN=x", max_size=1, connect=FakeODBC(sample_server()))
        with pool.acquire():
            with self.assertRaises(DatabaseError):
                with pool.acquire():
                    pass
        pool.close()
        with self.assertRaises(DatabaseError):
            with pool.acquire():
                pass


class TestMySQLNativeBackupStrategy(unittest.TestCase):
    """Tests para MySQLNativeBackupStrategy"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.destination = self.temp_dir / "out"
        self.config = BackendConfig(
            host="db.local", port=3306, user="backup", password="pw",
            databases=["shop"], strategy="native"
        )
        self.settings = BackupSettings(native_batch_rows=2)

    def tearDown(self):
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def test_connection_string(self):
        strategy = MySQLNativeBackupStrategy(self.config, self.settings)
        cs = strategy.connection_string()
        self.assertIn("DRIVER={MySQL ODBC 8.0 Unicode Driver};", cs)
        self.assertIn("SERVER=db.local;", cs)
        self.assertIn("PORT=3306;", cs)
        self.assertIn("CHARSET=utf8mb4;", cs)

    def test_backup_writes_schema_and_data(self):
        odbc = FakeODBC(sample_server(order_rows=5))
        strategy = MySQLNativeBackupStrategy(self.config, self.settings, connect=odbc)
        strategy.backup(self.destination)

        content = (self.destination / "shop.sql").read_text(encoding="utf-8")
        self.assertIn("CREATE DATABASE IF NOT EXISTS `shop`;", content)
        self.assertIn("DROP TABLE IF EXISTS `users`;", content)
        self.assertIn(USERS_DDL + ";", content)
        self.assertIn("INSERT INTO `users` (`id`, `name`) VALUES (2, 'O''Brien');", content)
        self.assertIn("INSERT INTO `users` (`id`, `name`) VALUES (3, NULL);", content)
        self.assertEqual(content.count("INSERT INTO `orders`"), 5)
        self.assertTrue(content.rstrip().endswith("SET FOREIGN_KEY_CHECKS=1;"))
        self.assertLess(content.index("SET FOREIGN_KEY_CHECKS=0;"), content.index("INSERT INTO"))

    def test_pool_closed_after_backup(self):
        odbc = FakeODBC(sample_server())
        MySQLNativeBackupStrategy(self.config, self.settings, connect=odbc).backup(self.destination)
        self.assertTrue(odbc.connections)
        self.assertTrue(all(conn.closed for conn in odbc.connections))

    def test_failed_export_leaves_no_file(self):
        config = BackendConfig(host="db.local", port=3306, user="backup", databases=["missing"])
        odbc = FakeODBC(sample_server())
        strategy = MySQLNativeBackupStrategy(config, self.settings, connect=odbc)

        with self.assertRaises(DatabaseError) as ctx:
            strategy.backup(self.destination)

        self.assertIn("missing", str(ctx.exception))
        self.assertEqual(list(self.destination.iterdir()), [])
        self.assertTrue(all(conn.closed for conn in odbc.connections))

    def test_connection_failure(self):
        odbc = FakeODBC(sample_server(), fail=RuntimeError("Can't connect to MySQL server"))
        strategy = MySQLNativeBackupStrategy(self.config, self.settings, connect=odbc)

        status = strategy.probe()
        self.assertEqual(status.state, ConnectionState.ERROR)
        self.assertIn("Can't connect", status.message)

        with self.assertRaises(DatabaseError):
            strategy.backup(self.destination)

    def test_probe_and_metadata(self):
        strategy = MySQLNativeBackupStrategy(self.config, self.settings, connect=FakeODBC(sample_server()))
        self.assertTrue(strategy.probe().is_connected)

        infos = strategy.list_databases()
        self.assertEqual(infos[0].name, "shop")
        self.assertEqual(infos[0].size, 12345)
        self.assertEqual(infos[0].version, "8.0.36")
        self.assertEqual(strategy.estimate_size(), int(12345 * 1.2))


if __name__ == '__main__':
    unittest.main()
