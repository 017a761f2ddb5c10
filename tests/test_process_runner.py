"""
Tests para ProcessRunner usando el intérprete actual como herramienta externa
"""
import os
import shutil
import tempfile
import unittest
from pathlib import Path
import sys

# Agregar la raíz del proyecto al path
sys.path.insert(0, str(Path(__file__).parent.parent))

from kronbackup.errors import DatabaseError
from kronbackup.strategies.process_runner import ProcessRunner


class TestProcessRunner(unittest.TestCase):
    """Tests para ProcessRunner"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.runner = ProcessRunner(timeout=30)

    def tearDown(self):
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def test_captures_stdout(self):
        result = self.runner.run([sys.executable, "-c", "print('hola')"])
        self.assertTrue(result.success)
        self.assertEqual(result.stdout.strip(), "hola")

    def test_non_zero_exit_keeps_stderr(self):
        result = self.runner.run([
            sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"
        ])
        self.assertFalse(result.success)
        self.assertEqual(result.returncode, 3)
        self.assertIn("boom", result.stderr)

    def test_env_is_local_to_the_call(self):
        """Las variables extra llegan al hijo sin tocar el entorno actual"""
        self.assertNotIn("KRONBACKUP_TEST_SECRET", os.environ)
        result = self.runner.run(
            [sys.executable, "-c", "import os; print(os.environ['KRONBACKUP_TEST_SECRET'])"],
            env={"KRONBACKUP_TEST_SECRET": "s3cret"}
        )
        self.assertEqual(result.stdout.strip(), "s3cret")
        self.assertNotIn("KRONBACKUP_TEST_SECRET", os.environ)

    def test_stdout_path(self):
        output = self.temp_dir / "dump.sql"
        result = self.runner.run(
            [sys.executable, "-c", "print('CREATE TABLE t (id INT);')"],
            stdout_path=output
        )
        self.assertTrue(result.success)
        self.assertEqual(result.stdout, "")
        self.assertEqual(output.read_text().strip(), "CREATE TABLE t (id INT);")

    def test_missing_executable(self):
        with self.assertRaises(DatabaseError) as ctx:
            self.runner.run(["kronbackup-no-such-tool", "--version"])
        self.assertIn("kronbackup-no-such-tool", str(ctx.exception))

    def test_timeout(self):
        runner = ProcessRunner(timeout=0.5)
        with self.assertRaises(DatabaseError) as ctx:
            runner.run([sys.executable, "-c", "import time; time.sleep(10)"])
        self.assertIn("Timeout", str(ctx.exception))

    def test_which(self):
        self.assertIsNone(self.runner.which("kronbackup-no-such-tool"))


if __name__ == '__main__':
    unittest.main()
