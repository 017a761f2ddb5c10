import math
from decimal import Decimal
from typing import List, TextIO

from .schema_generator import quote_identifier


def render_value(value) -> str:
    """Best-effort SQL literal; values that cannot be rendered become NULL"""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(value) if math.isfinite(value) else "NULL"
    if isinstance(value, Decimal):
        return str(value) if value.is_finite() else "NULL"
    if isinstance(value, str):
        return "'" + value.replace("\\", "\\\\").replace("'", "''") + "'"
    if isinstance(value, (bytes, bytearray, memoryview)):
        data = bytes(value)
        return "0x" + data.hex() if data else "''"
    try:
        text = str(value)
    except Exception:
        return "NULL"
    return "'" + text.replace("\\", "\\\\").replace("'", "''") + "'"


class DataGenerator:
    def __init__(self, logger, batch_rows: int = 1000):
        self.logger = logger
        self.batch_rows = batch_rows

    def generate(self, cursor, tables: List[str], writer: TextIO):
        writer.write("\n-- =============================================\n")
        writer.write("-- DATA INSERTS\n")
        writer.write("-- =============================================\n\n")

        total_tables = len(tables)
        for i, table in enumerate(tables, 1):
            self.logger.info(f"[DATA] ({i}/{total_tables}) {table}")
            rows = self.export_table(cursor, table, writer)
            self.logger.info(f"[DATA]   -> {rows} rows")

    def export_table(self, cursor, table: str, writer: TextIO) -> int:
        """Streams one table; at most `batch_rows` statements are buffered at a time"""
        cursor.execute(f"SELECT * FROM {quote_identifier(table)}")
        columns = ", ".join(quote_identifier(c[0]) for c in cursor.description)
        prefix = f"INSERT INTO {quote_identifier(table)} ({columns}) VALUES ("

        writer.write(f"-- DATA: {table}\n")
        batch = []
        total_rows = 0

        while True:
            rows = cursor.fetchmany(self.batch_rows)
            if not rows:
                break
            for row in rows:
                batch.append(prefix + ", ".join(render_value(v) for v in row) + ");\n")
                total_rows += 1
                if len(batch) >= self.batch_rows:
                    writer.write("".join(batch))
                    batch.clear()

        if batch:
            writer.write("".join(batch))
            batch.clear()

        writer.write("\n")
        return total_rows
