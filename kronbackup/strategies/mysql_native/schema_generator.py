from typing import List, TextIO


def quote_identifier(name: str) -> str:
    return "`" + str(name).replace("`", "``") + "`"


class SchemaGenerator:
    def __init__(self, logger):
        self.logger = logger

    def list_tables(self, cursor) -> List[str]:
        cursor.execute("SHOW FULL TABLES WHERE Table_type = 'BASE TABLE'")
        return [row[0] for row in cursor.fetchall()]

    def generate(self, cursor, tables: List[str], writer: TextIO):
        writer.write("\n-- =============================================\n")
        writer.write("-- SCHEMA: TABLES\n")
        writer.write("-- =============================================\n\n")

        total = len(tables)
        self.logger.info(f"[SCHEMA] Total tables: {total}")

        for i, table in enumerate(tables, 1):
            self.logger.info(f"[SCHEMA] ({i}/{total}) {table}")
            cursor.execute(f"SHOW CREATE TABLE {quote_identifier(table)}")
            row = cursor.fetchone()

            writer.write(f"\n-- TABLE: {table}\n")
            writer.write(f"DROP TABLE IF EXISTS {quote_identifier(table)};\n")
            writer.write(f"{row[1]};\n")
