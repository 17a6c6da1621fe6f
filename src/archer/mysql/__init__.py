"""MySQL schema import."""

from archer.mysql.importer import (
    ForeignKeyInfo,
    MySqlImporter,
    MySqlImportError,
    TableInfo,
    create_table_name_parts,
    import_foreign_keys,
    import_tables,
)

__all__ = [
    "ForeignKeyInfo",
    "MySqlImporter",
    "MySqlImportError",
    "TableInfo",
    "create_table_name_parts",
    "import_foreign_keys",
    "import_tables",
]
