# app/core/oracle/builder.py
"""
BUILDER MODULE - One JSON record in, one INSERT statement out

Example:
    {"tableName": "usuarios", "id": 1, "nombre": "Juan"}
    -> INSERT INTO GANANCIAS.usuarios (id, nombre) VALUES (1, 'Juan')
"""

from typing import Any, Dict, List, Mapping, Sequence

from app.core.oracle.encoder import format_oracle_value

DEFAULT_SCHEMA = "GANANCIAS"
TABLE_NAME_KEY = "tableName"


class InsertGenerationError(ValueError):
    """A record could not be turned into an INSERT statement."""


class MissingTableName(InsertGenerationError):
    def __init__(self):
        super().__init__("tableName es requerido")


class EmptyFieldSet(InsertGenerationError):
    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(
            f"Se requiere al menos un campo además de tableName ({table_name})"
        )


def split_record(record: Mapping[str, Any]) -> tuple:
    """Separate tableName from the column fields, keeping key order."""
    table_name = record.get(TABLE_NAME_KEY)
    fields: Dict[str, Any] = {
        key: value for key, value in record.items() if key != TABLE_NAME_KEY
    }
    return table_name, fields


def build_insert(record: Mapping[str, Any], schema: str = DEFAULT_SCHEMA) -> str:
    """
    Build a single Oracle INSERT for one record.

    Raises:
        MissingTableName: tableName is absent or empty
        EmptyFieldSet: there is nothing to insert besides tableName
    """
    table_name, fields = split_record(record)

    if not table_name:
        raise MissingTableName()

    if not fields:
        raise EmptyFieldSet(table_name)

    columns = ", ".join(fields.keys())
    values = ", ".join(format_oracle_value(v) for v in fields.values())

    return f"INSERT INTO {schema}.{table_name} ({columns}) VALUES ({values})"


def build_inserts(
    records: Sequence[Mapping[str, Any]], schema: str = DEFAULT_SCHEMA
) -> List[str]:
    """Build INSERTs in input order; the first bad record aborts the batch."""
    return [build_insert(record, schema) for record in records]
