from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from .config import SchemaConfig


@dataclass(frozen=True)
class TableSchema:
    name: str
    columns: Dict[str, str] = field(default_factory=dict)

    def describe(self) -> str:
        cols = ", ".join(f"{col} {col_type}" for col, col_type in self.columns.items())
        return f"- {self.name} ({cols})"


DEFAULT_TABLES = (
    TableSchema(
        "ad_sales",
        {
            "product_id": "TEXT",
            "date": "DATE",
            "ad_spend": "NUMERIC",
            "ad_sales": "NUMERIC",
            "clicks": "INTEGER",
            "impressions": "INTEGER",
        },
    ),
    TableSchema(
        "total_sales",
        {
            "product_id": "TEXT",
            "date": "DATE",
            "total_sales_units": "INTEGER",
            "total_sales_revenue": "NUMERIC",
        },
    ),
    TableSchema(
        "eligibility",
        {
            "product_id": "TEXT",
            "product_name": "TEXT",
            "is_eligible": "BOOLEAN",
        },
    ),
)


class SchemaRegistry:
    """Static description of the tables the SQL generator may query.

    The rendered text is prompt context only. It has to be kept in step with
    the tables that actually exist in the data store.
    """

    def __init__(self, tables: Optional[Iterable[TableSchema]] = None):
        self._tables: Dict[str, TableSchema] = {}
        for table in tables if tables is not None else DEFAULT_TABLES:
            self._tables[table.name.lower()] = table
        self._description = "\n".join(table.describe() for table in self._tables.values())

    @classmethod
    def from_config(cls, cfg: SchemaConfig) -> "SchemaRegistry":
        if not cfg.tables:
            return cls()
        return cls(TableSchema(t.name, dict(t.columns)) for t in cfg.tables)

    def describe(self) -> str:
        return self._description

    def table_names(self) -> Set[str]:
        return set(self._tables.keys())

    def column_names(self) -> Set[str]:
        return {col.lower() for table in self._tables.values() for col in table.columns}

    def tables(self) -> List[TableSchema]:
        return list(self._tables.values())


__all__ = ["TableSchema", "SchemaRegistry", "DEFAULT_TABLES"]
