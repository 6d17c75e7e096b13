from __future__ import annotations

from typing import Optional, Set

import sqlglot
from sqlglot import expressions as exp

from .config import SQLGuardrailConfig
from .errors import ValidationFailure
from .schema_registry import SchemaRegistry

MULTI_STATEMENT_MESSAGE = "Only single SQL statements are allowed."


class SQLValidator:
    def __init__(self, guard_cfg: SQLGuardrailConfig, registry: Optional[SchemaRegistry] = None):
        self._guard_cfg = guard_cfg
        self._registry = registry or SchemaRegistry()

    def validate(self, sql: str) -> str:
        self._enforce_single_statement(sql)
        if self._guard_cfg.validate_identifiers:
            self._enforce_known_identifiers(sql)
        return sql

    def _enforce_single_statement(self, sql: str) -> None:
        # Not a parser: a quoted ';' inside a literal is also rejected.
        fragments = [frag for frag in sql.split(";") if frag.strip()]
        if len(fragments) > 1:
            raise ValidationFailure(MULTI_STATEMENT_MESSAGE)

    def _enforce_known_identifiers(self, sql: str) -> None:
        try:
            parsed = sqlglot.parse_one(sql, read=self._guard_cfg.dialect)
        except sqlglot.errors.ParseError as exc:
            raise ValidationFailure(f"Invalid SQL: {exc}") from exc

        derived = _derived_names(parsed)
        known_tables = self._registry.table_names() | derived
        for table in parsed.find_all(exp.Table):
            if table.name and table.name.lower() not in known_tables:
                raise ValidationFailure(f"Query references unknown table {table.name}")

        known_columns = self._registry.column_names() | {
            alias.alias.lower() for alias in parsed.find_all(exp.Alias) if alias.alias
        }
        for column in parsed.find_all(exp.Column):
            name = column.name
            if not name or name == "*":
                continue
            if name.lower() not in known_columns:
                raise ValidationFailure(f"Query references unknown column {name}")


def _derived_names(parsed: exp.Expression) -> Set[str]:
    names = {cte.alias_or_name.lower() for cte in parsed.find_all(exp.CTE)}
    names |= {sub.alias.lower() for sub in parsed.find_all(exp.Subquery) if sub.alias}
    return names


__all__ = ["SQLValidator", "MULTI_STATEMENT_MESSAGE"]
