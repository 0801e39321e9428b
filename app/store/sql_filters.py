"""
SQL Filter Compilation
Turns the clauses of a document filter that SQL can answer into WHERE
fragments over the JSON `data` column. Anything it cannot express
(regex, geo radius, dotted paths) is handed back as a residual filter for
the Python matcher.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from app.store.filters import SortSpec
from app.utils import as_utc

RANGE_OPERATORS = {"$gt": ">", "$gte": ">=", "$lt": "<", "$lte": "<="}

# Bookkeeping timestamps mirrored into real columns on every write
COLUMN_SORT_FIELDS = ("created_at", "updated_at")

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, bool, int, float)) and not isinstance(value, datetime)


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class FilterCompiler:
    """
    One compiler per query; it accumulates the bound parameters

    Equality keeps the document semantics: a scalar field matches on equality,
    an array field matches when any element is equal.
    """

    def __init__(self, dialect: str):
        self.dialect = dialect
        self.params: Dict[str, Any] = {}

    @property
    def _false(self) -> str:
        return "0" if self.dialect == "sqlite" else "FALSE"

    def _bind(self, value: Any) -> str:
        name = f"f{len(self.params)}"
        self.params[name] = value
        return f":{name}"

    # Per-dialect JSON accessors

    def _path(self, field: str) -> str:
        return f"'$.{field}'"

    def _json(self) -> str:
        return "CAST(data AS JSON)"

    def _equals(self, field: str, value: Any) -> str:
        value = _plain(value)
        if self.dialect == "sqlite":
            path = self._path(field)
            v = self._bind(int(value) if isinstance(value, bool) else value)
            return (
                f"(json_extract(data, {path}) = {v} OR (json_type(data, {path}) = 'array' "
                f"AND EXISTS (SELECT 1 FROM json_each(data, {path}) WHERE json_each.value = {v})))"
            )
        if isinstance(value, bool):
            text = "true" if value else "false"
        else:
            text = str(value)
        v = self._bind(text)
        node = f"({self._json()} -> '{field}')"
        return (
            f"(({self._json()} ->> '{field}') = {v} OR EXISTS (SELECT 1 FROM json_array_elements_text("
            f"CASE WHEN json_typeof{node} = 'array' THEN {node} ELSE CAST('[]' AS JSON) END"
            f") AS elem(value) WHERE elem.value = {v}))"
        )

    def _is_null(self, field: str) -> str:
        if self.dialect == "sqlite":
            path = self._path(field)
            return f"(json_type(data, {path}) IS NULL OR json_type(data, {path}) = 'null')"
        node = f"({self._json()} -> '{field}')"
        return f"({node} IS NULL OR json_typeof{node} = 'null')"

    def _range(self, field: str, op: str, operand: Any) -> Optional[str]:
        sql_op = RANGE_OPERATORS[op]
        if isinstance(operand, datetime):
            moment = as_utc(operand)
            if self.dialect == "sqlite":
                v = self._bind(moment.isoformat())
                return f"julianday(json_extract(data, {self._path(field)})) {sql_op} julianday({v})"
            v = self._bind(moment)
            return f"CAST({self._json()} ->> '{field}' AS TIMESTAMPTZ) {sql_op} {v}"
        if isinstance(operand, (int, float)) and not isinstance(operand, bool):
            if self.dialect == "sqlite":
                path = self._path(field)
                v = self._bind(operand)
                return (
                    f"(json_type(data, {path}) IN ('integer', 'real') "
                    f"AND json_extract(data, {path}) {sql_op} {v})"
                )
            node = f"({self._json()} -> '{field}')"
            v = self._bind(float(operand))
            return (
                f"(json_typeof{node} = 'number' "
                f"AND CAST({self._json()} ->> '{field}' AS DOUBLE PRECISION) {sql_op} {v})"
            )
        return None

    def _not(self, clause: str) -> str:
        return f"NOT COALESCE({clause}, {self._false})"

    def _clause(self, field: str, condition: Any) -> Optional[str]:
        """SQL for one field condition, or None when it has to stay in Python"""
        if not _FIELD_NAME.match(field):
            return None

        if not isinstance(condition, dict):
            if condition is None:
                return self._is_null(field)
            return self._equals(field, condition) if _is_scalar(condition) else None

        if not condition or not all(k.startswith("$") for k in condition):
            return None

        # Params bound for a condition that ends up in Python must not reach the query
        saved = dict(self.params)
        parts = []
        for op, operand in condition.items():
            if op == "$eq":
                part = self._clause(field, operand)
            elif op == "$ne":
                if operand is None:
                    part = f"NOT {self._is_null(field)}"
                else:
                    part = self._not(self._equals(field, operand)) if _is_scalar(operand) else None
            elif op in ("$in", "$nin"):
                if not isinstance(operand, (list, tuple)) or not all(_is_scalar(o) for o in operand):
                    part = None
                else:
                    any_of = " OR ".join(self._equals(field, o) for o in operand) or "1 = 0"
                    part = f"({any_of})" if op == "$in" else self._not(f"({any_of})")
            elif op in RANGE_OPERATORS:
                part = self._range(field, op, operand)
            else:
                part = None
            if part is None:
                self.params = saved
                return None
            parts.append(part)
        return " AND ".join(parts)

    def compile(self, flt: Optional[dict]) -> Tuple[List[str], dict]:
        """
        Split a filter into SQL clauses and a residual filter

        Every returned clause must hold for a document to match; the residual
        is whatever the Python matcher still has to check.
        """
        clauses: List[str] = []
        residual: dict = {}
        for key, condition in (flt or {}).items():
            if key == "$and":
                rest = []
                for sub in condition:
                    sub_clauses, sub_residual = self.compile(sub)
                    clauses.extend(sub_clauses)
                    if sub_residual:
                        rest.append(sub_residual)
                if rest:
                    residual["$and"] = rest
                continue

            if key == "$or":
                saved = dict(self.params)
                branches = []
                for sub in condition:
                    sub_clauses, sub_residual = self.compile(sub)
                    if sub_residual:
                        branches = None
                        break
                    branches.append("(" + (" AND ".join(sub_clauses) or "1 = 1") + ")")
                if branches is None:
                    self.params = saved
                    residual[key] = condition
                else:
                    clauses.append("(" + (" OR ".join(branches) or "1 = 0") + ")")
                continue

            clause = self._clause(key, condition)
            if clause is None:
                residual[key] = condition
            else:
                clauses.append(clause)
        return clauses, residual


def column_order(sort: Optional[SortSpec]) -> Optional[str]:
    """ORDER BY over the timestamp columns, or None when a sort field lives only in the JSON body"""
    terms = []
    for field, direction in sort or []:
        if field not in COLUMN_SORT_FIELDS:
            return None
        terms.append(f"{field} {'DESC' if direction < 0 else 'ASC'}")
    return ", ".join(terms)
