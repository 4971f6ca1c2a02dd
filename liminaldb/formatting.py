"""Render query results and table descriptions as text tables."""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Sequence

from liminaldb.types import Column, ColumnType, QueryResult, Table, TableMetadata


def _float_text(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    dec = Decimal(repr(value))
    exp = dec.adjusted()
    if -4 <= exp < 21:
        return format(dec.normalize(), "f")
    sign, digits, _ = dec.as_tuple()
    text = "".join(map(str, digits)).rstrip("0") or "0"
    mantissa = text[0] + ("." + text[1:] if len(text) > 1 else "")
    return f"{'-' if sign else ''}{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp):02d}"


def _text(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _float_text(value)
    return str(value)


def format_value(value: Any) -> str:
    """Render one cell value; None shows as NULL."""
    return "NULL" if value is None else _text(value)


def format_column_type(column: Column) -> str:
    """Render a column's type as shown by DESC TABLE."""
    if column.data_type == ColumnType.STRING:
        return f"STRING({column.length})" if column.length > 0 else "STRING"
    return {
        ColumnType.INTEGER64: "INT",
        ColumnType.FLOAT64: "FLOAT",
        ColumnType.BOOLEAN: "BOOL",
    }.get(column.data_type, "UNKNOWN")


def _border(widths: Sequence[int]) -> str:
    return "+" + "".join("-" * (w + 2) + "+" for w in widths) + "\n"


def _grid(columns: Sequence[Column], rows: Sequence[Sequence[Any]]) -> str:
    widths = [
        max([len(col.name)] + [len(_text(row[i])) for row in rows if i < len(row)])
        for i, col in enumerate(columns)
    ]
    parts = [
        _border(widths),
        "|" + "".join(f" {col.name:<{w}} |" for col, w in zip(columns, widths)) + "\n",
        _border(widths),
    ]
    parts.extend(
        "|" + "".join(f" {format_value(v):<{w}} |" for v, w in zip(row, widths)) + "\n"
        for row in rows
    )
    parts.append(_border(widths))
    parts.append(f"{len(rows)} row(s) in set\n")
    return "".join(parts)


def format_table(table: Table) -> str:
    if not table.data:
        return "Empty set"
    return _grid(table.metadata.columns, table.data)


def format_query_result(result: QueryResult) -> str:
    if not result.rows:
        return "No rows found"
    return _grid(result.columns, result.rows)


def format_table_metadata(metadata: TableMetadata) -> str:
    headers = ("Field", "Type", "Null", "Primary Key")
    body = [
        (
            col.name,
            format_column_type(col),
            "YES" if col.is_nullable else "NO",
            "YES" if col.is_primary_key else "NO",
        )
        for col in metadata.columns
    ]
    widths = [len(h) for h in headers]
    for row in body:
        widths[0] = max(widths[0], len(row[0]))
        widths[1] = max(widths[1], len(row[1]))

    def line(cells: Sequence[str]) -> str:
        return "| " + " | ".join(f"{c:<{w}}" for c, w in zip(cells, widths)) + " |\n"

    border = _border(widths)
    return border + line(headers) + border + "".join(line(r) for r in body) + border


def format_result(result: Any) -> str:
    """Render any statement result for display."""
    if isinstance(result, Table):
        return format_table(result)
    if isinstance(result, TableMetadata):
        return format_table_metadata(result)
    if isinstance(result, QueryResult):
        return format_query_result(result)
    if isinstance(result, str):
        return result
    return _text(result)