"""Core data types describing tables, columns, indexes and query results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

MAGIC_NUMBER = 0x4D444247
CURRENT_VERSION = 1

DATABASE_DIR = "db"
TABLE_DIR = "db/tables"
FILE_EXTENSION = ".bin"


class ErrorCode(IntEnum):
    """Categories of database errors."""

    TABLE_NOT_FOUND = 0
    INVALID_DATA = 1
    IO = 2
    CORRUPT_FILE = 3


class DatabaseError(Exception):
    """Raised when a database operation or validation fails."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_DATA) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ColumnType(IntEnum):
    """Storage type of a column."""

    INTEGER64 = 0
    FLOAT64 = 1
    STRING = 2
    BOOLEAN = 3
    TIMESTAMP = 4

    def __str__(self) -> str:
        return _TYPE_NAMES.get(self, "UNKNOWN")


_TYPE_NAMES = {
    ColumnType.INTEGER64: "INT",
    ColumnType.FLOAT64: "FLOAT",
    ColumnType.STRING: "STRING",
    ColumnType.BOOLEAN: "BOOL",
    ColumnType.TIMESTAMP: "TIMESTAMP",
}


@dataclass
class Column:
    """A column definition."""

    name: str
    data_type: ColumnType = ColumnType.INTEGER64
    length: int = 0
    is_nullable: bool = False
    is_primary_key: bool = False


@dataclass
class FileHeader:
    """Header at the start of every table file."""

    magic: int = MAGIC_NUMBER
    version: int = CURRENT_VERSION
    metadata_length: int = 0


@dataclass
class ForeignKeyReference:
    column_name: str
    referenced_column_name: str


@dataclass
class ForeignKeyConstraint:
    referenced_table: str
    referenced_columns: list[ForeignKeyReference] = field(default_factory=list)


@dataclass
class IndexMetadata:
    name: str
    columns: list[str] = field(default_factory=list)
    is_unique: bool = False
    is_primary: bool = False


@dataclass
class TableMetadata:
    """Schema and bookkeeping information of a table."""

    name: str = ""
    column_count: int = 0
    columns: list[Column] = field(default_factory=list)
    row_count: int = 0
    data_offset: int = 0
    foreign_keys: list[ForeignKeyConstraint] = field(default_factory=list)
    indexes: list[IndexMetadata] = field(default_factory=list)

    def validate(self) -> None:
        """Raise DatabaseError if the metadata describes an invalid table."""
        if not self.name:
            raise DatabaseError("table name cannot be empty")
        if self.column_count == 0:
            raise DatabaseError("table must have at least one column")
        if self.column_count != len(self.columns):
            raise DatabaseError("column count does not match number of columns")

        has_primary_key = False
        seen: set[str] = set()
        for col in self.columns:
            if not col.name:
                raise DatabaseError("column name cannot be empty")
            if col.data_type == ColumnType.STRING and col.length == 0:
                raise DatabaseError("string column length cannot be zero")
            if col.name in seen:
                raise DatabaseError("duplicate column name")
            seen.add(col.name)
            if col.is_primary_key:
                has_primary_key = True
                if col.is_nullable:
                    raise DatabaseError("primary key column cannot be nullable")

        for fk in self.foreign_keys:
            for ref in fk.referenced_columns:
                if not ref.column_name or not ref.referenced_column_name:
                    raise DatabaseError("foreign key column name cannot be empty")

        if not has_primary_key:
            raise DatabaseError("table must have at least one primary key")


@dataclass
class Table:
    """A whole table: header, metadata and rows."""

    header: FileHeader = field(default_factory=FileHeader)
    metadata: TableMetadata = field(default_factory=TableMetadata)
    data: list[list[Any]] = field(default_factory=list)


@dataclass
class QueryResult:
    """Columns and rows returned by a query."""

    columns: list[Column] = field(default_factory=list)
    rows: list[list[Any]] = field(default_factory=list)