"""Binary encoding of table files, and reading and writing them on disk.

A table file holds a fixed header, a metadata section and then the rows:

* header: magic number, format version, metadata length;
* metadata: table name, column count, columns, row count, data offset,
  foreign key count and index definitions;
* data: the serialized rows, one after another.
"""

from __future__ import annotations

import io
import math
import struct
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Optional, Sequence, Union

from liminaldb.btree import Index, deserialize_index
from liminaldb.types import (
    FILE_EXTENSION,
    MAGIC_NUMBER,
    TABLE_DIR,
    Column,
    ColumnType,
    DatabaseError,
    ErrorCode,
    FileHeader,
    IndexMetadata,
    Table,
    TableMetadata,
)

ReaderLike = Union[BinaryIO, bytes, bytearray, memoryview]


class _Truncated(DatabaseError):
    """The data ended before a value could be read in full."""

    def __init__(self) -> None:
        super().__init__("unexpected end of data", ErrorCode.CORRUPT_FILE)


def _as_reader(source: ReaderLike) -> BinaryIO:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(source))
    return source


def _read(reader: BinaryIO, size: int) -> bytes:
    chunk = reader.read(size)
    if len(chunk) < size:
        raise _Truncated()
    return chunk


def _unpack(reader: BinaryIO, fmt: str) -> Any:
    st = struct.Struct("<" + fmt)
    return st.unpack(_read(reader, st.size))[0]


def _read_bool(reader: BinaryIO) -> bool:
    return _unpack(reader, "B") != 0


def _read_string(reader: BinaryIO) -> str:
    length = _unpack(reader, "H")
    raw = _read(reader, length)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DatabaseError(f"invalid text in table data: {exc}", ErrorCode.CORRUPT_FILE) from exc


def _pack(fmt: str, value: Any) -> bytes:
    try:
        return struct.pack("<" + fmt, value)
    except struct.error as exc:
        raise DatabaseError(f"cannot encode value {value!r}: {exc}") from exc


def _pack_string(text: str) -> bytes:
    raw = text.encode("utf-8")
    return _pack("H", len(raw)) + raw


def _expect_type(column: Column, expected: ColumnType) -> None:
    if column.data_type != expected:
        raise DatabaseError(f"data type mismatch for column {column.name}")


def _encode_value(value: Any, column: Column) -> bytes:
    if isinstance(value, bool):
        _expect_type(column, ColumnType.BOOLEAN)
        return b"\x01" if value else b"\x00"
    if isinstance(value, int):
        _expect_type(column, ColumnType.INTEGER64)
        return _pack("q", value)
    if isinstance(value, float):
        _expect_type(column, ColumnType.FLOAT64)
        return _pack("d", value)
    if isinstance(value, str):
        _expect_type(column, ColumnType.STRING)
        raw = value.encode("utf-8")
        if len(raw) > column.length:
            raise DatabaseError(f"string too long for column {column.name}")
        return _pack("H", len(raw)) + raw
    if isinstance(value, datetime):
        _expect_type(column, ColumnType.TIMESTAMP)
        return _pack("q", math.floor(value.timestamp()))
    raise DatabaseError(f"unsupported data type for column {column.name}")


def _decode_value(reader: BinaryIO, column: Column) -> Any:
    kind = column.data_type
    if kind == ColumnType.INTEGER64:
        return _unpack(reader, "q")
    if kind == ColumnType.FLOAT64:
        return _unpack(reader, "d")
    if kind == ColumnType.STRING:
        return _read_string(reader)
    if kind == ColumnType.BOOLEAN:
        return _unpack(reader, "B") == 1
    if kind == ColumnType.TIMESTAMP:
        seconds = _unpack(reader, "q")
        try:
            return datetime.fromtimestamp(seconds).astimezone()
        except (OverflowError, OSError, ValueError) as exc:
            raise DatabaseError(f"invalid timestamp {seconds}", ErrorCode.CORRUPT_FILE) from exc
    raise DatabaseError(f"unhandled column type {kind}", ErrorCode.CORRUPT_FILE)


def _column_type(raw: int) -> ColumnType:
    try:
        return ColumnType(raw)
    except ValueError as exc:
        raise DatabaseError(f"unknown column type {raw}", ErrorCode.CORRUPT_FILE) from exc


def _count(reader: BinaryIO) -> int:
    value = _unpack(reader, "q")
    if value < 0:
        raise DatabaseError(f"negative count {value}", ErrorCode.CORRUPT_FILE)
    return value


class BinarySerializer:
    """Encodes tables in the binary file format and stores them under tables_dir."""

    def __init__(self, tables_dir: Union[str, Path] = TABLE_DIR) -> None:
        self.tables_dir = Path(tables_dir)

    def table_path(self, name: str) -> Path:
        """Return the path of the file holding table name."""
        return self.tables_dir / f"{name}{FILE_EXTENSION}"

    def serialize_header(self, header: FileHeader) -> bytes:
        return _pack("I", header.magic) + _pack("H", header.version) + _pack("I", header.metadata_length)

    def deserialize_header(self, reader: ReaderLike) -> FileHeader:
        """Read a header; raise DatabaseError on a wrong magic number."""
        reader = _as_reader(reader)
        magic = _unpack(reader, "I")
        if magic != MAGIC_NUMBER:
            raise DatabaseError("invalid magic number", ErrorCode.CORRUPT_FILE)
        version = _unpack(reader, "H")
        metadata_length = _unpack(reader, "I")
        return FileHeader(magic=magic, version=version, metadata_length=metadata_length)

    def serialize_metadata(self, metadata: TableMetadata) -> bytes:
        """Encode metadata; foreign keys are stored by count only."""
        parts = [_pack_string(metadata.name), _pack("q", metadata.column_count)]
        for col in metadata.columns:
            parts.extend(
                (
                    _pack_string(col.name),
                    _pack("b", int(col.data_type)),
                    _pack("H", col.length),
                    _pack("?", col.is_nullable),
                    _pack("?", col.is_primary_key),
                )
            )
        parts.extend(
            (
                _pack("q", metadata.row_count),
                _pack("I", metadata.data_offset),
                _pack("q", len(metadata.foreign_keys)),
                _pack("q", len(metadata.indexes)),
            )
        )
        for idx in metadata.indexes:
            parts.append(_pack_string(idx.name))
            parts.append(_pack("q", len(idx.columns)))
            parts.extend(_pack_string(col) for col in idx.columns)
            parts.append(_pack("?", idx.is_unique))
            parts.append(_pack("?", idx.is_primary))
        return b"".join(parts)

    def deserialize_metadata(self, reader: ReaderLike) -> TableMetadata:
        """Read metadata; data from older files without the index section is accepted."""
        reader = _as_reader(reader)
        metadata = TableMetadata(name=_read_string(reader), column_count=_count(reader))
        for _ in range(metadata.column_count):
            name = _read_string(reader)
            data_type = _column_type(_unpack(reader, "b"))
            length = _unpack(reader, "H")
            is_nullable = _read_bool(reader)
            is_primary_key = _read_bool(reader)
            metadata.columns.append(
                Column(
                    name=name,
                    data_type=data_type,
                    length=length,
                    is_nullable=is_nullable,
                    is_primary_key=is_primary_key,
                )
            )
        metadata.row_count = _unpack(reader, "q")
        metadata.data_offset = _unpack(reader, "I")

        try:
            _unpack(reader, "q")  # foreign key count; the keys themselves are not stored
            index_count = _count(reader)
        except _Truncated:
            return metadata

        for _ in range(index_count):
            name = _read_string(reader)
            columns = [_read_string(reader) for _ in range(_count(reader))]
            is_unique = _read_bool(reader)
            is_primary = _read_bool(reader)
            metadata.indexes.append(
                IndexMetadata(name=name, columns=columns, is_unique=is_unique, is_primary=is_primary)
            )
        return metadata

    def serialize_row(self, row: Sequence[Any], columns: Sequence[Column]) -> bytes:
        """Encode the values of a row, each checked against its column."""
        if len(row) > len(columns):
            raise DatabaseError(f"row has {len(row)} values but only {len(columns)} columns")
        return b"".join(_encode_value(value, col) for value, col in zip(row, columns))

    def deserialize_row(self, reader: ReaderLike, columns: Sequence[Column]) -> list[Any]:
        reader = _as_reader(reader)
        return [_decode_value(reader, col) for col in columns]

    def serialize_table(self, table: Table) -> bytes:
        """Encode a whole table, updating its header and metadata bookkeeping."""
        metadata_length = len(self.serialize_metadata(table.metadata))
        table.header.metadata_length = metadata_length
        header_bytes = self.serialize_header(table.header)

        table.metadata.data_offset = len(header_bytes) + metadata_length
        table.metadata.row_count = len(table.data)
        table.metadata.column_count = len(table.metadata.columns)
        metadata_bytes = self.serialize_metadata(table.metadata)

        rows = [self.serialize_row(row, table.metadata.columns) for row in table.data]
        return header_bytes + metadata_bytes + b"".join(rows)

    def deserialize_table(self, data: bytes) -> Table:
        reader = io.BytesIO(data)
        header = self.deserialize_header(reader)
        metadata = self.deserialize_metadata(reader)
        rows = [self.deserialize_row(reader, metadata.columns) for _ in range(metadata.row_count)]
        return Table(header=header, metadata=metadata, data=rows)

    def write_table(self, table: Table, name: str) -> None:
        """Write table to its file, replacing any previous content."""
        data = self.serialize_table(table)
        self.tables_dir.mkdir(parents=True, exist_ok=True)
        self.table_path(name).write_bytes(data)

    def read_table(self, name: str) -> Table:
        """Load table name; raise FileNotFoundError if it does not exist."""
        return self.deserialize_table(self.table_path(name).read_bytes())

    def read_index(self, path: Union[str, Path]) -> Index:
        return deserialize_index(Path(path).read_bytes())

    def read_file(self, filename: str) -> tuple[Optional[Table], Optional[Index]]:
        """Read an index file (name containing .idx) or a table by name."""
        if ".idx" in filename:
            return None, self.read_index(filename)
        return self.read_table(filename), None

    def list_tables(self) -> list[str]:
        """Return the names of all stored tables, ordered by file name."""
        names = []
        for entry in sorted(self.tables_dir.iterdir(), key=lambda p: p.name):
            if not entry.is_dir() and entry.name.endswith(".bin"):
                names.append(entry.name[: -len(".bin")])
        return names