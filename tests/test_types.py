import pytest

from liminaldb.types import (
    MAGIC_NUMBER,
    Column,
    ColumnType,
    DatabaseError,
    ErrorCode,
    ForeignKeyConstraint,
    ForeignKeyReference,
    Table,
    TableMetadata,
)


def _valid():
    return TableMetadata(
        name="users",
        column_count=2,
        columns=[
            Column("id", ColumnType.INTEGER64, is_primary_key=True),
            Column("name", ColumnType.STRING, length=100, is_nullable=True),
        ],
    )


@pytest.mark.parametrize(
    "ctype, text",
    [
        (ColumnType.INTEGER64, "INT"),
        (ColumnType.FLOAT64, "FLOAT"),
        (ColumnType.STRING, "STRING"),
        (ColumnType.BOOLEAN, "BOOL"),
        (ColumnType.TIMESTAMP, "TIMESTAMP"),
    ],
)
def test_column_type_names(ctype, text):
    assert str(ctype) == text


def test_table_default_header_uses_magic():
    assert Table().header.magic == MAGIC_NUMBER
    assert MAGIC_NUMBER == 0x4D444247


def test_valid_metadata_then_broken():
    meta = _valid()
    meta.validate()
    meta.columns[0].is_primary_key = False
    with pytest.raises(DatabaseError, match="at least one primary key"):
        meta.validate()


@pytest.mark.parametrize(
    "mutate, message",
    [
        (lambda m: setattr(m, "name", ""), "table name cannot be empty"),
        (lambda m: setattr(m, "column_count", 0), "at least one column"),
        (lambda m: setattr(m, "column_count", 5), "column count does not match"),
        (lambda m: setattr(m.columns[1], "name", ""), "column name cannot be empty"),
        (lambda m: setattr(m.columns[1], "length", 0), "string column length"),
        (lambda m: setattr(m.columns[1], "name", "id"), "duplicate column name"),
        (lambda m: setattr(m.columns[0], "is_nullable", True), "cannot be nullable"),
        (
            lambda m: m.foreign_keys.append(
                ForeignKeyConstraint("other", [ForeignKeyReference("", "x")])
            ),
            "foreign key column name",
        ),
    ],
)
def test_validation_errors(mutate, message):
    meta = _valid()
    mutate(meta)
    with pytest.raises(DatabaseError, match=message):
        meta.validate()


def test_database_error_code():
    err = DatabaseError("missing", ErrorCode.TABLE_NOT_FOUND)
    assert err.code is ErrorCode.TABLE_NOT_FOUND
    assert str(err) == "missing"