# liminaldb

The parts of a small SQL database engine: a tokenizer and parser for a compact
SQL dialect, a binary file format for tables, B-tree indexes with their own
file format, stored procedure files, and text rendering of results.

## Installing

```
pip install .
```

There are no runtime dependencies. The tests use pytest (`pip install .[test]`).

## Modules

- `liminaldb.types`: `Column`, `ColumnType`, `FileHeader`, `TableMetadata`,
  `IndexMetadata`, `ForeignKeyConstraint`, `ForeignKeyReference`, `Table`,
  `QueryResult` and `DatabaseError`. `TableMetadata.validate()` raises
  `DatabaseError` for an empty name, no columns, a column count that does not
  match, empty or duplicate column names, a string column of length zero, a
  nullable primary key, or no primary key at all.
- `liminaldb.lexer`: `Lexer`, `Token`, `TokenType` and `lookup_ident`.
- `liminaldb.syntax`: the expression and statement classes the parser builds.
- `liminaldb.parser`: `Parser`, `ParseError` and `parse`.
- `liminaldb.comparison`: `compare` and `to_numbers`.
- `liminaldb.serializer`: `BinarySerializer`, reading and writing table files.
- `liminaldb.btree`: `BTree`, `BTreeNode`, `Index`, `compare_keys`,
  `serialize_index` and `deserialize_index`.
- `liminaldb.storedproc`: `StoredProc`.
- `liminaldb.formatting`: `format_result` and the functions it uses.

## Parsing SQL

```python
from liminaldb.parser import parse

stmt = parse("SELECT id, name FROM users WHERE id = 1")
# SelectStatement(fields=['id', 'name'], table_name='users',
#                 where=WhereExpression(left=Identifier(value='id'),
#                                       right=Int64Literal(value=1), op='='))
```

`parse` raises `ParseError` when a statement is malformed. The dialect covers:

- `CREATE TABLE t (col type [(length)] [NOT NULL | NULL] [PRIMARY KEY], ...)`
  with the types `int`, `float`, `string` and `bool`
- `INSERT INTO t (a, b) VALUES (...), (...)`
- `SELECT * | a, b FROM t [WHERE expr]`, where expressions use `+ - * /`,
  `= < <= > >=`, `AND` and `OR`
- `DELETE FROM t [WHERE expr]`, `DROP TABLE t`, `DESC TABLE t`
- `CREATE [UNIQUE] INDEX i ON t (a, ...)`, `DROP INDEX i ON t`,
  `SHOW INDEXES FROM t`
- `CREATE PROCEDURE p(@x int) AS BEGIN ...; END`, `ALTER PROCEDURE ...`,
  `EXEC p(1)`

`compare(op, left, right)` applies a comparison operator to two values:
ordering operators give `False` unless both sides are numbers, and `=` and
`!=` compare numbers by value and anything else by type and value.

## Table files

```python
from liminaldb.serializer import BinarySerializer
from liminaldb.types import Column, ColumnType, Table, TableMetadata

columns = [
    Column("id", ColumnType.INTEGER64, is_primary_key=True),
    Column("name", ColumnType.STRING, length=100, is_nullable=True),
]
table = Table(metadata=TableMetadata(name="users", columns=columns),
              data=[[1, "Alice"]])

store = BinarySerializer("db/tables")
store.write_table(table, "users")        # db/tables/users.bin
loaded = store.read_table("users")
print(loaded.data)                       # [[1, 'Alice']]
print(store.list_tables())               # ['users']
```

Values are checked against their column when a row is encoded: a value of the
wrong type, or a string longer than the column's length in UTF-8 bytes, raises
`DatabaseError`. Reading a missing table raises `FileNotFoundError`.

## Indexes

```python
from liminaldb.btree import Index, serialize_index, deserialize_index

index = Index("pk_users", "users", ["id"], is_unique=True)
index.tree.insert(1, 0)
index.tree.insert(2, 1)
print(index.tree.search(2))              # [1]
restored = deserialize_index(serialize_index(index))
print(restored.tree.search(1))           # [0]
```

`BTree.search` returns `None` for a key that is absent, and `BTree.delete`
raises `KeyError` for one.

## Stored procedures

`StoredProc(name, body, parameters).save(directory)` writes
`<name>.meta.json` and `<name>.lsql` into the directory (`db/sproc` by
default); `StoredProc.load(name, directory)` reads them back.

## Rendering results

```python
from liminaldb.formatting import format_result
from liminaldb.types import Column, ColumnType, QueryResult

result = QueryResult(columns=[Column("name", ColumnType.STRING, 100)],
                     rows=[["Alice"]])
print(format_result(result))
```

```
+-------+
| name  |
+-------+
| Alice |
+-------+
1 row(s) in set
```

## What it does not do

The package has no interactive shell and no command to run. It does not
execute parsed statements against stored tables: nothing here applies an
`INSERT`, `SELECT`, `DELETE` or `EXEC` to table files, keeps indexes in step
with table rows, or enforces primary, unique or foreign key constraints across
them. It sets up no log files.