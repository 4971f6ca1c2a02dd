import pytest

from liminaldb.parser import ParseError, Parser, parse
from liminaldb.syntax import (
    AlterProcedureStatement,
    BinaryExpression,
    BooleanLiteral,
    CreateIndexStatement,
    CreateProcedureStatement,
    CreateTableStatement,
    DeleteStatement,
    DescribeTableStatement,
    DropIndexStatement,
    DropTableStatement,
    ExecStatement,
    Float64Literal,
    Identifier,
    InsertStatement,
    Int64Literal,
    SelectStatement,
    ShowIndexesStatement,
    StringLiteral,
    VariableExpression,
    WhereExpression,
)
from liminaldb.types import Column, ColumnType


def test_select_star():
    stmt = parse("SELECT * FROM users")
    assert stmt == SelectStatement(fields=["*"], table_name="users", where=None)


def test_select_with_trailing_semicolon():
    stmt = parse("select id, name from users;")
    assert stmt.fields == ["id", "name"]
    assert stmt.table_name == "users"


def test_select_where_equality():
    stmt = parse("SELECT cid, email FROM customers WHERE cid = 101")
    assert stmt.where == WhereExpression(Identifier("cid"), Int64Literal(101), "=")


def test_select_where_precedence():
    stmt = parse("SELECT id, value FROM math_test WHERE value = 2 + 3 * 4")
    assert stmt.where == WhereExpression(
        Identifier("value"),
        BinaryExpression(
            Int64Literal(2),
            BinaryExpression(Int64Literal(3), Int64Literal(4), "*"),
            "+",
        ),
        "=",
    )


def test_select_where_product_then_sum():
    stmt = parse("SELECT id FROM math_test WHERE value = 2 * 3 + 4 * 5")
    assert stmt.where.right == BinaryExpression(
        BinaryExpression(Int64Literal(2), Int64Literal(3), "*"),
        BinaryExpression(Int64Literal(4), Int64Literal(5), "*"),
        "+",
    )


def test_select_where_logical():
    stmt = parse(
        "SELECT name, salary FROM employees WHERE department = 'Engineering' AND salary > 75000"
    )
    assert stmt.where == WhereExpression(
        WhereExpression(Identifier("department"), StringLiteral("Engineering"), "="),
        WhereExpression(Identifier("salary"), Int64Literal(75000), ">"),
        "AND",
    )


def test_select_where_or_and_comparisons():
    stmt = parse("SELECT name FROM e WHERE department = 'HR' OR department = 'Marketing'")
    assert stmt.where.op == "OR"
    assert stmt.where.left.right == StringLiteral("HR")
    assert stmt.where.right.right == StringLiteral("Marketing")


@pytest.mark.parametrize("op", ["<", "<=", ">", ">="])
def test_select_ordering_operators(op):
    stmt = parse(f"select * from test where id {op} 2")
    assert stmt.where == WhereExpression(Identifier("id"), Int64Literal(2), op)


def test_select_variable():
    stmt = parse("SELECT name FROM users WHERE id = @id")
    assert stmt.where.right == VariableExpression("id")


def test_select_trailing_garbage_raises():
    with pytest.raises(ParseError):
        parse("SELECT * FROM users extra")


def test_select_missing_fields_raises():
    with pytest.raises(ParseError):
        parse("SELECT FROM users")


def test_peek_errors_are_recorded():
    parser = Parser("SELECT * FROM users")
    stmt = parser.parse_statement()
    assert stmt.fields == ["*"]
    assert any(e.startswith("expected next token to be IDENT") for e in parser.errors)


def test_insert_multiple_value_lists():
    stmt = parse("INSERT INTO users (id, name) VALUES (1, 'John Doe'), (2, 'Jane Smith')")
    assert stmt == InsertStatement(
        table_name="users",
        columns=["id", "name"],
        value_lists=[
            [Int64Literal(1), StringLiteral("John Doe")],
            [Int64Literal(2), StringLiteral("Jane Smith")],
        ],
    )


def test_insert_float_and_bool():
    stmt = parse("INSERT INTO t (a, b, c) VALUES (1.5, true, FALSE)")
    assert stmt.value_lists == [[Float64Literal(1.5), BooleanLiteral(True), BooleanLiteral(False)]]


def test_insert_missing_values_keyword_raises():
    with pytest.raises(ParseError):
        parse("INSERT INTO users (id) (1)")


def test_create_table():
    stmt = parse("CREATE TABLE users (id int primary key, name string(100), active bool)")
    assert stmt == CreateTableStatement(
        table_name="users",
        columns=[
            Column("id", ColumnType.INTEGER64, 0, False, True),
            Column("name", ColumnType.STRING, 100, True, False),
            Column("active", ColumnType.BOOLEAN, 0, True, False),
        ],
    )


def test_create_table_not_null_and_float():
    stmt = parse("create table t (id int primary key, price float not null, note string(5) null)")
    price, note = stmt.columns[1], stmt.columns[2]
    assert price.data_type == ColumnType.FLOAT64
    assert price.is_nullable is False
    assert note.is_nullable is True
    assert note.length == 5


def test_create_table_bad_length_records_error():
    parser = Parser("CREATE TABLE t (name string(abc))")
    stmt = parser.parse_statement()
    assert stmt.columns == []
    assert "expected integer for length specification" in parser.errors


def test_create_unknown_object_raises():
    with pytest.raises(ParseError):
        parse("CREATE VIEW v")


def test_create_index():
    stmt = parse("CREATE INDEX idx_name ON users (name, age)")
    assert stmt == CreateIndexStatement(
        index_name="idx_name", table_name="users", columns=["name", "age"], is_unique=False
    )


def test_create_unique_index():
    stmt = parse("CREATE UNIQUE INDEX idx_email ON users (email)")
    assert stmt.is_unique is True
    assert stmt.columns == ["email"]


def test_create_unique_without_index_raises():
    with pytest.raises(ParseError):
        parse("CREATE UNIQUE TABLE t")


def test_delete_with_where():
    stmt = parse("DELETE FROM orders WHERE oid = 201")
    assert stmt == DeleteStatement(
        table_name="orders", where=WhereExpression(Identifier("oid"), Int64Literal(201), "=")
    )


def test_delete_without_where():
    assert parse("DELETE FROM orders") == DeleteStatement(table_name="orders", where=None)


def test_drop_table_and_index():
    assert parse("DROP TABLE temp_table") == DropTableStatement(table_name="temp_table")
    assert parse("DROP INDEX idx_name ON users") == DropIndexStatement(
        index_name="idx_name", table_name="users"
    )


def test_drop_without_object_raises():
    with pytest.raises(ParseError):
        parse("DROP users")


def test_describe_and_show():
    assert parse("DESC TABLE users") == DescribeTableStatement(table_name="users")
    assert parse("SHOW INDEXES FROM users") == ShowIndexesStatement(table_name="users")


def test_create_procedure():
    stmt = parse(
        "CREATE PROCEDURE get_user_by_id(@id int) AS BEGIN "
        "SELECT name, active FROM users WHERE id = @id; END"
    )
    assert isinstance(stmt, CreateProcedureStatement)
    assert stmt.name == "get_user_by_id"
    assert stmt.parameters == [Column("@id", ColumnType.INTEGER64, 0, True, False)]
    assert "@id" in stmt.body
    inner = [part.strip() for part in stmt.body.split(";") if part.strip()]
    assert len(inner) == 1
    reparsed = parse(inner[0])
    assert reparsed.fields == ["name", "active"]
    assert reparsed.table_name == "users"


def test_procedure_without_end_raises():
    with pytest.raises(ParseError):
        parse("CREATE PROCEDURE p AS BEGIN SELECT * FROM users")


def test_alter_procedure_without_parameters():
    stmt = parse("ALTER PROCEDURE p AS BEGIN DELETE FROM users; END")
    assert isinstance(stmt, AlterProcedureStatement)
    assert stmt.name == "p"
    assert parse(stmt.body.split(";")[0].strip()) == DeleteStatement(table_name="users")


def test_alter_requires_procedure():
    with pytest.raises(ParseError):
        parse("ALTER TABLE users")


def test_exec_with_parameters():
    stmt = parse("EXEC get_user(1, 'x')")
    assert stmt == ExecStatement(name="get_user", parameters=[Int64Literal(1), StringLiteral("x")])


def test_exec_without_parameters():
    assert parse("exec cleanup") == ExecStatement(name="cleanup", parameters=[])


def test_unknown_statement_raises():
    with pytest.raises(ParseError, match="expected statement"):
        parse("UPDATE users")