from liminaldb.syntax import (
    AllExpression,
    BinaryExpression,
    BooleanLiteral,
    Float64Literal,
    Identifier,
    Int64Literal,
    Literal,
    SelectStatement,
    StringLiteral,
    VariableExpression,
    WhereExpression,
)


def test_literal_values():
    assert StringLiteral("abc").literal_value() == "abc"
    assert Int64Literal(7).literal_value() == 7
    assert Float64Literal(2.5).literal_value() == 2.5
    assert BooleanLiteral(True).literal_value() is True
    assert Literal([1]).literal_value() == [1]
    assert Identifier("col").literal_value() == "col"
    assert VariableExpression("id").literal_value() == "id"


def test_valueless_expressions():
    assert AllExpression().literal_value() is None
    assert BinaryExpression(Int64Literal(1), Int64Literal(2), "+").literal_value() is None


def test_where_delegates_to_right():
    expr = WhereExpression(Identifier("id"), Int64Literal(42), "=")
    assert expr.literal_value() == 42


def test_statement_defaults_are_independent():
    a = SelectStatement()
    b = SelectStatement()
    a.fields.append("x")
    assert b.fields == []
    assert a.where is None