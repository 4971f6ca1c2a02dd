"""Recursive-descent parser turning SQL text into statement objects."""

from __future__ import annotations

from typing import Any, Callable, Optional, Union

from liminaldb.lexer import Lexer
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
    Expression,
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

# Token kinds, by the text the lexer gives them.
EOF = "EOF"
IDENT = "IDENT"
INT = "INT"
FLOAT = "FLOAT"
STRING = "STRING"
BOOL = "BOOL"
ASSIGN = "="
PLUS = "+"
MINUS = "-"
MULTIPLY = "*"
DIVIDE = "/"
LESS_THAN = "<"
LESS_THAN_OR_EQ = "<="
GREATER_THAN = ">"
GREATER_THAN_OR_EQ = ">="
COMMA = ","
SEMICOLON = ";"
LPAREN = "("
RPAREN = ")"
SELECT = "SELECT"
FROM = "FROM"
WHERE = "WHERE"
INSERT = "INSERT"
INTO = "INTO"
VALUES = "VALUES"
CREATE = "CREATE"
TABLE = "TABLE"
DROP = "DROP"
NULL = "NULL"
NOT = "NOT"
DELETE = "DELETE"
DESC = "DESC"
PRIMARY = "PRIMARY"
KEY = "KEY"
ON = "ON"
INDEX = "INDEX"
UNIQUE = "UNIQUE"
SHOW = "SHOW"
INDEXES = "INDEXES"
AND = "AND"
OR = "OR"
PROCEDURE = "PROCEDURE"
ALTER = "ALTER"
AS = "AS"
BEGIN = "BEGIN"
END = "END"
EXEC = "EXEC"
VARIABLE = "@"

# Precedence levels
LOWEST = 1
LOGICAL = 2
EQUALS = 3
COMPARISON = 4
SUM = 5
PRODUCT = 6

_PRECEDENCES = {
    ASSIGN: EQUALS,
    LESS_THAN: COMPARISON,
    LESS_THAN_OR_EQ: COMPARISON,
    GREATER_THAN: COMPARISON,
    GREATER_THAN_OR_EQ: COMPARISON,
    PLUS: SUM,
    MINUS: SUM,
    MULTIPLY: PRODUCT,
    DIVIDE: PRODUCT,
    AND: LOGICAL,
    OR: LOGICAL,
}

_COLUMN_TYPES = {
    INT: ColumnType.INTEGER64,
    FLOAT: ColumnType.FLOAT64,
    STRING: ColumnType.STRING,
    BOOL: ColumnType.BOOLEAN,
}

_ARITHMETIC = (PLUS, MINUS, MULTIPLY, DIVIDE)
_COMPARISONS = (ASSIGN, LESS_THAN, LESS_THAN_OR_EQ, GREATER_THAN, GREATER_THAN_OR_EQ)
_LOGICAL = (AND, OR)

_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

Statement = Any


class ParseError(Exception):
    """Raised when a statement cannot be parsed."""


def _kind(token: Any) -> str:
    if token is None:
        return ""
    kind = token.type
    return str(getattr(kind, "value", kind))


def _literal(token: Any) -> str:
    return "" if token is None else token.literal


class Parser:
    """Parses one statement from a lexer or a string of SQL."""

    def __init__(self, source: Union[Lexer, str]) -> None:
        self.lexer = source if isinstance(source, Lexer) else Lexer(source)
        self.errors: list[str] = []
        self.cur: Any = None
        self.peek: Any = None
        self._advance()
        self._advance()

    # token handling

    def _advance(self) -> None:
        self.cur = self.peek
        self.peek = self.lexer.next_token()

    def _cur_is(self, kind: str) -> bool:
        return _kind(self.cur) == kind

    def _peek_is(self, kind: str) -> bool:
        return _kind(self.peek) == kind

    def _peek_error(self, kind: str) -> None:
        self.errors.append(f"expected next token to be {kind}, got {_kind(self.peek)} instead")

    def _expect_peek(self, kind: str) -> bool:
        if self._peek_is(kind):
            self._advance()
            return True
        self._peek_error(kind)
        return False

    def _expect_peek_any(self, *kinds: str) -> Optional[str]:
        for kind in kinds:
            if self._expect_peek(kind):
                return kind
        return None

    def _fail(self, message: str) -> ParseError:
        return ParseError(f"{message}, got {_literal(self.cur)}")

    def _require(self, kind: str, message: str) -> None:
        if not self._expect_peek(kind):
            raise self._fail(message)

    # statements

    def parse_statement(self) -> Statement:
        """Parse the statement at the current token; raise ParseError on bad input."""
        handlers: dict[str, Callable[[], Statement]] = {
            SELECT: self._parse_select,
            INSERT: self._parse_insert,
            CREATE: self._parse_create,
            DELETE: self._parse_delete,
            DROP: self._parse_drop,
            DESC: self._parse_describe,
            ALTER: self._parse_alter,
            EXEC: self._parse_exec,
            SHOW: self._parse_show,
        }
        handler = handlers.get(_kind(self.cur))
        if handler is None:
            self._peek_error(_kind(self.cur))
            raise ParseError(f"expected statement, got {_literal(self.cur)}")
        return handler()

    def _parse_select(self) -> SelectStatement:
        stmt = SelectStatement()
        if self._expect_peek_any(IDENT, MULTIPLY) is None:
            raise self._fail("expected identifier or *")
        stmt.fields = self._parse_identifier_list()
        self._require(FROM, "expected from")
        self._require(IDENT, "expected identifier")
        stmt.table_name = _literal(self.cur)

        if self._peek_is(WHERE):
            self._advance()
            self._advance()
            stmt.where = self._parse_expression()

        if self._expect_peek_any(SEMICOLON, EOF) is None:
            raise self._fail("expected semicolon or eof")
        return stmt

    def _parse_insert(self) -> InsertStatement:
        stmt = InsertStatement()
        self._require(INTO, "expected into")
        self._require(IDENT, "expected identifier")
        stmt.table_name = _literal(self.cur)
        self._require(LPAREN, "expected left parenthesis")
        self._advance()
        stmt.columns = self._parse_identifier_list()
        self._require(RPAREN, "expected right parenthesis")
        self._require(VALUES, "expected values")
        self._advance()
        stmt.value_lists = self._parse_value_lists()
        return stmt

    def _parse_create(self) -> Statement:
        kind = self._expect_peek_any(TABLE, PROCEDURE, INDEX, UNIQUE)
        if kind == TABLE:
            return self._parse_create_table()
        if kind == PROCEDURE:
            return self._parse_create_procedure()
        if kind == INDEX:
            return self._parse_create_index(False)
        if kind == UNIQUE:
            self._require(INDEX, "expected INDEX after UNIQUE")
            return self._parse_create_index(True)
        raise self._fail("expected table, procedure, index, or unique")

    def _parse_create_index(self, is_unique: bool) -> CreateIndexStatement:
        stmt = CreateIndexStatement(is_unique=is_unique)
        self._require(IDENT, "expected identifier")
        stmt.index_name = _literal(self.cur)
        self._require(ON, "expected ON")
        self._require(IDENT, "expected identifier")
        stmt.table_name = _literal(self.cur)
        self._require(LPAREN, "expected left parenthesis")
        self._advance()
        stmt.columns = self._parse_identifier_list()
        self._require(RPAREN, "expected right parenthesis")
        return stmt

    def _parse_create_table(self) -> CreateTableStatement:
        stmt = CreateTableStatement()
        self._require(IDENT, "expected identifier")
        stmt.table_name = _literal(self.cur)
        self._require(LPAREN, "expected left parenthesis")
        stmt.columns = self._parse_column_definitions()
        self._require(RPAREN, "expected right parenthesis")
        return stmt

    def _parse_delete(self) -> DeleteStatement:
        stmt = DeleteStatement()
        self._require(FROM, "expected from")
        self._require(IDENT, "expected identifier")
        stmt.table_name = _literal(self.cur)
        if self._peek_is(WHERE):
            self._advance()
            self._advance()
            stmt.where = self._parse_expression()
        return stmt

    def _parse_drop(self) -> Statement:
        kind = self._expect_peek_any(TABLE, INDEX)
        if kind == TABLE:
            self._require(IDENT, "expected identifier")
            return DropTableStatement(table_name=_literal(self.cur))
        if kind == INDEX:
            stmt = DropIndexStatement()
            self._require(IDENT, "expected identifier")
            stmt.index_name = _literal(self.cur)
            self._require(ON, "expected ON")
            self._require(IDENT, "expected identifier")
            stmt.table_name = _literal(self.cur)
            return stmt
        raise self._fail("expected table or index")

    def _parse_show(self) -> ShowIndexesStatement:
        self._require(INDEXES, "expected INDEXES")
        self._require(FROM, "expected FROM")
        self._require(IDENT, "expected identifier")
        return ShowIndexesStatement(table_name=_literal(self.cur))

    def _parse_describe(self) -> DescribeTableStatement:
        self._require(TABLE, "expected table")
        self._require(IDENT, "expected identifier")
        return DescribeTableStatement(table_name=_literal(self.cur))

    def _parse_alter(self) -> AlterProcedureStatement:
        self._require(PROCEDURE, "expected procedure")
        stmt = AlterProcedureStatement()
        self._require(IDENT, "expected identifier")
        stmt.name = _literal(self.cur)
        if self._peek_is(LPAREN):
            self._advance()
            self._advance()
            stmt.parameters = self._parse_column_definitions()
            self._require(RPAREN, "expected right parenthesis")
        stmt.body = self._parse_procedure_body()
        return stmt

    def _parse_create_procedure(self) -> CreateProcedureStatement:
        stmt = CreateProcedureStatement()
        self._require(IDENT, "expected identifier")
        stmt.name = _literal(self.cur)
        if self._peek_is(LPAREN):
            self._advance()
            stmt.parameters = self._parse_column_definitions()
            self._require(RPAREN, "expected right parenthesis")
        stmt.body = self._parse_procedure_body()
        return stmt

    def _parse_procedure_body(self) -> str:
        self._require(AS, "expected as")
        self._require(BEGIN, "expected begin")
        parts: list[str] = []
        while True:
            self._advance()
            if self._cur_is(END):
                break
            if self._cur_is(EOF):
                raise self._fail("expected end")
            parts.append(_literal(self.cur) + " ")
            if self._peek_is(SEMICOLON):
                self._advance()
                parts.append("; ")
        return "".join(parts)

    def _parse_column_definitions(self) -> list[Column]:
        if self._expect_peek_any(IDENT, VARIABLE) is None:
            return []
        columns: list[Column] = []
        while True:
            col = self._parse_column_definition()
            if col is None:
                return []
            columns.append(col)
            if not self._peek_is(COMMA):
                break
            self._advance()
            if not self._expect_peek(IDENT):
                return []
        return columns

    def _parse_column_definition(self) -> Optional[Column]:
        col = Column(name=_literal(self.cur), is_nullable=True, is_primary_key=False)
        kind = self._expect_peek_any(INT, FLOAT, STRING, BOOL)
        if kind is None:
            return None
        col.data_type = _COLUMN_TYPES[kind]

        if self._peek_is(LPAREN):
            self._advance()
            self._advance()
            if not self._cur_is(INT):
                self.errors.append("expected integer for length specification")
                return None
            try:
                length = int(_literal(self.cur))
            except ValueError:
                self.errors.append("invalid length specification")
                return None
            col.length = length & 0xFFFF
            if not self._expect_peek(RPAREN):
                return None

        if self._peek_is(NOT):
            self._advance()
            if not self._expect_peek(NULL):
                return None
            col.is_nullable = False
        elif self._peek_is(NULL):
            self._advance()
            col.is_nullable = True

        if self._peek_is(PRIMARY):
            self._advance()
            if not self._expect_peek(KEY):
                return None
            col.is_primary_key = True
            col.is_nullable = False
        return col

    def _parse_exec(self) -> ExecStatement:
        stmt = ExecStatement()
        self._require(IDENT, "expected identifier")
        stmt.name = _literal(self.cur)
        if self._peek_is(LPAREN):
            stmt.parameters = self._parse_value_list() or []
            if not self._cur_is(RPAREN):
                raise self._fail("expected right parenthesis")
        return stmt

    def _parse_identifier_list(self) -> list[str]:
        identifiers = [_literal(self.cur)]
        while self._peek_is(COMMA):
            self._advance()
            self._advance()
            identifiers.append(_literal(self.cur))
        return identifiers

    def _parse_value_lists(self) -> list[list[Expression]]:
        value_lists: list[list[Expression]] = []
        values = self._parse_value_list()
        if values is not None:
            value_lists.append(values)
        while self._peek_is(COMMA):
            self._advance()
            self._advance()
            values = self._parse_value_list()
            if values is not None:
                value_lists.append(values)
        return value_lists

    def _parse_value_list(self) -> Optional[list[Expression]]:
        if not self._cur_is(LPAREN) and not self._expect_peek(LPAREN):
            return None
        self._advance()
        values: list[Expression] = []
        value = self._parse_expression()
        if value is not None:
            values.append(value)
        while self._peek_is(COMMA):
            self._advance()
            self._advance()
            value = self._parse_expression()
            if value is not None:
                values.append(value)
        if not self._expect_peek(RPAREN):
            return None
        return values

    # expressions

    def _peek_precedence(self) -> int:
        return _PRECEDENCES.get(_kind(self.peek), LOWEST)

    def _cur_precedence(self) -> int:
        return _PRECEDENCES.get(_kind(self.cur), LOWEST)

    def _parse_expression(self, precedence: int = LOWEST) -> Optional[Expression]:
        left = self._parse_prefix()
        if left is None:
            return None

        while not self._peek_is(EOF) and precedence < self._peek_precedence():
            kind = _kind(self.peek)
            if kind in _ARITHMETIC:
                self._advance()
                left = self._parse_infix(left, BinaryExpression)
            elif kind in _COMPARISONS:
                if precedence >= EQUALS:
                    return left
                self._advance()
                left = self._parse_infix(left, WhereExpression)
            elif kind in _LOGICAL:
                if precedence >= LOGICAL:
                    return left
                self._advance()
                left = self._parse_infix(left, WhereExpression)
            else:
                return left
        return left

    def _parse_infix(self, left: Optional[Expression], node: type) -> Expression:
        op = _literal(self.cur)
        precedence = self._cur_precedence()
        self._advance()
        right = self._parse_expression(precedence)
        return node(left=left, right=right, op=op)

    def _parse_prefix(self) -> Optional[Expression]:
        kind = _kind(self.cur)
        text = _literal(self.cur)
        if kind == VARIABLE:
            return VariableExpression(name=text[1:])
        if kind == STRING:
            return StringLiteral(value=text)
        if kind == INT:
            try:
                number = int(text)
            except ValueError:
                return None
            if not _INT64_MIN <= number <= _INT64_MAX:
                return None
            return Int64Literal(value=number)
        if kind == FLOAT:
            try:
                return Float64Literal(value=float(text))
            except ValueError:
                return None
        if kind == BOOL:
            if text in _TRUE_WORDS:
                return BooleanLiteral(value=True)
            if text in _FALSE_WORDS:
                return BooleanLiteral(value=False)
            return None
        if kind == IDENT:
            return Identifier(value=text)
        return None


def parse(sql: str) -> Statement:
    """Parse a single SQL statement; raise ParseError if it is malformed."""
    return Parser(sql).parse_statement()