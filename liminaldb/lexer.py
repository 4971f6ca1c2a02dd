"""Tokenizer for the SQL dialect."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator


class TokenType(str, Enum):
    """Kinds of token. Type names share values with literal kinds."""

    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    IDENT = "IDENT"
    INT = "INT"
    STRING = "STRING"
    FLOAT = "FLOAT"
    BOOL = "BOOL"
    ALL = "ALL"

    INTTYPE = "INT"
    FLOATTYPE = "FLOAT"
    BOOLTYPE = "BOOL"
    STRINGTYPE = "STRING"

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
    FOREIGN = "FOREIGN"
    REFERENCES = "REFERENCES"
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

    def __str__(self) -> str:
        return self.value


T = TokenType

KEYWORDS: dict[str, TokenType] = {
    "select": T.SELECT,
    "from": T.FROM,
    "where": T.WHERE,
    "insert": T.INSERT,
    "into": T.INTO,
    "values": T.VALUES,
    "true": T.BOOL,
    "false": T.BOOL,
    "create": T.CREATE,
    "table": T.TABLE,
    "drop": T.DROP,
    "int": T.INTTYPE,
    "float": T.FLOATTYPE,
    "bool": T.BOOLTYPE,
    "string": T.STRINGTYPE,
    "null": T.NULL,
    "not": T.NOT,
    "delete": T.DELETE,
    "desc": T.DESC,
    "*": T.MULTIPLY,
    "primary": T.PRIMARY,
    "key": T.KEY,
    "foreign": T.FOREIGN,
    "references": T.REFERENCES,
    "on": T.ON,
    "index": T.INDEX,
    "unique": T.UNIQUE,
    "show": T.SHOW,
    "indexes": T.INDEXES,
    "procedure": T.PROCEDURE,
    "alter": T.ALTER,
    "as": T.AS,
    "begin": T.BEGIN,
    "end": T.END,
    "exec": T.EXEC,
    "variable": T.VARIABLE,
    "+": T.PLUS,
    "-": T.MINUS,
    "/": T.DIVIDE,
    "<": T.LESS_THAN,
    "<=": T.LESS_THAN_OR_EQ,
    ">": T.GREATER_THAN,
    ">=": T.GREATER_THAN_OR_EQ,
    "and": T.AND,
    "or": T.OR,
}

_SINGLE = {
    "=": T.ASSIGN,
    ";": T.SEMICOLON,
    "(": T.LPAREN,
    ")": T.RPAREN,
    ",": T.COMMA,
    "+": T.PLUS,
    "-": T.MINUS,
    "*": T.MULTIPLY,
    "/": T.DIVIDE,
}

_WHITESPACE = " \t\n\r"


def lookup_ident(ident: str) -> TokenType:
    """Return the keyword type for an identifier, or IDENT."""
    return KEYWORDS.get(ident.lower(), T.IDENT)


def _is_letter(ch: str) -> bool:
    return ch != "" and (("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_")


def _is_digit(ch: str) -> bool:
    return ch != "" and "0" <= ch <= "9"


@dataclass(frozen=True)
class Token:
    type: TokenType
    literal: str


class Lexer:
    """Splits a query string into tokens."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    @property
    def _ch(self) -> str:
        return self._text[self._pos] if self._pos < len(self._text) else ""

    def _peek(self) -> str:
        nxt = self._pos + 1
        return self._text[nxt] if nxt < len(self._text) else ""

    def _read_while(self, predicate) -> str:
        start = self._pos
        while predicate(self._ch):
            self._pos += 1
        return self._text[start:self._pos]

    def _read_identifier(self) -> str:
        return self._read_while(lambda c: _is_letter(c) or _is_digit(c))

    def _read_string(self) -> str:
        start = self._pos + 1
        self._pos += 1
        while self._ch not in ("'", ""):
            self._pos += 1
        value = self._text[start:self._pos]
        if self._ch:
            self._pos += 1
        return value

    def _read_number(self) -> Token:
        start = self._pos
        self._read_while(_is_digit)
        kind = T.INT
        if self._ch == ".":
            kind = T.FLOAT
            self._pos += 1
            self._read_while(_is_digit)
        return Token(kind, self._text[start:self._pos])

    def next_token(self) -> Token:
        """Return the next token; EOF once the input is exhausted."""
        while self._ch and self._ch in _WHITESPACE:
            self._pos += 1

        ch = self._ch
        if ch == "":
            return Token(T.EOF, "")
        if ch == "@":
            self._pos += 1
            return Token(T.VARIABLE, "@" + self._read_identifier())
        if ch == "'":
            return Token(T.STRING, self._read_string())
        if ch in "<>":
            if self._peek() == "=":
                self._pos += 2
                kind = T.LESS_THAN_OR_EQ if ch == "<" else T.GREATER_THAN_OR_EQ
                return Token(kind, ch + "=")
            self._pos += 1
            return Token(T.LESS_THAN if ch == "<" else T.GREATER_THAN, ch)
        if ch in _SINGLE:
            self._pos += 1
            return Token(_SINGLE[ch], ch)
        if _is_digit(ch):
            return self._read_number()
        if _is_letter(ch):
            word = self._read_identifier()
            if word in ("true", "false"):
                return Token(T.BOOL, word)
            return Token(lookup_ident(word), word)
        self._pos += 1
        return Token(T.ILLEGAL, ch)

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including EOF."""
        while True:
            tok = self.next_token()
            yield tok
            if tok.type is T.EOF:
                return