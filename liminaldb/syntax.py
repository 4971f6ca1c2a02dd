"""Syntax tree nodes for expressions and statements."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from liminaldb.types import Column


class Expression:
    """Base class of all expressions."""

    def literal_value(self) -> Any:
        """Return the value this expression carries directly, if any."""
        return None


@dataclass
class WhereExpression(Expression):
    left: Optional[Expression]
    right: Optional[Expression]
    op: str

    def literal_value(self) -> Any:
        return self.right.literal_value() if self.right is not None else None


@dataclass
class AllExpression(Expression):
    pass


@dataclass
class Identifier(Expression):
    value: str

    def literal_value(self) -> Any:
        return self.value


@dataclass
class StringLiteral(Expression):
    value: str

    def literal_value(self) -> Any:
        return self.value


@dataclass
class Int64Literal(Expression):
    value: int

    def literal_value(self) -> Any:
        return self.value


@dataclass
class Float64Literal(Expression):
    value: float

    def literal_value(self) -> Any:
        return self.value


@dataclass
class BooleanLiteral(Expression):
    value: bool

    def literal_value(self) -> Any:
        return self.value


@dataclass
class Literal(Expression):
    value: Any

    def literal_value(self) -> Any:
        return self.value


@dataclass
class VariableExpression(Expression):
    name: str

    def literal_value(self) -> Any:
        return self.name


@dataclass
class BinaryExpression(Expression):
    left: Optional[Expression]
    right: Optional[Expression]
    op: str


@dataclass
class SelectStatement:
    fields: list[str] = field(default_factory=list)
    table_name: str = ""
    where: Optional[Expression] = None


@dataclass
class InsertStatement:
    table_name: str = ""
    columns: list[str] = field(default_factory=list)
    value_lists: list[list[Expression]] = field(default_factory=list)


@dataclass
class CreateTableStatement:
    table_name: str = ""
    columns: list[Column] = field(default_factory=list)


@dataclass
class DeleteStatement:
    table_name: str = ""
    where: Optional[Expression] = None


@dataclass
class DropTableStatement:
    table_name: str = ""


@dataclass
class DescribeTableStatement:
    table_name: str = ""


@dataclass
class CreateIndexStatement:
    index_name: str = ""
    table_name: str = ""
    columns: list[str] = field(default_factory=list)
    is_unique: bool = False


@dataclass
class DropIndexStatement:
    index_name: str = ""
    table_name: str = ""


@dataclass
class ShowIndexesStatement:
    table_name: str = ""


@dataclass
class CreateProcedureStatement:
    name: str = ""
    parameters: list[Column] = field(default_factory=list)
    body: str = ""
    description: str = ""


@dataclass
class AlterProcedureStatement:
    name: str = ""
    parameters: list[Column] = field(default_factory=list)
    body: str = ""
    description: str = ""


@dataclass
class ExecStatement:
    name: str = ""
    parameters: list[Expression] = field(default_factory=list)