"""Parts of a small SQL database: parser, table file format, B-tree indexes and stored procedures."""

__version__ = "0.1.0"

__all__ = [
    "btree",
    "comparison",
    "formatting",
    "lexer",
    "parser",
    "serializer",
    "storedproc",
    "syntax",
    "types",
]