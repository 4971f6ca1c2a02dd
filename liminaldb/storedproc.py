"""Stored procedures kept as a JSON metadata file next to a body file."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Union

from liminaldb.types import Column, ColumnType

STORED_PROC_DIR = "db/sproc"
FILE_EXTENSION = ".lsql"
METADATA_SUFFIX = ".meta.json"

_TIMESTAMP = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>Z|[+-]\d{2}:\d{2})?$"
)


def _now() -> datetime:
    return datetime.now().astimezone()


def _parse_timestamp(text: str) -> datetime:
    match = _TIMESTAMP.match(text)
    if match is None:
        raise ValueError(f"invalid timestamp: {text}")
    frac = (match.group("frac") or "")[:6].ljust(6, "0")
    tz = match.group("tz") or ""
    if tz == "Z":
        tz = "+00:00"
    return datetime.fromisoformat(f"{match.group('base')}.{frac}{tz}")


def _column_to_json(col: Column) -> dict[str, Any]:
    return {
        "Name": col.name,
        "DataType": int(col.data_type),
        "Length": col.length,
        "IsNullable": col.is_nullable,
        "IsPrimaryKey": col.is_primary_key,
    }


def _column_from_json(data: dict[str, Any]) -> Column:
    return Column(
        name=data.get("Name", ""),
        data_type=ColumnType(data.get("DataType", 0)),
        length=data.get("Length", 0),
        is_nullable=data.get("IsNullable", False),
        is_primary_key=data.get("IsPrimaryKey", False),
    )


@dataclass
class StoredProc:
    """A named procedure: parameters plus a body of statements."""

    name: str
    body: str = ""
    parameters: list[Column] = field(default_factory=list)
    description: str = ""
    created_at: datetime = field(default_factory=_now)
    modified_at: datetime = field(default_factory=_now)

    def save(self, directory: Union[str, Path] = STORED_PROC_DIR) -> None:
        """Write the metadata and body files, stamping the modification time."""
        folder = Path(directory)
        folder.mkdir(parents=True, exist_ok=True)
        self.modified_at = _now()
        metadata = {
            "Name": self.name,
            "Parameters": [_column_to_json(col) for col in self.parameters],
            "CreatedAt": self.created_at.isoformat(),
            "ModifiedAt": self.modified_at.isoformat(),
            "Description": self.description,
        }
        (folder / f"{self.name}{METADATA_SUFFIX}").write_text(
            json.dumps(metadata, indent=2), encoding="utf-8"
        )
        (folder / f"{self.name}{FILE_EXTENSION}").write_text(self.body, encoding="utf-8")

    @classmethod
    def load(cls, name: str, directory: Union[str, Path] = STORED_PROC_DIR) -> "StoredProc":
        """Read a procedure saved under name; raise FileNotFoundError if absent."""
        folder = Path(directory)
        metadata = json.loads((folder / f"{name}{METADATA_SUFFIX}").read_text(encoding="utf-8"))
        body = (folder / f"{name}{FILE_EXTENSION}").read_text(encoding="utf-8")
        return cls(
            name=metadata.get("Name", ""),
            body=body,
            parameters=[_column_from_json(p) for p in metadata.get("Parameters") or []],
            description=metadata.get("Description", ""),
            created_at=_parse_timestamp(metadata["CreatedAt"]),
            modified_at=_parse_timestamp(metadata["ModifiedAt"]),
        )