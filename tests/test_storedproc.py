import json
from datetime import datetime, timezone

import pytest

from liminaldb.storedproc import StoredProc
from liminaldb.types import Column, ColumnType


def _proc():
    return StoredProc(
        name="get_user",
        body="SELECT * FROM users WHERE id = @user_id ; ",
        parameters=[Column("@user_id", ColumnType.INTEGER64, 0, True, False)],
        description="look up one user",
    )


def test_save_creates_both_files(tmp_path):
    proc = _proc()
    proc.save(tmp_path / "sproc")
    body_file = tmp_path / "sproc" / "get_user.lsql"
    meta_file = tmp_path / "sproc" / "get_user.meta.json"
    assert body_file.read_text() == proc.body
    meta = json.loads(meta_file.read_text())
    assert set(meta) == {"Name", "Parameters", "CreatedAt", "ModifiedAt", "Description"}
    assert meta["Name"] == "get_user"
    assert meta["Parameters"][0]["Name"] == "@user_id"
    assert meta["Parameters"][0]["DataType"] == int(ColumnType.INTEGER64)


def test_round_trip(tmp_path):
    proc = _proc()
    proc.save(tmp_path)
    loaded = StoredProc.load("get_user", tmp_path)
    assert loaded.name == proc.name
    assert loaded.body == proc.body
    assert loaded.parameters == proc.parameters
    assert loaded.description == proc.description
    assert loaded.created_at == proc.created_at
    assert loaded.modified_at == proc.modified_at


def test_save_updates_modification_time(tmp_path):
    proc = _proc()
    created = proc.created_at
    proc.save(tmp_path)
    assert proc.modified_at >= created
    assert proc.created_at == created


def test_alter_overwrites_body(tmp_path):
    _proc().save(tmp_path)
    replacement = StoredProc(name="get_user", body="SELECT name FROM users ; ")
    replacement.save(tmp_path)
    loaded = StoredProc.load("get_user", tmp_path)
    assert loaded.body == "SELECT name FROM users ; "
    assert loaded.parameters == []


def test_load_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        StoredProc.load("nothing_here", tmp_path)


def test_load_accepts_nanosecond_utc_timestamps(tmp_path):
    meta = {
        "Name": "p",
        "Parameters": None,
        "CreatedAt": "2024-05-01T10:20:30.123456789Z",
        "ModifiedAt": "2024-05-01T10:20:30Z",
        "Description": "",
    }
    (tmp_path / "p.meta.json").write_text(json.dumps(meta))
    (tmp_path / "p.lsql").write_text("SELECT * FROM t ; ")
    loaded = StoredProc.load("p", tmp_path)
    assert loaded.parameters == []
    assert loaded.created_at == datetime(2024, 5, 1, 10, 20, 30, 123456, tzinfo=timezone.utc)
    assert loaded.modified_at == datetime(2024, 5, 1, 10, 20, 30, tzinfo=timezone.utc)


def test_load_rejects_bad_timestamp(tmp_path):
    meta = {
        "Name": "p",
        "Parameters": [],
        "CreatedAt": "yesterday",
        "ModifiedAt": "yesterday",
        "Description": "",
    }
    (tmp_path / "p.meta.json").write_text(json.dumps(meta))
    (tmp_path / "p.lsql").write_text("")
    with pytest.raises(ValueError):
        StoredProc.load("p", tmp_path)