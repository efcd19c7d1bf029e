"""Test atomic filesystem operations.

Tests for src.utils.fs:
    - Atomic writes leave no temporary files behind
    - YAML/JSON roundtrip preserves structure and key order
    - load_document dispatches on suffix
    - ensure_dir creates parents

Run:
    pytest tests/test_fs.py -v
"""

import json

import pytest
import yaml

from src.utils import fs


# ============================================================================
# ATOMIC WRITES
# ============================================================================

def test_ensure_dir(tmp_path):
    target = tmp_path / "a" / "b" / "c"
    result = fs.ensure_dir(target)
    assert result == target
    assert target.is_dir()
    # Second call is a no-op
    fs.ensure_dir(target)


def test_atomic_write_bytes(tmp_path):
    path = tmp_path / "sub" / "data.bin"
    fs.atomic_write_bytes(path, b"\x00\x01\x02")
    assert path.read_bytes() == b"\x00\x01\x02"
    assert list(path.parent.iterdir()) == [path]


def test_atomic_write_overwrites(tmp_path):
    path = tmp_path / "note.txt"
    fs.atomic_write_text(path, "first")
    fs.atomic_write_text(path, "second")
    assert path.read_text(encoding="utf-8") == "second"


def test_atomic_write_failure_cleans_up(tmp_path):
    # Target is an existing directory: the final rename fails
    target = tmp_path / "taken"
    target.mkdir()
    (target / "child").write_text("x")
    with pytest.raises(RuntimeError, match="atomically"):
        fs.atomic_write_bytes(target, b"data")
    assert not (tmp_path / "taken.tmp").exists()


# ============================================================================
# YAML / JSON
# ============================================================================

def test_atomic_yaml_roundtrip_preserves_order(tmp_path):
    doc = {"schema": "pattern.v1", "metadata": {"b": 1, "a": 2}, "stitches": []}
    path = tmp_path / "doc.yaml"
    fs.atomic_yaml_dump(doc, path)
    text = path.read_text(encoding="utf-8")
    assert text.index("schema") < text.index("metadata") < text.index("stitches")
    assert fs.load_yaml(path) == doc


def test_atomic_json_dump(tmp_path):
    path = tmp_path / "doc.json"
    fs.atomic_json_dump({"x": [1, 2]}, path)
    assert json.loads(path.read_text(encoding="utf-8")) == {"x": [1, 2]}
    assert path.read_text(encoding="utf-8").endswith("\n")


def test_load_yaml_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        fs.load_yaml(tmp_path / "missing.yaml")


def test_load_yaml_empty_is_none(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert fs.load_yaml(path) is None


def test_load_yaml_invalid(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("key: [unclosed\n")
    with pytest.raises(yaml.YAMLError, match="bad.yaml"):
        fs.load_yaml(path)


def test_load_json_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        fs.load_json(tmp_path / "missing.json")


def test_load_document_dispatch(tmp_path):
    json_path = tmp_path / "p.json"
    json_path.write_text('{"a": 1}')
    yaml_path = tmp_path / "p.yml"
    yaml_path.write_text("a: 2\n")
    assert fs.load_document(json_path) == {"a": 1}
    assert fs.load_document(yaml_path) == {"a": 2}
