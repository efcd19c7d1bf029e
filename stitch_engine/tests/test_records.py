"""Tests for the pattern document contract (inbound and outbound)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from src.utils.validators import PatternFileError
from stitch_engine.commands import CommandKind, encode
from stitch_engine.pattern import Pattern, Thread
from stitch_engine.records import (
    decoded_records,
    pattern_from_document,
    pattern_from_file,
    pattern_to_document,
    write_pattern_file,
)


@pytest.fixture()
def document() -> dict:
    return {
        "schema": "pattern.v1",
        "metadata": {"name": "rose"},
        "threads": [
            {"description": "Red", "colour": 0xFF0000, "catalog_number": "1147", "brand": "Madeira"},
            {"description": "Leaf"},
        ],
        "stitches": [
            {"x": 0, "y": 0, "command": 0},
            {"x": 10, "y": -5, "command": 1},
            {"x": 12.5, "y": -5, "command": encode(CommandKind.NEEDLE_SET, needle=1)},
        ],
    }


class TestInbound:
    def test_builds_pattern(self, document: dict) -> None:
        p = pattern_from_document(document)
        assert len(p) == 3
        assert [s.kind for s in p] == [
            CommandKind.STITCH,
            CommandKind.JUMP,
            CommandKind.NEEDLE_SET,
        ]
        assert p.threads[0] == Thread("Red", 0xFF0000, "1147", "Madeira")
        assert p.threads[1].colour is None
        assert p.metadata == {"name": "rose"}

    def test_cursor_at_last_stitch(self, document: dict) -> None:
        p = pattern_from_document(document)
        assert p.position.as_tuple() == (12.5, -5)

    def test_relative_builder_continues(self, document: dict) -> None:
        p = pattern_from_document(document)
        p.stitch_relative((0.5, 5))
        assert (p.stitches[-1].x, p.stitches[-1].y) == (13, 0)

    def test_empty_document(self) -> None:
        p = pattern_from_document({"schema": "pattern.v1"})
        assert len(p) == 0
        assert p.position.as_tuple() == (0, 0)

    def test_invalid_document(self, document: dict) -> None:
        document["stitches"][1]["command"] = -1
        with pytest.raises(PatternFileError, match="stitches"):
            pattern_from_document(document)

    def test_wrong_schema(self, document: dict) -> None:
        document["schema"] = "pattern.v0"
        with pytest.raises(PatternFileError, match="pattern.v1"):
            pattern_from_document(document)

    def test_from_yaml_file(self, tmp_path: Path, document: dict) -> None:
        path = tmp_path / "rose.yaml"
        path.write_text(yaml.safe_dump(document), encoding="utf-8")
        assert len(pattern_from_file(path)) == 3

    def test_from_json_file(self, tmp_path: Path, document: dict) -> None:
        path = tmp_path / "rose.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        assert pattern_from_file(path).threads[0].brand == "Madeira"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            pattern_from_file(tmp_path / "nope.yaml")


class TestOutbound:
    def test_document_round_trip(self, document: dict) -> None:
        assert pattern_to_document(pattern_from_document(document)) == {
            "schema": "pattern.v1",
            "metadata": {"name": "rose"},
            "threads": [
                {"description": "Red", "colour": 0xFF0000, "catalog_number": "1147", "brand": "Madeira"},
                {"description": "Leaf", "colour": None, "catalog_number": None, "brand": None},
            ],
            "stitches": document["stitches"],
        }

    def test_decoded_records(self, document: dict) -> None:
        records = decoded_records(pattern_from_document(document))
        assert records[1] == {
            "x": 10,
            "y": -5,
            "kind": "JUMP",
            "thread": None,
            "needle": None,
            "order": None,
        }
        assert records[2]["kind"] == "NEEDLE_SET"
        assert records[2]["needle"] == 1

    @pytest.mark.parametrize("fmt, suffix", [("yaml", ".yaml"), ("json", ".json")])
    def test_write_and_reload(self, tmp_path: Path, document: dict, fmt: str, suffix: str) -> None:
        p = pattern_from_document(document)
        target = write_pattern_file(p, tmp_path / "out" / f"rose{suffix}", fmt=fmt)
        assert target.exists()
        reloaded = pattern_from_file(target)
        assert [(s.x, s.y, s.command) for s in reloaded] == [(s.x, s.y, s.command) for s in p]
        assert reloaded.threads == p.threads

    def test_write_fillers(self, tmp_path: Path) -> None:
        p = Pattern()
        p.stitch_relative((1, 1))
        p.fix_colour_count()
        target = write_pattern_file(p, tmp_path / "filled.yaml")
        reloaded = pattern_from_file(target)
        assert reloaded.threads[0].description == "filler"

    def test_unknown_format(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Unknown output format"):
            write_pattern_file(Pattern(), tmp_path / "x.dst", fmt="dst")
