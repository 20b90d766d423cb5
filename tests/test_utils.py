"""Unit tests for utility functions."""

import os
from pathlib import Path

import pytest

from pybitburner.utils import (
    display_path,
    has_source_extension,
    resolve_within,
    write_text_file,
)


class TestHasSourceExtension:
    """Tests for has_source_extension."""

    def test_recognized(self):
        assert has_source_extension("a.js")
        assert has_source_extension("dir/b.ts")
        assert has_source_extension("c.txt")

    def test_unrecognized(self):
        assert not has_source_extension("a.jsx")
        assert not has_source_extension("b.script")
        assert not has_source_extension("js")


class TestResolveWithin:
    """Tests for resolve_within."""

    def test_nested_path(self, temp_dir: Path):
        result = resolve_within(temp_dir, "lib/a.js")
        assert result == temp_dir.resolve() / "lib" / "a.js"

    def test_leading_slash_is_relative(self, temp_dir: Path):
        """Test that remote-style absolute names stay inside base_dir."""
        result = resolve_within(temp_dir, "/lib/a.js")
        assert result == temp_dir.resolve() / "lib" / "a.js"

    def test_parent_escape_is_rejected(self, temp_dir: Path):
        with pytest.raises(ValueError, match="escapes"):
            resolve_within(temp_dir, "../outside.js")

    def test_inner_parent_reference_is_allowed(self, temp_dir: Path):
        result = resolve_within(temp_dir, "lib/../a.js")
        assert result == temp_dir.resolve() / "a.js"


class TestWriteTextFile:
    """Tests for write_text_file."""

    def test_creates_parents_and_keeps_line_endings(self, temp_dir: Path):
        path = temp_dir / "a" / "b" / "c.js"

        write_text_file(path, "x\r\ny\n")

        assert path.read_bytes() == b"x\r\ny\n"


class TestDisplayPath:
    """Tests for display_path."""

    def test_relative_to_cwd(self):
        path = Path(os.getcwd()) / "types" / "defs.d.ts"
        assert display_path(path) == "types/defs.d.ts"
