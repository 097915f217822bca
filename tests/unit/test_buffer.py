"""Tests for blacken.core.editing.buffer -- cursor, diff edits, sinks."""

import pytest

from blacken.core.editing.buffer import (
    CursorState,
    RegionSink,
    TextBuffer,
    TextEdit,
    apply_edits,
    diff_edits,
)


# =========================================================================
# CURSOR
# =========================================================================

class TestCursorState:
    def test_clamped_inside_range_unchanged(self):
        assert CursorState(3, 1).clamped(10) == CursorState(3, 1)

    def test_clamped_past_end(self):
        assert CursorState(50, 40).clamped(6) == CursorState(6, 6)

    def test_clamped_negative(self):
        assert CursorState(-2, -1).clamped(5) == CursorState(0, 0)


# =========================================================================
# DIFF EDITS
# =========================================================================

class TestDiffEdits:
    def test_identical_text_has_no_edits(self):
        assert diff_edits("a\nb\n", "a\nb\n") == []

    def test_only_changed_lines_are_touched(self):
        old = "import os\nx=1\ny = 2\n"
        new = "import os\nx = 1\ny = 2\n"
        edits = diff_edits(old, new)
        assert edits == [TextEdit(start=10, end=14, text="x = 1\n")]

    def test_insert_into_empty(self):
        assert diff_edits("", "x = 1\n") == [TextEdit(0, 0, "x = 1\n")]

    def test_delete_everything(self):
        assert diff_edits("a\nb\n", "") == [TextEdit(0, 4, "")]

    def test_missing_final_newline(self):
        old = "x=1"
        new = "x = 1\n"
        assert apply_edits(old, diff_edits(old, new)) == new

    @pytest.mark.parametrize(
        "old,new",
        [
            ("a\nb\nc\n", "a\nB\nc\nd\n"),
            ("def f():\n  return 1\n\n\n\nx=2\n", "def f():\n    return 1\n\n\nx = 2\n"),
            ("one\r\ntwo\r\n", "one\ntwo\n"),
            ("\n\n\n", "pass\n"),
        ],
    )
    def test_apply_reconstructs_new_text(self, old, new):
        assert apply_edits(old, diff_edits(old, new)) == new

    def test_edits_ascending_and_disjoint(self):
        old = "a=1\nkeep\nb=2\nkeep\nc=3\n"
        new = "a = 1\nkeep\nb = 2\nkeep\nc = 3\n"
        edits = diff_edits(old, new)
        assert len(edits) == 3
        for first, second in zip(edits, edits[1:]):
            assert first.end <= second.start


# =========================================================================
# TEXT BUFFER
# =========================================================================

class TestTextBuffer:
    def test_initial_cursor_clamped(self):
        buf = TextBuffer("abc", point=10, window_start=7)
        assert buf.cursor() == CursorState(3, 3)

    def test_replace_bumps_version_once(self):
        buf = TextBuffer("a=1\nb=2\n")
        buf.replace("a = 1\nb = 2\n", CursorState(0, 0))
        assert buf.text() == "a = 1\nb = 2\n"
        assert buf.version == 1
        assert buf.modified is True

    def test_replace_with_same_text_is_noop(self):
        buf = TextBuffer("same\n")
        buf.replace("same\n", CursorState(2, 0))
        assert buf.version == 0
        assert buf.modified is False

    def test_replace_keeps_absolute_cursor(self):
        buf = TextBuffer("x=1\ny=2\n", point=5, window_start=4)
        buf.replace("x = 1\ny = 2\n", buf.cursor())
        assert buf.point == 5
        assert buf.window_start == 4

    def test_replace_clamps_cursor_to_shorter_text(self):
        buf = TextBuffer("a very long line of text\n", point=20, window_start=10)
        buf.replace("y\n", buf.cursor())
        assert buf.point == 2
        assert buf.window_start == 2

    def test_replace_range_rejects_bad_range(self):
        buf = TextBuffer("abc")
        with pytest.raises(ValueError):
            buf.replace_range(2, 1, "x", CursorState())
        with pytest.raises(ValueError):
            buf.replace_range(0, 4, "x", CursorState())

    def test_file_round_trip_preserves_newlines(self, tmp_path):
        path = tmp_path / "crlf.py"
        path.write_bytes(b"x=1\r\ny=2\r\n")
        buf = TextBuffer.from_file(path)
        assert buf.text() == "x=1\r\ny=2\r\n"
        assert buf.file_path == path
        buf.replace("x = 1\r\ny = 2\r\n", buf.cursor())
        buf.save()
        assert path.read_bytes() == b"x = 1\r\ny = 2\r\n"
        assert buf.modified is False

    def test_save_without_path_raises(self):
        with pytest.raises(ValueError):
            TextBuffer("x").save()


# =========================================================================
# REGION SINK
# =========================================================================

class TestRegionSink:
    def test_text_is_the_subrange(self):
        buf = TextBuffer("head\nx=1\ntail\n")
        sink = RegionSink(buf, 5, 9)
        assert sink.text() == "x=1\n"

    def test_invalid_region(self):
        with pytest.raises(ValueError):
            RegionSink(TextBuffer("abc"), 2, 5)

    def test_replace_only_touches_region(self):
        buf = TextBuffer("head\nx=1\ntail\n")
        sink = RegionSink(buf, 5, 9)
        sink.replace("x = 1\n", buf.cursor())
        assert buf.text() == "head\nx = 1\ntail\n"
        assert sink.end == 11

    def test_cursor_after_region_shifts(self):
        buf = TextBuffer("head\nx=1\ntail\n", point=12, window_start=0)
        sink = RegionSink(buf, 5, 9)
        sink.replace("x = 1\n", sink.cursor())
        assert buf.point == 14
        assert buf.text()[buf.point:] == "l\n"
        assert buf.window_start == 0

    def test_cursor_inside_region_clamped(self):
        buf = TextBuffer("head\nlong=line\ntail\n", point=14)
        sink = RegionSink(buf, 5, 15)
        sink.replace("y\n", sink.cursor())
        assert buf.text() == "head\ny\ntail\n"
        assert buf.point == 7
