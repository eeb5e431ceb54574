import pytest

from prpreview.core.diff_hunks import LineKind, iter_diff_lines, parse_hunk_header, parse_patch


@pytest.mark.parametrize(
    "line,expected",
    [
        ("@@ -10,2 +20,5 @@", (10, 2, 20, 5, "")),
        ("@@ -1 +1 @@", (1, 1, 1, 1, "")),
        ("@@ -5 +7,3 @@", (5, 1, 7, 3, "")),
        ("@@ -0,0 +1,173 @@", (0, 0, 1, 173, "")),
        ("@@ -224,6 +224,112 @@ def handler(request):", (224, 6, 224, 112, "def handler(request):")),
    ],
)
def test_parse_hunk_header(line, expected):
    h = parse_hunk_header(line)
    assert h is not None
    assert (h.old_start, h.old_len, h.new_start, h.new_len, h.section) == expected


@pytest.mark.parametrize("line", ["", " context", "+@@ -1 +1 @@", "@@ -a,1 +1 @@", "@@ garbage @@", "--- a/file.py"])
def test_parse_hunk_header_rejects_non_headers(line):
    assert parse_hunk_header(line) is None


def test_counters_follow_line_kinds():
    patch = """@@ -10,4 +20,5 @@
 ctx
-old
+new1
+new2
 ctx2
\\ No newline at end of file
"""
    lines = list(iter_diff_lines(patch))
    assert [(dl.kind, dl.old_line, dl.new_line, dl.content) for dl in lines] == [
        (LineKind.CONTEXT, 10, 20, "ctx"),
        (LineKind.DELETED, 11, None, "old"),
        (LineKind.ADDED, None, 21, "new1"),
        (LineKind.ADDED, None, 22, "new2"),
        (LineKind.CONTEXT, 12, 23, "ctx2"),
        (LineKind.NO_NEWLINE, None, None, "No newline at end of file"),
    ]


def test_lines_before_first_header_are_ignored():
    patch = "diff --git a/x b/x\n--- a/x\n+++ b/x\n@@ -3,1 +3,1 @@\n-a\n+b\n"
    lines = list(iter_diff_lines(patch))
    assert [(dl.marker, dl.content) for dl in lines] == [("-", "a"), ("+", "b")]


def test_blank_and_unknown_lines_count_as_context():
    patch = "@@ -1,3 +1,3 @@\n a\n\n?weird\n b"
    lines = list(iter_diff_lines(patch))
    assert [(dl.kind, dl.old_line, dl.new_line, dl.content) for dl in lines] == [
        (LineKind.CONTEXT, 1, 1, "a"),
        (LineKind.CONTEXT, 2, 2, ""),
        (LineKind.CONTEXT, 3, 3, "?weird"),
        (LineKind.CONTEXT, 4, 4, "b"),
    ]


def test_trailing_newline_and_crlf():
    lines = list(iter_diff_lines("@@ -1,1 +1,1 @@\r\n-a\r\n+b\r\n"))
    assert [(dl.marker, dl.content) for dl in lines] == [("-", "a"), ("+", "b")]


def test_each_header_reseeds_counters():
    patch = "@@ -1,2 +1,3 @@\n a\n+b\n c\n@@ -40,1 +41,2 @@\n x\n+y\n"
    numbered = [(dl.old_line, dl.new_line) for dl in iter_diff_lines(patch)]
    assert numbered == [(1, 1), (None, 2), (2, 3), (40, 41), (None, 42)]


def test_malformed_header_inside_hunk_is_skipped():
    patch = "@@ -1,2 +1,2 @@\n a\n@@ broken @@\n b\n"
    numbered = [(dl.content, dl.old_line, dl.new_line) for dl in iter_diff_lines(patch)]
    assert numbered == [("a", 1, 1), ("b", 2, 2)]


def test_empty_input():
    assert list(iter_diff_lines("")) == []
    assert list(iter_diff_lines(None)) == []
    assert parse_patch("").hunks == []


def test_parse_patch_groups_hunks():
    patch = "@@ -1,2 +1,3 @@ first\n a\n+b\n c\n@@ -40,2 +41,1 @@\n x\n-y\n"
    p = parse_patch(patch)
    assert [h.header.section for h in p.hunks] == ["first", ""]
    assert [len(h.lines) for h in p.hunks] == [3, 2]
    assert p.hunks[1].header.new_range == (41, 41)
    assert p.hunks[1].header.old_range == (40, 41)

    assert p.covers(2, "RIGHT")
    assert p.covers(2, "LEFT")
    assert not p.covers(3, "LEFT")
    assert p.covers(41, "LEFT")
    assert not p.covers(42, "RIGHT")
    assert not p.covers(100)
