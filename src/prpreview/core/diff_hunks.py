from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple, Union


@dataclass(frozen=True)
class HunkHeader:
    old_start: int
    old_len: int
    new_start: int
    new_len: int
    section: str = ""  # trailing text after the closing @@ (e.g. enclosing function)

    @property
    def new_range(self) -> Tuple[int, int]:
        return self.new_start, self.new_start + max(self.new_len, 1) - 1

    @property
    def old_range(self) -> Tuple[int, int]:
        return self.old_start, self.old_start + max(self.old_len, 1) - 1


_HUNK_RE = re.compile(r"^@@\s*-(\d+)(?:,(\d+))?\s+\+(\d+)(?:,(\d+))?\s*@@(.*)$")


def parse_hunk_header(line: str) -> Optional[HunkHeader]:
    """
    Parse "@@ -A[,B] +C[,D] @@ [section]". Returns None for anything else.
    An omitted count means 1, as in `diff -U`.
    """
    m = _HUNK_RE.match(line or "")
    if not m:
        return None
    return HunkHeader(
        old_start=int(m.group(1)),
        old_len=int(m.group(2) or "1"),
        new_start=int(m.group(3)),
        new_len=int(m.group(4) or "1"),
        section=m.group(5).strip(),
    )


class LineKind(str, Enum):
    ADDED = "added"
    DELETED = "deleted"
    CONTEXT = "context"
    NO_NEWLINE = "no_newline"


@dataclass(frozen=True)
class DiffLine:
    kind: LineKind
    content: str
    # Position in the pre-change file; None for added lines and markers.
    old_line: Optional[int] = None
    # Position in the post-change file; None for deleted lines and markers.
    new_line: Optional[int] = None

    @property
    def marker(self) -> str:
        if self.kind == LineKind.ADDED:
            return "+"
        if self.kind == LineKind.DELETED:
            return "-"
        return ""


def split_patch_lines(text: Optional[str]) -> List[str]:
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [ln[:-1] if ln.endswith("\r") else ln for ln in lines]


def _scan(text: Optional[str]) -> Iterator[Union[HunkHeader, DiffLine]]:
    old_line = 0
    new_line = 0
    in_hunk = False

    for text_line in split_patch_lines(text):
        header = parse_hunk_header(text_line)
        if header is not None:
            old_line, new_line = header.old_start, header.new_start
            in_hunk = True
            yield header
            continue
        if not in_hunk or text_line.startswith("@@"):
            # malformed headers are dropped without moving the counters
            continue

        lead = text_line[:1]
        if lead == "+":
            yield DiffLine(LineKind.ADDED, text_line[1:], new_line=new_line)
            new_line += 1
        elif lead == "-":
            yield DiffLine(LineKind.DELETED, text_line[1:], old_line=old_line)
            old_line += 1
        elif lead == "\\":
            yield DiffLine(LineKind.NO_NEWLINE, text_line[1:].strip())
        else:
            # " " is regular context; "" is a blank context line whose leading
            # space was trimmed; anything else keeps its first char as content.
            content = text_line[1:] if lead == " " else text_line
            yield DiffLine(LineKind.CONTEXT, content, old_line=old_line, new_line=new_line)
            old_line += 1
            new_line += 1


def iter_diff_lines(text: Optional[str]) -> Iterator[DiffLine]:
    """
    Walk a patch (or a per-comment diff excerpt) and yield every line after the
    first hunk header with its old/new file line numbers.

    Each header re-seeds both counters, so several hunks can share one input.
    Malformed lines never stop the scan: an unrecognized "@@" header is skipped
    and any other unknown line is counted as context.
    """
    for item in _scan(text):
        if isinstance(item, DiffLine):
            yield item


@dataclass
class Hunk:
    header: HunkHeader
    lines: List[DiffLine] = field(default_factory=list)


@dataclass
class Patch:
    hunks: List[Hunk] = field(default_factory=list)

    def covers(self, line: int, side: str = "RIGHT") -> bool:
        """True if some hunk carries `line` on the given side ("LEFT" = old file)."""
        left = (side or "").strip().upper() == "LEFT"
        for h in self.hunks:
            for dl in h.lines:
                n = dl.old_line if left else dl.new_line
                if n == line:
                    return True
        return False


def parse_patch(text: Optional[str]) -> Patch:
    patch = Patch()
    for item in _scan(text):
        if isinstance(item, HunkHeader):
            patch.hunks.append(Hunk(header=item))
        else:
            patch.hunks[-1].lines.append(item)
    return patch
