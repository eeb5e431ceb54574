from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from prpreview.core.diff_hunks import DiffLine, LineKind, iter_diff_lines, parse_hunk_header, split_patch_lines


class Side(str, Enum):
    LEFT = "LEFT"  # pre-change file
    RIGHT = "RIGHT"  # post-change file

    @classmethod
    def parse(cls, value: Union["Side", str, None]) -> "Side":
        """Lenient side parsing: anything that isn't LEFT resolves to RIGHT."""
        if isinstance(value, Side):
            return value
        if (value or "").strip().upper() == "LEFT":
            return cls.LEFT
        return cls.RIGHT


@dataclass(frozen=True)
class LineLocator:
    side: Side
    target_line: int
    # 0 means "single line"; same numbering space as target_line.
    range_start: int = 0

    @property
    def start(self) -> int:
        if 0 < self.range_start < self.target_line:
            return self.range_start
        return self.target_line

    @staticmethod
    def for_comment(
        *,
        line: int,
        start_line: int = 0,
        side: Union[Side, str, None] = None,
        original_line: int = 0,
        original_start_line: int = 0,
    ) -> "LineLocator":
        """
        Pick the numbering a review comment is anchored in. LEFT comments are
        located by their original-file lines when GitHub reports them, otherwise
        by `line`/`start_line`.
        """
        s = Side.parse(side)
        if s == Side.LEFT and (original_line or 0) > 0:
            return LineLocator(side=s, target_line=original_line, range_start=original_start_line or 0)
        return LineLocator(side=s, target_line=line or 0, range_start=start_line or 0)


@dataclass(frozen=True)
class ContextLine:
    line_number: int
    marker: str  # "+" | "-" | ""
    content: str

    def render(self) -> str:
        return f"{self.line_number}: {self.marker}{self.content}"


def infer_side_from_diff_hunk(diff_hunk: Optional[str]) -> Side:
    """
    A comment's diff excerpt ends at the commented line, so the kind of its last
    content line tells which file version the comment is on.
    """
    last = ""
    for text_line in split_patch_lines(diff_hunk):
        if parse_hunk_header(text_line) is not None:
            continue
        if text_line.strip().startswith("\\"):
            continue
        last = text_line
    if last.startswith("-"):
        return Side.LEFT
    return Side.RIGHT


def _side_number(dl: DiffLine, side: Side) -> Optional[int]:
    if dl.kind == LineKind.NO_NEWLINE:
        return None
    return dl.old_line if side == Side.LEFT else dl.new_line


def select_context_lines(text: Optional[str], locator: LineLocator) -> List[ContextLine]:
    """
    Lines of `text` (a full file patch or a diff excerpt) whose number on
    `locator.side` falls in [locator.start, locator.target_line].

    Deleted lines only exist on LEFT and added lines only on RIGHT. Hunks come in
    ascending file order, so the scan ends at the first visible line past the
    target.
    """
    out: List[ContextLine] = []
    if not text or locator.target_line <= 0:
        return out

    start, end = locator.start, locator.target_line
    for dl in iter_diff_lines(text):
        n = _side_number(dl, locator.side)
        if n is None:
            continue
        if n > end:
            break
        if n >= start:
            out.append(ContextLine(line_number=n, marker=dl.marker, content=dl.content))
    return out


def extract_code_context(
    text: Optional[str],
    *,
    line: int,
    start_line: int = 0,
    side: Union[Side, str, None] = None,
) -> List[str]:
    locator = LineLocator(side=Side.parse(side), target_line=line or 0, range_start=start_line or 0)
    return [c.render() for c in select_context_lines(text, locator)]


def resolve_comment_side(side: Union[Side, str, None], diff_hunk: Optional[str] = None) -> Side:
    """An explicit LEFT/RIGHT wins; anything else is inferred from the diff excerpt."""
    if isinstance(side, Side):
        return side
    if (side or "").strip().upper() in {"LEFT", "RIGHT"}:
        return Side.parse(side)
    return infer_side_from_diff_hunk(diff_hunk)


def resolve_comment_context(
    patch: Optional[str],
    *,
    line: int,
    start_line: int = 0,
    side: Union[Side, str, None] = None,
    original_line: int = 0,
    original_start_line: int = 0,
    diff_hunk: Optional[str] = None,
) -> List[str]:
    """
    Code context for one inline comment. No patch means no context.
    """
    if not patch:
        return []
    locator = LineLocator.for_comment(
        line=line,
        start_line=start_line,
        side=resolve_comment_side(side, diff_hunk),
        original_line=original_line,
        original_start_line=original_start_line,
    )
    return [c.render() for c in select_context_lines(patch, locator)]
