from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class PendingComment:
    """
    An inline comment of a pending review, as reported by GitHub.
    `line`/`start_line` are post-change (RIGHT) numbers, `original_*` are
    pre-change (LEFT) numbers. 0 means unset.
    """

    id: str
    database_id: int
    path: str
    line: int = 0
    start_line: int = 0
    original_line: int = 0
    original_start_line: int = 0
    side: Optional[str] = None  # "LEFT" | "RIGHT" | None (infer from diff_hunk)
    body: str = ""
    diff_hunk: str = ""


@dataclass
class PendingReview:
    id: str
    database_id: int
    state: str
    author: str = ""
    comments: List[PendingComment] = field(default_factory=list)


@dataclass
class CommentPreview:
    id: str
    database_id: int
    path: str
    line: int
    body: str
    start_line: Optional[int] = None
    code_context: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "database_id": self.database_id,
            "path": self.path,
            "line": self.line,
        }
        if self.start_line:
            out["start_line"] = self.start_line
        out["body"] = self.body
        out["code_context"] = list(self.code_context)
        return out


@dataclass
class PreviewResult:
    review_id: str
    database_id: int
    state: str
    comments: List[CommentPreview] = field(default_factory=list)

    @property
    def comments_count(self) -> int:
        return len(self.comments)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "review_id": self.review_id,
            "database_id": self.database_id,
            "state": self.state,
            "comments_count": self.comments_count,
            "comments": [c.as_dict() for c in self.comments],
        }
