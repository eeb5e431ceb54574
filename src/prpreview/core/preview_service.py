from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import httpx
from loguru import logger

from prpreview.core.code_context import resolve_comment_context
from prpreview.core.errors import NoPendingReviewError, PRPreviewError
from prpreview.core.selector import PullRequestIdentity, resolve_selector
from prpreview.core.types import CommentPreview, PendingComment, PendingReview, PreviewResult
from prpreview.providers.base import Provider, ProviderContext
from prpreview.providers.github import GitHubProvider
from prpreview.storage.config import AppConfig


def build_comment_preview(comment: PendingComment, patches: Dict[str, str]) -> CommentPreview:
    context = resolve_comment_context(
        patches.get(comment.path),
        line=comment.line,
        start_line=comment.start_line,
        side=comment.side,
        original_line=comment.original_line,
        original_start_line=comment.original_start_line,
        diff_hunk=comment.diff_hunk,
    )
    logger.debug("comment {} on {}:{} -> {} context lines", comment.id, comment.path, comment.line, len(context))
    return CommentPreview(
        id=comment.id,
        database_id=comment.database_id,
        path=comment.path,
        line=comment.line,
        start_line=comment.start_line if comment.start_line > 0 else None,
        body=comment.body,
        code_context=context,
    )


def pick_viewer_review(reviews: List[PendingReview], viewer: str) -> Optional[PendingReview]:
    for r in reviews:
        if r.author.lower() == viewer.lower():
            return r
    return None


@dataclass
class PreviewService:
    cfg: AppConfig
    provider: Provider = field(default_factory=GitHubProvider)

    @staticmethod
    def from_config(cfg: AppConfig) -> "PreviewService":
        return PreviewService(cfg=cfg)

    def _context(self, pr: PullRequestIdentity) -> ProviderContext:
        return ProviderContext(pr=pr, token=self.cfg.token_for(pr.host), timeout_s=self.cfg.timeout_s)

    def fetch_patches(self, ctx: ProviderContext) -> Dict[str, str]:
        # Code context is supplementary: the preview is still returned without it.
        try:
            return self.provider.file_patches(ctx)
        except (PRPreviewError, httpx.HTTPError) as e:
            logger.warning("could not fetch patches for {}: {}", ctx.pr.slug, e)
            return {}

    def preview(
        self,
        selector: Optional[str] = None,
        *,
        pr: Optional[int] = None,
        repo: Optional[str] = None,
        host: Optional[str] = None,
    ) -> PreviewResult:
        identity = resolve_selector(selector, pr=pr, repo=repo, host=host)
        ctx = self._context(identity)

        viewer = self.provider.viewer_login(ctx)
        review = pick_viewer_review(self.provider.pending_reviews(ctx), viewer)
        if review is None:
            raise NoPendingReviewError(viewer)

        patches = self.fetch_patches(ctx)
        return PreviewResult(
            review_id=review.id,
            database_id=review.database_id,
            state=review.state,
            comments=[build_comment_preview(c, patches) for c in review.comments],
        )
