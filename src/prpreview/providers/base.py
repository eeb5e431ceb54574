from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx

from prpreview.core.selector import PullRequestIdentity
from prpreview.core.types import PendingReview


@dataclass(frozen=True)
class ProviderContext:
    pr: PullRequestIdentity
    token: Optional[str]
    timeout_s: float = 30.0


class Provider(ABC):
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def viewer_login(self, ctx: ProviderContext) -> str: ...

    @abstractmethod
    def pending_reviews(self, ctx: ProviderContext) -> List[PendingReview]: ...

    @abstractmethod
    def file_patches(self, ctx: ProviderContext) -> Dict[str, str]:
        """Unified diff per changed file path. Files without a patch (binary, too large) are absent."""

    def _client(self, ctx: ProviderContext) -> httpx.Client:
        return httpx.Client(timeout=ctx.timeout_s, follow_redirects=True)
