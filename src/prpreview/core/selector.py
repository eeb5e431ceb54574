from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from prpreview.core.errors import SelectorError

DEFAULT_HOST = "github.com"


@dataclass(frozen=True)
class PullRequestIdentity:
    host: str
    owner: str
    repo: str
    number: int

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"


def normalize_host(value: Optional[str]) -> str:
    """
    Normalize a user-provided host value to a bare lowercase netloc.

    Examples:
    - "https://github.example.com" -> "github.example.com"
    - "github.com/acme" -> "github.com"
    - "GITHUB.COM" -> "github.com"
    """
    v = (value or "").strip()
    if not v:
        return ""
    if "://" in v:
        v = urlparse(v).netloc or ""
    if "/" in v:
        v = v.split("/", 1)[0]
    return v.lower()


def default_host() -> str:
    return normalize_host(os.environ.get("GH_HOST")) or DEFAULT_HOST


_URL_PATH_RE = re.compile(r"^/([^/]+)/([^/]+)/pull/(\d+)(?:/.*)?$")
_SLUG_RE = re.compile(r"^([^/\s#]+)/([^/\s#]+)#(\d+)$")
_NUMBER_RE = re.compile(r"^#?(\d+)$")


def normalize_selector(selector: Optional[str], pr: Optional[int] = None) -> str:
    """Merge the positional selector with `--pr`; exactly one source must name the PR."""
    s = (selector or "").strip()
    n = pr or 0
    if n < 0:
        raise SelectorError(f"invalid pull request number {n}")
    if s and n:
        m = _NUMBER_RE.match(s)
        if not m or int(m.group(1)) != n:
            raise SelectorError(f"conflicting pull request selectors: {s!r} and --pr {n}")
        return str(n)
    if n:
        return str(n)
    if not s:
        raise SelectorError("pull request selector required (number, URL, or owner/repo#number)")
    return s


def parse_repo(repo: Optional[str], host: Optional[str] = None) -> tuple[str, str, str]:
    """Parse "owner/repo" or "host/owner/repo" into (host, owner, repo)."""
    parts = [p for p in (repo or "").strip().split("/") if p]
    if len(parts) == 2:
        return normalize_host(host) or default_host(), parts[0], parts[1]
    if len(parts) == 3:
        return normalize_host(parts[0]), parts[1], parts[2]
    raise SelectorError(f"invalid repository {repo!r}: expected owner/repo or host/owner/repo")


def resolve_identity(selector: str, repo: Optional[str] = None, host: Optional[str] = None) -> PullRequestIdentity:
    s = (selector or "").strip()
    if not s:
        raise SelectorError("pull request selector required")

    if "://" in s:
        u = urlparse(s)
        m = _URL_PATH_RE.match((u.path or "").rstrip("/"))
        if not u.netloc or not m:
            raise SelectorError(f"invalid pull request URL {s!r}")
        return PullRequestIdentity(
            host=normalize_host(u.netloc),
            owner=m.group(1),
            repo=m.group(2),
            number=int(m.group(3)),
        )

    m = _SLUG_RE.match(s)
    if m:
        return PullRequestIdentity(
            host=normalize_host(host) or default_host(),
            owner=m.group(1),
            repo=m.group(2),
            number=int(m.group(3)),
        )

    m = _NUMBER_RE.match(s)
    if m:
        if not repo:
            raise SelectorError(f"pull request {s!r} needs a repository (--repo owner/repo)")
        h, owner, name = parse_repo(repo, host)
        return PullRequestIdentity(host=h, owner=owner, repo=name, number=int(m.group(1)))

    raise SelectorError(f"unsupported pull request selector {s!r}")


def resolve_selector(
    selector: Optional[str] = None,
    *,
    pr: Optional[int] = None,
    repo: Optional[str] = None,
    host: Optional[str] = None,
) -> PullRequestIdentity:
    return resolve_identity(normalize_selector(selector, pr), repo=repo, host=host)
