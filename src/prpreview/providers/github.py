from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from prpreview.core.errors import AuthRequiredError, ProviderError
from prpreview.core.types import PendingComment, PendingReview
from prpreview.providers.base import Provider, ProviderContext

VIEWER_QUERY = "query { viewer { login } }"

PENDING_REVIEWS_QUERY = """query PendingReviewWithComments(
  $owner: String!,
  $name: String!,
  $number: Int!,
  $pageSize: Int!,
  $cursor: String
) {
  repository(owner: $owner, name: $name) {
    pullRequest(number: $number) {
      reviews(states: [PENDING], first: $pageSize, after: $cursor) {
        nodes {
          id
          databaseId
          state
          author {
            login
          }
          comments(first: 100) {
            nodes {
              id
              databaseId
              path
              line
              startLine
              originalLine
              originalStartLine
              side
              startSide
              body
              diffHunk
            }
          }
        }
        pageInfo {
          hasNextPage
          endCursor
        }
      }
    }
  }
}"""

REVIEW_PAGE_SIZE = 10
MAX_REVIEW_PAGES = 10
MAX_FILE_PAGES = 30


def api_base(host: str) -> str:
    return "https://api.github.com" if host == "github.com" else f"https://{host}/api/v3"


def graphql_url(host: str) -> str:
    return "https://api.github.com/graphql" if host == "github.com" else f"https://{host}/api/graphql"


class GitHubProvider(Provider):
    def name(self) -> str:
        return "github"

    def viewer_login(self, ctx: ProviderContext) -> str:
        headers = _headers(ctx)
        with self._client(ctx) as client:
            data = _graphql(client, ctx.pr.host, VIEWER_QUERY, None, headers=headers)
        login = (((data or {}).get("viewer") or {}).get("login") or "").strip()
        if not login:
            raise ProviderError("viewer login unavailable")
        return login

    def pending_reviews(self, ctx: ProviderContext) -> List[PendingReview]:
        headers = _headers(ctx)
        pr = ctx.pr
        reviews: List[PendingReview] = []
        cursor: Optional[str] = None
        with self._client(ctx) as client:
            for _ in range(MAX_REVIEW_PAGES):
                variables = {
                    "owner": pr.owner,
                    "name": pr.repo,
                    "number": pr.number,
                    "pageSize": REVIEW_PAGE_SIZE,
                    "cursor": cursor,
                }
                data = _graphql(client, pr.host, PENDING_REVIEWS_QUERY, variables, headers=headers)
                conn = (((data or {}).get("repository") or {}).get("pullRequest") or {}).get("reviews")
                if conn is None:
                    raise ProviderError(f"pull request {pr.slug} not found")
                for node in conn.get("nodes") or []:
                    reviews.append(_review_from_node(node))
                page = conn.get("pageInfo") or {}
                cursor = page.get("endCursor")
                if not page.get("hasNextPage") or not cursor:
                    break
        return reviews

    def file_patches(self, ctx: ProviderContext) -> Dict[str, str]:
        pr = ctx.pr
        url = f"{api_base(pr.host)}/repos/{pr.owner}/{pr.repo}/pulls/{pr.number}/files"
        with self._client(ctx) as client:
            files = _get_all(client, url, headers=_headers(ctx), max_pages=MAX_FILE_PAGES)
        patches: Dict[str, str] = {}
        for f in files:
            name = f.get("filename")
            patch = f.get("patch")
            if name and patch:
                patches[name] = patch
        logger.debug("fetched {} patches for {} ({} files)", len(patches), pr.slug, len(files))
        return patches


def _headers(ctx: ProviderContext) -> dict:
    if not ctx.token:
        raise AuthRequiredError(ctx.pr.host, f"GitHub token required for {ctx.pr.host}.")
    return {"Accept": "application/vnd.github+json", "Authorization": f"Bearer {ctx.token}"}


def _check(r: httpx.Response, host: str, what: str) -> None:
    if r.status_code in {401, 403}:
        raise AuthRequiredError(host, f"GitHub auth failed ({r.status_code}).")
    if r.status_code >= 400:
        raise ProviderError(f"GitHub {what} error {r.status_code}: {r.text[:500]}")


def _graphql(client: httpx.Client, host: str, query: str, variables: Optional[dict], *, headers: dict) -> dict:
    payload: Dict[str, Any] = {"query": query}
    if variables:
        payload["variables"] = variables
    r = client.post(graphql_url(host), headers=headers, json=payload)
    _check(r, host, "GraphQL API")
    try:
        body = r.json()
    except ValueError as e:
        raise ProviderError(f"GitHub GraphQL API returned non-JSON response: {r.text[:200]}") from e
    errors = body.get("errors") or []
    if errors:
        msg = "; ".join(str(e.get("message") or e) for e in errors)
        raise ProviderError(f"GitHub GraphQL error: {msg}")
    return body.get("data") or {}


def _get_all(client: httpx.Client, url: str, *, headers: dict, max_pages: int) -> list:
    out = []
    page = 1
    host = httpx.URL(url).host
    while True:
        r = client.get(url, headers=headers, params={"per_page": 100, "page": page})
        _check(r, host, "files API")
        try:
            items = r.json()
        except ValueError as e:
            raise ProviderError(f"GitHub files API returned non-JSON response: {r.text[:200]}") from e
        if not isinstance(items, list):
            raise ProviderError(f"GitHub files API returned unexpected payload: {r.text[:200]}")
        if not items:
            break
        out.extend(items)
        if len(items) < 100:
            break
        page += 1
        if page > max_pages:
            break
    return out


def _review_from_node(node: dict) -> PendingReview:
    review = PendingReview(
        id=node.get("id") or "",
        database_id=int(node.get("databaseId") or 0),
        state=node.get("state") or "",
        author=((node.get("author") or {}).get("login") or ""),
    )
    for c in ((node.get("comments") or {}).get("nodes") or []):
        review.comments.append(
            PendingComment(
                id=c.get("id") or "",
                database_id=int(c.get("databaseId") or 0),
                path=c.get("path") or "",
                line=int(c.get("line") or 0),
                start_line=int(c.get("startLine") or 0),
                original_line=int(c.get("originalLine") or 0),
                original_start_line=int(c.get("originalStartLine") or 0),
                side=c.get("side"),
                body=c.get("body") or "",
                diff_hunk=c.get("diffHunk") or "",
            )
        )
    return review
