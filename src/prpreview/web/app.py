from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from loguru import logger
from pydantic import BaseModel, Field

from prpreview.core.code_context import resolve_comment_context, resolve_comment_side
from prpreview.core.errors import AuthRequiredError, NoPendingReviewError, PRPreviewError
from prpreview.core.preview_service import PreviewService
from prpreview.core.selector import normalize_host
from prpreview.storage.config import AppConfig, ConfigStore


class PreviewRequest(BaseModel):
    selector: Optional[str] = Field(None, description="PR number, URL, or owner/repo#number")
    pr: Optional[int] = Field(None, description="PR number (alternative to selector)")
    repo: Optional[str] = Field(None, description="owner/repo, required for bare numbers")


class CodeContextRequest(BaseModel):
    patch: str = ""
    line: int = 0
    start_line: int = 0
    side: Optional[str] = Field(None, description="LEFT|RIGHT, or null to infer from diff_hunk")
    original_line: int = 0
    original_start_line: int = 0
    diff_hunk: Optional[str] = None


class TokenUpsert(BaseModel):
    host: str
    token: str


class TokenDelete(BaseModel):
    host: str


def create_app(*, data_dir: Optional[Path] = None) -> FastAPI:
    root_path = (os.getenv("PRPREVIEW_ROOT_PATH") or "").rstrip("/")
    app = FastAPI(title="pr-preview", version="0.1.0", root_path=root_path)

    store = ConfigStore(data_dir=data_dir)

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    @app.get("/api/settings")
    def get_settings():
        return _safe_settings(store.load())

    @app.post("/api/settings/token")
    def upsert_token(payload: TokenUpsert):
        host = normalize_host(payload.host)
        if not host:
            raise HTTPException(status_code=400, detail={"error": "host is required"})
        cfg = store.load()
        cfg.tokens[host] = payload.token
        store.save(cfg)
        return {"ok": True, "host": host}

    @app.post("/api/settings/token/delete")
    def delete_token(payload: TokenDelete):
        cfg = store.load()
        host = normalize_host(payload.host)
        if host in (cfg.tokens or {}):
            del cfg.tokens[host]
            store.save(cfg)
        return {"ok": True, "host": host}

    @app.post("/api/preview")
    def preview(payload: PreviewRequest):
        service = PreviewService.from_config(store.load())
        try:
            result = service.preview(payload.selector, pr=payload.pr, repo=payload.repo)
            return result.as_dict()
        except AuthRequiredError as e:
            raise HTTPException(status_code=401, detail={"error": str(e), "host": e.host})
        except NoPendingReviewError as e:
            raise HTTPException(status_code=404, detail={"error": str(e), "viewer": e.viewer})
        except PRPreviewError as e:
            raise HTTPException(status_code=400, detail={"error": str(e)})
        except Exception as e:
            logger.exception("preview failed")
            raise HTTPException(status_code=500, detail={"error": f"Unexpected error: {e}"})

    @app.post("/api/code-context")
    def code_context(payload: CodeContextRequest):
        side = resolve_comment_side(payload.side, payload.diff_hunk)
        lines = resolve_comment_context(
            payload.patch,
            line=payload.line,
            start_line=payload.start_line,
            side=payload.side,
            original_line=payload.original_line,
            original_start_line=payload.original_start_line,
            diff_hunk=payload.diff_hunk,
        )
        return {"side": side.value, "code_context": lines}

    return app


def _safe_settings(cfg: AppConfig) -> Dict[str, Any]:
    def mask(tok: str) -> str:
        if not tok:
            return ""
        if len(tok) <= 8:
            return "*" * len(tok)
        return "*" * (len(tok) - 4) + tok[-4:]

    return {
        "tokens": {h: mask(t) for h, t in (cfg.tokens or {}).items()},
        "timeout_s": cfg.timeout_s,
    }
