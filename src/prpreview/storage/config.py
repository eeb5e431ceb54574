from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from prpreview.core.selector import DEFAULT_HOST, normalize_host


def default_data_dir() -> Path:
    env = (os.environ.get("PRPREVIEW_HOME") or "").strip()
    if env:
        return Path(env).expanduser()
    return Path.home() / ".prpreview"


@dataclass
class AppConfig:
    # auth tokens keyed by normalized host
    tokens: Dict[str, str] = field(default_factory=dict)
    timeout_s: float = 30.0

    def token_for(self, host: str) -> Optional[str]:
        """Stored token first, then the same env vars the gh CLI honours."""
        h = normalize_host(host) or DEFAULT_HOST
        tok = (self.tokens or {}).get(h)
        if tok:
            return tok
        if h == DEFAULT_HOST:
            names = ["GH_TOKEN", "GITHUB_TOKEN"]
        else:
            names = ["GH_ENTERPRISE_TOKEN", "GITHUB_ENTERPRISE_TOKEN"]
        for name in names:
            v = (os.environ.get(name) or "").strip()
            if v:
                return v
        return None


class ConfigStore:
    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = data_dir or default_data_dir()
        self.path = self.data_dir / "config.json"

    def load(self) -> AppConfig:
        if not self.path.exists():
            return AppConfig()
        data = json.loads(self.path.read_text(encoding="utf-8"))
        cfg = AppConfig(
            tokens=data.get("tokens", {}) or {},
            timeout_s=float(data.get("timeout_s") or 30.0),
        )
        # Migration: hosts pasted as URLs ("https://GitHub.com/") are stored
        # under their bare netloc so token lookup works.
        migrated = _migrate_tokens(cfg.tokens)
        if migrated is not None:
            cfg.tokens = migrated
            self.save(cfg)
        return cfg

    def save(self, cfg: AppConfig) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".json.tmp")
        tmp.write_text(
            json.dumps({"tokens": cfg.tokens, "timeout_s": cfg.timeout_s}, indent=2, sort_keys=True),
            encoding="utf-8",
        )
        os.replace(tmp, self.path)
        try:
            os.chmod(self.path, 0o600)
        except OSError:
            # best-effort on platforms that don't support chmod in the same way
            pass


def _migrate_tokens(tokens: Dict[str, str]) -> Optional[Dict[str, str]]:
    if not tokens:
        return None

    changed = False
    merged: Dict[str, str] = {}
    canonical: Dict[str, bool] = {}
    for host_key, tok in tokens.items():
        nh = normalize_host(host_key)
        if nh != host_key:
            changed = True
        if not nh or not isinstance(tok, str):
            changed = True
            continue
        is_canonical = host_key == nh
        if nh not in merged:
            merged[nh] = tok
            canonical[nh] = is_canonical
        elif not canonical[nh] and is_canonical:
            # Prefer the already-normalized key on collision.
            merged[nh] = tok
            canonical[nh] = True

    if not changed:
        return None
    return merged
