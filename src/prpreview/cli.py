from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import httpx
import typer
from rich.console import Console

from prpreview.core.code_context import LineLocator, resolve_comment_side, select_context_lines
from prpreview.core.diff_hunks import parse_patch
from prpreview.core.errors import PRPreviewError
from prpreview.core.logging import configure_logging, get_logger

app = typer.Typer(add_completion=False, help="pr-preview - pending review comments with code context.")
console = Console()
err_console = Console(stderr=True)
log = get_logger(__name__)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr")):
    configure_logging(verbose=verbose)


@app.command()
def preview(
    selector: Optional[str] = typer.Argument(None, help="PR number, URL, or owner/repo#number"),
    repo: Optional[str] = typer.Option(None, "--repo", "-R", help="Repository in 'owner/repo' format"),
    pr: Optional[int] = typer.Option(None, "--pr", help="Pull request number"),
    data_dir: Optional[Path] = typer.Option(None, help="Config dir (defaults to ~/.prpreview)"),
):
    """Preview your pending review comments with code context as JSON."""
    from prpreview.core.preview_service import PreviewService
    from prpreview.storage.config import ConfigStore

    cfg = ConfigStore(data_dir=data_dir).load()
    service = PreviewService.from_config(cfg)
    try:
        result = service.preview(selector, pr=pr, repo=repo)
    except (PRPreviewError, httpx.HTTPError) as e:
        err_console.print(f"[red]error:[/red] {e}")
        raise typer.Exit(code=1)
    console.print_json(json.dumps(result.as_dict()))


@app.command()
def context(
    patch_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Unified diff of one file"),
    line: int = typer.Option(..., help="Target line (old-file numbering for LEFT)"),
    start_line: int = typer.Option(0, help="Range start, 0 for a single line"),
    side: Optional[str] = typer.Option(None, help="LEFT or RIGHT (default: inferred from --diff-hunk, else RIGHT)"),
    diff_hunk: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="Comment diff excerpt for side inference"),
):
    """Print the code context of a line range in a local patch."""
    text = patch_file.read_text(encoding="utf-8")
    excerpt = diff_hunk.read_text(encoding="utf-8") if diff_hunk is not None else None
    s = resolve_comment_side(side, excerpt)

    if not parse_patch(text).covers(line, s.value):
        log.warning("line {} ({}) is not covered by any hunk in {}", line, s.value, patch_file)
    for c in select_context_lines(text, LineLocator(side=s, target_line=line, range_start=start_line)):
        console.print(c.render(), markup=False, highlight=False, soft_wrap=True)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind host"),
    port: int = typer.Option(8765, help="Bind port"),
    data_dir: Optional[Path] = typer.Option(None, help="Config dir (defaults to ~/.prpreview)"),
):
    """Start the JSON API."""
    import uvicorn

    from prpreview.web.app import create_app

    console.print(f"[bold]pr-preview[/bold] running at http://{host}:{port}")
    uvicorn.run(create_app(data_dir=data_dir), host=host, port=port, log_level="info")
