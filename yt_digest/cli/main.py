# yt_digest/cli/main.py
"""
CLI entrypoint for transcript retrieval and summarization.

Thin adapter: parse arguments, call the core, print or write JSON, report
status. Structured JSON logs from the core go to stderr, so stdout carries
only the JSON payload.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from yt_digest.config import get_settings
from yt_digest.digest import run_digest
from yt_digest.retrieval.core import retrieve_transcript

app = typer.Typer(
    name="yt-digest",
    help="Fetch video transcripts across fallback channels and summarize them",
    no_args_is_help=True,
)


def _emit(payload: Dict[str, Any], out: Optional[Path]) -> None:
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if out is None:
        typer.echo(text)
        return
    out = out.expanduser()
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    typer.echo(f"Written to: {out}")


@app.command()
def transcript(
    url: str = typer.Argument(..., help="Video URL or bare video id"),
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Preferred caption language"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the outcome JSON to this file"),
) -> None:
    """Retrieve a transcript and print the outcome as JSON."""
    settings = get_settings()
    outcome = retrieve_transcript(url, preferred_language=lang, config=settings.retrieval_config())
    _emit(outcome.model_dump(mode="json"), out)

    if outcome.success:
        typer.echo(typer.style(f"✓ Transcript via {outcome.channel_name.value}", fg=typer.colors.GREEN, bold=True), err=True)
    else:
        typer.echo(typer.style(f"✗ {outcome.error}", fg=typer.colors.RED, bold=True), err=True)
        raise typer.Exit(code=1)


@app.command()
def summarize(
    url: str = typer.Argument(..., help="Video URL or bare video id"),
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Preferred caption language"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the digest JSON to this file"),
) -> None:
    """Retrieve a transcript and summarize it."""
    try:
        result = run_digest(url, preferred_language=lang)
    except KeyboardInterrupt:
        typer.echo("\nInterrupted by user.", err=True)
        sys.exit(1)

    _emit(result.model_dump(mode="json"), out)

    if not result.success:
        typer.echo(typer.style(f"✗ {result.error}", fg=typer.colors.RED, bold=True), err=True)
        raise typer.Exit(code=1)
    if result.error:
        typer.echo(typer.style(f"⚠ {result.error}", fg=typer.colors.YELLOW), err=True)
    else:
        typer.echo(typer.style("✓ Summary generated", fg=typer.colors.GREEN, bold=True), err=True)


if __name__ == "__main__":
    app()
