import json
from pathlib import Path

import typer

from ..core.config import SETTINGS, Settings
from ..core.errors import MdChunkerError
from ..core.logging import setup_logging

app = typer.Typer(add_completion=False, help="Markdown chunking CLI")


@app.callback()
def _init() -> None:
    setup_logging(SETTINGS.LOG_FORMAT)  # type: ignore[arg-type]


@app.command()
def version() -> None:
    from .. import __version__

    typer.echo(__version__)


@app.command()
def chunk(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Markdown file to chunk"),
    tokens: int | None = typer.Option(None, "--tokens", min=1, help="Token budget per text chunk"),
    overlap: int | None = typer.Option(None, "--overlap", help="Overlap tokens (accepted, no effect)"),
    as_json: bool = typer.Option(False, "--json", help="Emit one JSON object per chunk"),
    config_file: str | None = typer.Option(None, "--config", help="Config file (.mdchunker.yaml auto-discovered)"),
) -> None:
    """Chunk one Markdown file and print the chunks with their line spans."""
    from ..chunking.boundaries import line_span
    from ..chunking.engine import chunk_document
    from ..chunking.resources import load_resources

    settings = Settings.load_config(config_file)
    raw = file.read_bytes()

    try:
        resources = load_resources(settings.TOKEN_ENCODING)
        chunks = chunk_document(
            raw.decode("utf-8"),
            chunk_tokens=tokens or settings.CHUNK_TOKEN_BUDGET,
            overlap_tokens=overlap if overlap is not None else settings.CHUNK_OVERLAP_TOKENS,
            resources=resources,
            strict_offsets=settings.STRICT_OFFSETS,
        )
    except (MdChunkerError, UnicodeDecodeError) as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1) from e

    for c in chunks:
        start_line, end_line = line_span(raw, c.start_idx, c.end_idx)
        if as_json:
            typer.echo(
                json.dumps(
                    {
                        "kind": c.kind.value,
                        "start_idx": c.start_idx,
                        "end_idx": c.end_idx,
                        "start_line": start_line,
                        "end_line": end_line,
                        "headings": c.headings,
                        "text": c.text,
                    },
                    ensure_ascii=False,
                )
            )
        else:
            context = " > ".join(h for h in c.headings if h) or "-"
            typer.echo(f"[{c.kind.value}] L{start_line}-{end_line} ({context})")
            typer.echo(c.text)
            typer.echo("")


@app.command()
def build(
    dirs: list[Path] = typer.Argument(..., exists=True, file_okay=False, help="Directories to crawl"),
    output: Path = typer.Option(..., "--output", "-o", help="JSON lines file to append records to"),
    tokens: int | None = typer.Option(None, "--tokens", min=1, help="Token budget per text chunk"),
    overlap: int | None = typer.Option(None, "--overlap", help="Overlap tokens (accepted, no effect)"),
    concurrency: int | None = typer.Option(None, "--concurrency", min=1, help="Parallel workers"),
    config_file: str | None = typer.Option(None, "--config", help="Config file (.mdchunker.yaml auto-discovered)"),
) -> None:
    """Chunk every Markdown file under DIRS into index records."""
    from ..chunking.resources import load_resources
    from ..indexing.runner import JsonlSink, index_documents

    settings = Settings.load_config(config_file)

    try:
        resources = load_resources(settings.TOKEN_ENCODING)
        summary = index_documents(
            dirs,
            JsonlSink(output),
            chunk_tokens=tokens or settings.CHUNK_TOKEN_BUDGET,
            overlap_tokens=overlap if overlap is not None else settings.CHUNK_OVERLAP_TOKENS,
            concurrency=concurrency or settings.INDEX_CONCURRENCY,
            extensions=settings.INDEX_EXTENSIONS,
            resources=resources,
            strict_offsets=settings.STRICT_OFFSETS,
        )
    except MdChunkerError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1) from e

    typer.echo(
        f"✅ Indexed {summary.documents} documents into {summary.chunks} records → {output}",
        err=True,
    )


if __name__ == "__main__":
    app()
