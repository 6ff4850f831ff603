from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path

import typer

from .config import SearchConfig
from .errors import DirectoryUnreadable
from .indexer.indexer import Indexer
from .models import BuildStats
from .retrieval.retriever import Retriever

app = typer.Typer(add_completion=False, no_args_is_help=True)

def _setup_logging(log_file: str | None, log_level: str, verbose: bool) -> None:
    """Attach console (and optional rotating file) handlers to the docsift logger."""
    level = logging.DEBUG if verbose else getattr(logging, log_level.upper(), logging.INFO)

    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    handlers: list[logging.Handler] = []

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(fmt, datefmt))
    handlers.append(console)

    if log_file:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5
        )
        file_handler.setFormatter(logging.Formatter(fmt, datefmt))
        handlers.append(file_handler)

    logger = logging.getLogger("docsift")
    logger.setLevel(level)
    for h in handlers:
        logger.addHandler(h)

def _cfg(config: str, strategy: str | None = None, granularity: str | None = None) -> SearchConfig:
    cfg = SearchConfig.from_toml(config)
    if strategy is not None:
        cfg = dataclasses.replace(cfg, strategy=strategy)
    if granularity is not None:
        cfg = dataclasses.replace(cfg, granularity=granularity)
    return cfg

def _echo_stats(stats: BuildStats) -> None:
    typer.echo(
        f"Index built: {stats.documents_indexed} documents, {stats.chunks_indexed} chunks "
        f"in {stats.elapsed_seconds:.1f}s"
    )
    if stats.documents_failed:
        typer.echo(f"  ({stats.documents_failed} documents failed)")
        for doc_id, reason in sorted(stats.failures.items()):
            typer.echo(f"    {doc_id}: {reason}")
    if stats.chunks_omitted:
        typer.echo(f"  ({stats.chunks_omitted} chunks without embeddings omitted)")

@app.command()
def init(docs: str = typer.Option(..., help="Document directory to index"),
         out: str = typer.Option("config.toml", help="Write example config to this path")):
    """Write a starter config.toml."""
    outp = Path(out)
    outp.write_text(f"""[source]
root = "{docs}"
ignore = [".git/**", "**/.DS_Store", "**/~$*"]

[chunking]
# document | page | paragraph | fixed_words
granularity = "paragraph"
fixed_words_size = 500

[index]
# lexical | vector
strategy = "lexical"
extraction_workers = 4

[embeddings]
provider = "ollama"
model = "nomic-embed-text"
endpoint = "http://127.0.0.1:11434/api/embeddings"
timeout_s = 30
max_retries = 3
max_backoff_s = 30
concurrency = 4

[retrieval]
top_k = 5
snippet_chars = 300
# empty_list | placeholder_message
empty_result_policy = "empty_list"

[watch]
debounce_ms = 300
""", encoding="utf-8")
    typer.echo(f"Wrote {outp}")

@app.command()
def scan(config: str = typer.Option("config.toml"),
         strategy: str = typer.Option(None, help="Override index strategy (lexical|vector)"),
         granularity: str = typer.Option(None, help="Override chunk granularity"),
         log_file: str = typer.Option(None, "--log-file", "-l", help="Log file path"),
         verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose (DEBUG) logging")):
    """Build the index once and report what was indexed."""
    _setup_logging(log_file, "INFO", verbose)
    idx = Indexer(_cfg(config, strategy, granularity))
    try:
        stats = idx.scan()
    except DirectoryUnreadable as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)
    _echo_stats(stats)

@app.command()
def query(q: str, config: str = typer.Option("config.toml"), k: int = typer.Option(None),
          strategy: str = typer.Option(None, help="Override index strategy (lexical|vector)"),
          verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose (DEBUG) logging")):
    """Build the index once and print ranked results as JSON."""
    if verbose:
        _setup_logging(None, "DEBUG", verbose)
    idx = Indexer(_cfg(config, strategy))
    try:
        idx.scan()
    except DirectoryUnreadable as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)
    r = Retriever.for_indexer(idx)
    typer.echo(json.dumps(r.search_payload(q, k=k), indent=2))

@app.command()
def watch(config: str = typer.Option("config.toml"),
          k: int = typer.Option(None),
          log_file: str = typer.Option(None, "--log-file", "-l", help="Log file path"),
          verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose (DEBUG) logging")):
    """Keep the index fresh while answering queries typed on stdin."""
    _setup_logging(log_file, "INFO", verbose)
    idx = Indexer(_cfg(config))
    try:
        _echo_stats(idx.start(watch=True))
    except DirectoryUnreadable as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    r = Retriever.for_indexer(idx)
    typer.echo(f"Watching {idx.cfg.docs_root}. Type a query, or Ctrl+D to stop.")
    try:
        while True:
            try:
                line = input("> ")
            except EOFError:
                break
            typer.echo(json.dumps(r.search_payload(line, k=k), indent=2))
    except KeyboardInterrupt:
        pass
    finally:
        typer.echo("\nStopping watch mode...")
        idx.stop()

if __name__ == "__main__":
    app()
