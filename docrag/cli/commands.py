"""Operator CLI for docrag.

Usage::

    python -m docrag.cli extract report.pdf
    python -m docrag.cli extract notes.txt --json
    python -m docrag.cli chunk report.pdf --max-size 800 --overlap 100
    python -m docrag.cli ask a.pdf b.txt --question "What changed in 2023?" \\
        --provider openai --api-key sk-...

Document state lives in process memory, so ``ask`` ingests its files and
queries them in the same run.  Provider flags default to the ``AI_*``
environment settings.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path

import structlog

from docrag.utils.errors import DocRAGError


def _route_logs_to_stderr(quiet: bool) -> None:
    """Send structlog and stdlib logging to stderr so stdout carries only command output.

    ``docrag.main`` configures logging when imported, so it is imported
    first and its configuration replaced.  ``--json`` implies quiet
    (WARNING and above only).
    """
    import docrag.main  # noqa: F401

    level = logging.WARNING if quiet else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    root.addHandler(handler)
    root.setLevel(level)
    for noisy in ("httpx", "httpcore", "chromadb"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _guess_mime(path: Path) -> str:
    mime, _ = mimetypes.guess_type(path.name)
    return mime or "application/octet-stream"


def _read_file(path: Path) -> bytes | None:
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return None
    return path.read_bytes()


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_extract(args: argparse.Namespace) -> int:
    from docrag.main import settings
    from docrag.services.document_extractor import DocumentExtractor

    path = Path(args.file)
    data = _read_file(path)
    if data is None:
        return 1

    result = await DocumentExtractor.from_settings(settings).extract(
        data, mime_type=args.mime or _guess_mime(path), file_name=path.name
    )
    meta = result.metadata
    if args.json_output:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
        return 0

    print(f"File:      {meta.file_name} ({meta.file_size} bytes)")
    print(f"Method:    {meta.processing_method}")
    print(f"Quality:   {meta.extraction_quality.value}")
    print(f"Pages:     {meta.successful_pages}/{meta.pages} ok, {meta.failed_pages} failed")
    print(f"Language:  {meta.language}")
    print(f"Time:      {meta.processing_time:.2f}s")
    for warning in meta.warnings:
        print(f"  warning: {warning}")
    print()
    print(result.text)
    return 0


async def _handle_chunk(args: argparse.Namespace) -> int:
    from docrag.main import settings
    from docrag.models.document import ChunkOptions
    from docrag.services.chunker import TextChunker
    from docrag.services.document_extractor import DocumentExtractor

    path = Path(args.file)
    data = _read_file(path)
    if data is None:
        return 1

    options = ChunkOptions(
        max_size=args.max_size or settings.chunk_max_size,
        min_size=args.min_size or settings.chunk_min_size,
        overlap=args.overlap if args.overlap is not None else settings.chunk_overlap,
    )
    result = await DocumentExtractor.from_settings(settings).extract(
        data, mime_type=args.mime or _guess_mime(path), file_name=path.name
    )
    chunks = TextChunker(options).chunk(result.text)

    if args.json_output:
        print(json.dumps([c.model_dump(mode="json") for c in chunks], indent=2))
        return 0

    print(f"{len(chunks)} chunks from {path.name} ({result.metadata.processing_method})")
    for chunk in chunks:
        print("-" * 60)
        print(
            f"#{chunk.index} [{chunk.start_offset}:{chunk.end_offset}] "
            f"{chunk.structural_type.value} conf={chunk.confidence:.0f} overlap={chunk.overlap_length}"
        )
        print(chunk.content)
    return 0


async def _handle_ask(args: argparse.Namespace) -> int:
    from docrag.main import build_orchestrator, default_provider_config, settings
    from docrag.models.provider import ProviderConfig

    config = default_provider_config(settings)
    if args.provider:
        config = ProviderConfig(
            provider=args.provider,
            api_key=args.api_key or "",
            model=args.model or "",
            base_url=args.base_url or "",
        )
    if config is None:
        print("Error: no AI provider given (use --provider or set AI_PROVIDER).", file=sys.stderr)
        return 1

    orchestrator = build_orchestrator(settings)
    try:
        await orchestrator.configure(config)
        for name in args.files:
            path = Path(name)
            data = _read_file(path)
            if data is None:
                return 1
            record = await orchestrator.ingest(data, mime_type=_guess_mime(path), name=path.name)
            print(f"Ingested {record.name}: {len(record.chunks)} chunks", file=sys.stderr)
        answer = await orchestrator.query(args.question)
    except DocRAGError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json_output:
        print(json.dumps(answer.model_dump(mode="json"), indent=2))
        return 0

    print(answer.answer)
    print()
    print(f"Sources:   {', '.join(answer.sources) or '(none)'}")
    print(f"Relevance: {answer.relevance_score:.3f} over {answer.retrieved_chunk_count} chunks")
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docrag",
        description="Extract, chunk and question documents from the command line.",
    )
    subparsers = parser.add_subparsers(dest="command")

    extract_parser = subparsers.add_parser("extract", help="Extract text and metadata from a file")
    extract_parser.add_argument("file", help="Path to the document")
    extract_parser.add_argument("--mime", help="Override the guessed MIME type")
    extract_parser.add_argument("--json", action="store_true", dest="json_output", help="Print JSON")

    chunk_parser = subparsers.add_parser("chunk", help="Extract a file and print its chunks")
    chunk_parser.add_argument("file", help="Path to the document")
    chunk_parser.add_argument("--mime", help="Override the guessed MIME type")
    chunk_parser.add_argument("--max-size", type=int, dest="max_size", help="Maximum chunk length")
    chunk_parser.add_argument("--min-size", type=int, dest="min_size", help="Preferred minimum chunk length")
    chunk_parser.add_argument("--overlap", type=int, help="Maximum overlap carried between chunks")
    chunk_parser.add_argument("--json", action="store_true", dest="json_output", help="Print JSON")

    ask_parser = subparsers.add_parser("ask", help="Ingest files and answer one question")
    ask_parser.add_argument("files", nargs="+", help="Documents to ingest")
    ask_parser.add_argument("--question", "-q", required=True, help="Question to answer")
    ask_parser.add_argument("--provider", help="AI provider name (default: AI_PROVIDER)")
    ask_parser.add_argument("--api-key", dest="api_key", help="Provider API key")
    ask_parser.add_argument("--model", help="Generation model")
    ask_parser.add_argument("--base-url", dest="base_url", help="Provider base URL")
    ask_parser.add_argument("--json", action="store_true", dest="json_output", help="Print JSON")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

_HANDLERS = {
    "extract": _handle_extract,
    "chunk": _handle_chunk,
    "ask": _handle_ask,
}


def main(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the selected command and return its exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    handler = _HANDLERS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    _route_logs_to_stderr(quiet=args.json_output)
    return asyncio.run(handler(args))
