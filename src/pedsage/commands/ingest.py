# src/pedsage/commands/ingest.py
"""Ingest command - load corpus files into the knowledge base."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from pedsage.commands.base import (
    CommandStage,
    FileIngestResult,
    IngestResult,
    ProgressCallback,
    ProgressUpdate,
    open_pedsage,
)
from pedsage.loaders import supports

if TYPE_CHECKING:
    from pedsage.pedsage import PedSage


# Map internal stage names to CommandStage
STAGE_MAP = {
    "validating": CommandStage.VALIDATING,
    "embedding": CommandStage.EMBEDDING,
    "storing": CommandStage.STORING,
    "indexing": CommandStage.INDEXING,
}


def find_corpus_files(path: Path) -> list[str]:
    """Return the corpus files under ``path`` in a stable order."""
    if path.is_file():
        return [str(path)]
    files = []
    for root, _, filenames in os.walk(path):
        for filename in filenames:
            filepath = os.path.join(root, filename)
            if supports(filepath):
                files.append(filepath)
    return sorted(files)


def ingest(
    path: str | Path,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    embed: bool | None = None,
    on_progress: ProgressCallback | None = None,
    on_file_start: Callable | None = None,
    on_file_complete: Callable | None = None,
) -> IngestResult:
    """Ingest a corpus file, or every corpus file in a directory.

    A file that fails validation is reported and skipped; the other files
    are still ingested.

    Args:
        path: .json/.jsonl file or directory to ingest
        data_dir: Override data directory (uses config if not provided)
        config_path: Override config file path
        embed: Force embedding on or off (default: embed when a provider is set)
        on_progress: Callback for progress updates during ingestion
        on_file_start: Callback when starting a file (receives filepath, file_index, total_files)
        on_file_complete: Callback when a file is done (receives FileIngestResult)

    Returns:
        IngestResult with aggregated statistics and per-file results
    """
    path = Path(path)
    if not path.exists():
        return IngestResult(success=False, error=f"Path not found: {path}")

    files = find_corpus_files(path)
    if not files:
        return IngestResult(success=True, error="No corpus files found")

    opened = open_pedsage(data_dir, config_path)
    if isinstance(opened, str):
        return IngestResult(success=False, error=opened)
    sage, _ = opened

    result = IngestResult(success=True)
    try:
        for i, filepath in enumerate(files):
            if on_file_start:
                on_file_start(filepath, i, len(files))

            try:
                file_result = _ingest_file(sage, filepath, embed, on_progress)
            except Exception as e:
                result.errors.append((filepath, str(e)))
                continue

            result.file_results.append(file_result)
            result.files_processed += 1
            result.total_chunks += file_result.chunks
            result.total_resources += file_result.resources
            result.total_embedded += file_result.embedded

            if on_file_complete:
                on_file_complete(file_result)
    finally:
        sage.close()

    if result.errors:
        result.files_failed = len(result.errors)
        if result.files_processed == 0:
            result.success = False
            result.error = result.errors[0][1]

    return result


def _ingest_file(
    sage: PedSage,
    filepath: str,
    embed: bool | None,
    on_progress: ProgressCallback | None = None,
) -> FileIngestResult:
    """Ingest a single file."""

    def progress_adapter(event: str, current: int, total: int, message: str) -> None:
        """Adapt the ingestor's progress callback to our ProgressUpdate format."""
        if on_progress:
            stage = STAGE_MAP.get(event, CommandStage.PROCESSING)
            on_progress(ProgressUpdate(stage=stage, current=current, total=total, message=message))

    stats = sage.ingest_file(
        filepath,
        embed=embed,
        on_progress=progress_adapter if on_progress else None,
    )
    return FileIngestResult(
        filepath=filepath,
        chunks=stats.get("chunks", 0),
        resources=stats.get("resources", 0),
        embedded=stats.get("embedded", 0),
    )
