# src/pedsage/commands/status.py
"""Status command - show corpus statistics."""

from __future__ import annotations

from pathlib import Path

from pedsage.commands.base import StatusResult, open_pedsage


def status(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> StatusResult:
    """Get corpus statistics and the active configuration.

    Args:
        data_dir: Override data directory
        config_path: Override config file path

    Returns:
        StatusResult with corpus statistics
    """
    opened = open_pedsage(data_dir, config_path)
    if isinstance(opened, str):
        return StatusResult(success=False, error=opened)
    sage, config = opened

    try:
        stats = sage.stats()
    except Exception as e:
        return StatusResult(success=False, error=f"Failed to access database: {e}")
    finally:
        sage.close()

    return StatusResult(
        success=True,
        provider=config.provider,
        data_dir=config.data_dir,
        total_chunks=stats["chunks"],
        total_resources=stats["resources"],
        without_embedding=stats["without_embedding"],
        embedding_dimensions=stats["embedding_dimensions"],
    )
