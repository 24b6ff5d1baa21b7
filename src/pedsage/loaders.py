# src/pedsage/loaders.py
"""Corpus file loaders.

A corpus file holds tagged entries, each an object with ``"kind": "chunk"``
or ``"kind": "resource"`` and the fields of that entry type. Two layouts are
supported: a JSON array (``.json``) or one object per line (``.jsonl``).
"""

import json
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from pedsage.models import CorpusEntry

SUPPORTED_EXTENSIONS = {".json", ".jsonl"}

_entries_adapter = TypeAdapter(list[CorpusEntry])
_entry_adapter = TypeAdapter(CorpusEntry)


def supports(path: str) -> bool:
    """Check if the file extension is a supported corpus format."""
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


def load_corpus_file(path: str) -> list[CorpusEntry]:
    """Load and validate the corpus entries in a file.

    Args:
        path: Path to a .json or .jsonl file

    Returns:
        Entries in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the format is unsupported or an entry is invalid
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    if not supports(path):
        raise ValueError(
            f"Unsupported corpus format '{file_path.suffix}'. "
            f"Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )

    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        try:
            return _entries_adapter.validate_json(text) if text.strip() else []
        except ValidationError as e:
            raise ValueError(f"Invalid corpus file {path}: {e}") from e

    entries = []
    for line_number, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        try:
            entries.append(_entry_adapter.validate_python(json.loads(line)))
        except (json.JSONDecodeError, ValidationError) as e:
            raise ValueError(f"Invalid entry on line {line_number} of {path}: {e}") from e
    return entries
