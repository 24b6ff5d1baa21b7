"""Fixtures for command tests."""

import pytest


@pytest.fixture
def data_dir(isolated_env):
    return str(isolated_env / "data")


@pytest.fixture
def corpus_file(isolated_env, asthma_chunk, fever_resource):
    """A .jsonl corpus with the asthma chunk and the fever resource."""
    path = isolated_env / "corpus" / "pediatrics.jsonl"
    path.parent.mkdir()
    path.write_text(
        "\n".join(e.model_dump_json() for e in (asthma_chunk, fever_resource)) + "\n",
        encoding="utf-8",
    )
    return path
