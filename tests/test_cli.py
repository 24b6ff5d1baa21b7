# tests/test_cli.py
"""Tests for the CLI."""

import re

import pytest

pytest.importorskip("typer", reason="Tests require typer package")

from typer.testing import CliRunner

from pedsage.cli import app

UUID = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def data_dir(isolated_env):
    return str(isolated_env / "data")


@pytest.fixture
def loaded(runner, isolated_env, data_dir, asthma_chunk, fever_resource):
    """Data directory holding the asthma chunk and fever resource."""
    corpus = isolated_env / "corpus.jsonl"
    corpus.write_text(
        "\n".join(e.model_dump_json() for e in (asthma_chunk, fever_resource)) + "\n",
        encoding="utf-8",
    )
    result = runner.invoke(app, ["ingest", str(corpus), "-d", data_dir, "--plain"])
    assert result.exit_code == 0, result.output
    return data_dir


class TestCliBasics:
    def test_help(self, runner):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "pedsage" in result.output.lower()

    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestIngestCommand:
    def test_ingest_summary(self, runner, isolated_env, data_dir, asthma_chunk):
        corpus = isolated_env / "corpus.jsonl"
        corpus.write_text(asthma_chunk.model_dump_json() + "\n", encoding="utf-8")

        result = runner.invoke(app, ["ingest", str(corpus), "-d", data_dir, "--plain"])

        assert result.exit_code == 0
        assert "Ingested 1 files (1 chunks, 0 resources, 0 embedded)" in result.output

    def test_ingest_nonexistent_file(self, runner, isolated_env):
        result = runner.invoke(app, ["ingest", "/nonexistent/file.jsonl", "--plain"])
        assert result.exit_code == 1
        assert "Path not found" in result.output


class TestAskCommand:
    def test_ask_prints_answer_and_session(self, runner, loaded):
        result = runner.invoke(
            app, ["ask", "asthma management in children", "-d", loaded, "--plain"]
        )

        assert result.exit_code == 0
        assert "Respiratory Disorders" in result.output
        assert "Session: " in result.output
        assert UUID.search(result.output)

    def test_ask_with_sources(self, runner, loaded):
        result = runner.invoke(
            app, ["ask", "fever dosing", "-d", loaded, "--sources", "--plain"]
        )

        assert result.exit_code == 0
        assert "Sources:" in result.output
        assert "resource: Fever Protocol (score: 1.000)" in result.output

    def test_ask_unknown_session(self, runner, loaded):
        result = runner.invoke(app, ["ask", "asthma", "-s", "missing", "-d", loaded, "--plain"])
        assert result.exit_code == 1
        assert "Error: Query failed" in result.output


class TestSearchCommand:
    def test_search(self, runner, loaded):
        result = runner.invoke(app, ["search", "asthma", "-d", loaded, "--plain"])

        assert result.exit_code == 0
        assert "chunk: Respiratory Disorders" in result.output

    def test_search_no_results(self, runner, loaded):
        result = runner.invoke(app, ["search", "quantum", "-d", loaded, "--plain"])

        assert result.exit_code == 0
        assert "No results found." in result.output


class TestSessionsCommands:
    def test_new_list_rename_delete(self, runner, data_dir):
        created = runner.invoke(app, ["sessions", "new", "Croup", "-d", data_dir])
        assert created.exit_code == 0
        session_id = created.output.strip()

        listed = runner.invoke(app, ["sessions", "list", "-d", data_dir, "--plain"])
        assert session_id in listed.output
        assert "Croup" in listed.output

        renamed = runner.invoke(app, ["sessions", "rename", session_id, "Stridor", "-d", data_dir])
        assert renamed.exit_code == 0

        deleted = runner.invoke(app, ["sessions", "delete", session_id, "-d", data_dir, "-f"])
        assert deleted.exit_code == 0

        listed = runner.invoke(app, ["sessions", "list", "-d", data_dir, "--plain"])
        assert "No sessions." in listed.output

    def test_delete_cancelled(self, runner, data_dir):
        created = runner.invoke(app, ["sessions", "new", "-d", data_dir])
        session_id = created.output.strip()

        result = runner.invoke(app, ["sessions", "delete", session_id, "-d", data_dir], input="n\n")

        assert "Cancelled." in result.output
        listed = runner.invoke(app, ["sessions", "list", "-d", data_dir, "--plain"])
        assert session_id in listed.output


class TestHistoryCommand:
    def test_history(self, runner, loaded):
        asked = runner.invoke(
            app, ["ask", "asthma management in children", "-d", loaded, "--plain"]
        )
        session_id = UUID.search(asked.output).group(0)

        result = runner.invoke(app, ["history", session_id, "-d", loaded, "--plain"])

        assert result.exit_code == 0
        assert "user: asthma management in children" in result.output
        assert "cites Respiratory Disorders, page 245" in result.output

    def test_history_missing(self, runner, data_dir):
        result = runner.invoke(app, ["history", "missing", "-d", data_dir, "--plain"])
        assert result.exit_code == 1


class TestStatusCommand:
    def test_status(self, runner, loaded):
        result = runner.invoke(app, ["status", "-d", loaded, "--plain"])

        assert result.exit_code == 0
        assert "Textbook chunks: 1" in result.output
        assert "Reference resources: 1" in result.output
        assert "Embedding dimensions: none" in result.output
