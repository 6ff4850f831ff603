"""Tests for the command line interface."""
from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from docsift.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("docsift")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def config_file(tmp_path: Path, docs_dir: Path) -> Path:
    (docs_dir / "a.txt").write_text("The quick brown fox jumps over the lazy dog.", encoding="utf-8")
    (docs_dir / "b.txt").write_text("Minutes of the budget meeting.", encoding="utf-8")
    out = tmp_path / "config.toml"
    result = runner.invoke(app, ["init", "--docs", docs_dir.as_posix(), "--out", str(out)])
    assert result.exit_code == 0, result.output
    return out


class TestInit:
    def test_writes_loadable_config(self, config_file, docs_dir):
        from docsift.config import SearchConfig
        cfg = SearchConfig.from_toml(config_file)
        assert cfg.docs_root == docs_dir.resolve()
        assert cfg.top_k == 5


class TestScan:
    def test_reports_counts(self, config_file):
        result = runner.invoke(app, ["scan", "--config", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "Index built: 2 documents, 2 chunks" in result.output

    def test_missing_directory(self, tmp_path):
        cfg = tmp_path / "bad.toml"
        cfg.write_text(f'[source]\nroot = "{(tmp_path / "nope").as_posix()}"\n', encoding="utf-8")
        result = runner.invoke(app, ["scan", "--config", str(cfg)])
        assert result.exit_code == 1


class TestQuery:
    def test_prints_json_results(self, config_file):
        result = runner.invoke(app, ["query", "lazy dog", "--config", str(config_file)])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["results"][0]["filename"] == "a.txt"
        assert "**lazy**" in payload["results"][0]["highlighted"]

    def test_k_limits_results(self, config_file):
        result = runner.invoke(app, ["query", "the", "--config", str(config_file), "--k", "1"])
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)["results"]) == 1


class TestWatch:
    def test_answers_queries_until_eof(self, config_file):
        result = runner.invoke(app, ["watch", "--config", str(config_file)], input="budget\n")
        assert result.exit_code == 0, result.output
        assert '"filename": "b.txt"' in result.output
        assert "Stopping watch mode" in result.output
