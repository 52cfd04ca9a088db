"""Unit tests for the gallery CLI (click CliRunner, in-memory store)."""

import pytest
from click.testing import CliRunner
from rich.console import Console

from repo_gallery import cli as cli_module
from repo_gallery.cli import cli

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def patched_service(service, monkeypatch):
    monkeypatch.setattr(cli_module, "build_service", lambda: service)
    monkeypatch.setattr(cli_module, "console", Console(width=300))
    return service


@pytest.mark.fast
class TestCli:
    """Tests for gallery commands."""

    def test_list_empty(self, runner, patched_service):
        result = runner.invoke(cli, ["list"])
        assert result.exit_code == 0
        assert "No images yet" in result.output

    def test_upload_and_list(self, runner, patched_service, tmp_path):
        image = tmp_path / "photo.png"
        image.write_bytes(PNG)

        result = runner.invoke(cli, ["upload", str(image), "-d", "Sunset"])
        assert result.exit_code == 0, result.output
        assert "Uploaded" in result.output

        listing = runner.invoke(cli, ["list"])
        assert "Sunset" in listing.output

    def test_upload_rejects_unknown_type(self, runner, patched_service, tmp_path):
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")
        result = runner.invoke(cli, ["upload", str(notes)])
        assert result.exit_code == 1
        assert "Invalid file type" in result.output

    def test_delete(self, runner, patched_service, memory_store, make_entry, catalog_bytes):
        memory_store.seed("metadata.json", catalog_bytes(make_entry("1_a.png")))
        result = runner.invoke(cli, ["delete", "1_a.png", "--yes"])
        assert result.exit_code == 0
        assert "Deleted 1_a.png" in result.output

    def test_delete_refuses_path(self, runner, patched_service, memory_store, make_entry, catalog_bytes):
        memory_store.seed("metadata.json", catalog_bytes(make_entry("1_a.png")))
        result = runner.invoke(cli, ["delete", "../metadata.json", "--yes"])
        assert result.exit_code == 1
        assert "Invalid image filename" in result.output
        assert memory_store.read("metadata.json") is not None

    def test_reconcile_reports_drift(self, runner, patched_service, memory_store):
        memory_store.seed("images/1_orphan.png", b"x")
        result = runner.invoke(cli, ["reconcile"])
        assert result.exit_code == 2
        assert "1_orphan.png" in result.output

    def test_missing_configuration(self, runner, monkeypatch, tmp_path):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("GITHUB_REPO", raising=False)
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(cli, ["list"])
        assert result.exit_code == 1
        assert "GITHUB_TOKEN" in result.output
