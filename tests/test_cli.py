"""Tests for the command line interface."""

import importlib
import json

import pytest

from conftest import CLIENT_ID, OBJECT_ID, TENANT_ID

# The cli package re-exports main(), shadowing the submodule attribute
cli_main = importlib.import_module("cli.main")


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    """Keep pytest's log capture handlers in place."""
    monkeypatch.setattr(cli_main, "setup_logging", lambda debug=False: None)


@pytest.fixture
def response_file(tmp_path, token_response):
    path = tmp_path / "response.json"
    path.write_text(json.dumps(token_response))
    return path


def _process(cache_file, response_file, *extra):
    cli_main.main([
        "--cache-file", str(cache_file),
        "process", str(response_file),
        "--authority", f"https://login.microsoftonline.com/{TENANT_ID}/",
        "--client-id", CLIENT_ID,
        *extra,
    ])


class TestCli:
    """Tests for cli.main.main."""

    def test_process_writes_cache_file(self, tmp_path, response_file) -> None:
        """Test that processing a response persists the account."""
        cache_file = tmp_path / "cache.json"

        _process(cache_file, response_file, "--nonce", "nonce-abc")

        data = json.loads(cache_file.read_text())
        assert list(data["Account"]) == [f"{OBJECT_ID}.{TENANT_ID}-login.microsoftonline.com-{TENANT_ID}"]
        assert len(data["AccessToken"]) == 1
        assert len(data["RefreshToken"]) == 1

    def test_remove_account(self, tmp_path, response_file) -> None:
        cache_file = tmp_path / "cache.json"
        _process(cache_file, response_file)
        account_key = f"{OBJECT_ID}.{TENANT_ID}-login.microsoftonline.com-{TENANT_ID}"

        cli_main.main(["--cache-file", str(cache_file), "remove-account", account_key])

        data = json.loads(cache_file.read_text())
        assert data["Account"] == {}
        assert data["AccessToken"] == {}

    def test_accounts_does_not_write(self, tmp_path) -> None:
        cache_file = tmp_path / "cache.json"

        cli_main.main(["--cache-file", str(cache_file), "accounts"])

        assert not cache_file.exists()

    def test_nonce_mismatch_exits(self, tmp_path, response_file) -> None:
        """Test that pipeline errors exit with status 1 and cache nothing."""
        cache_file = tmp_path / "cache.json"

        with pytest.raises(SystemExit) as exc_info:
            _process(cache_file, response_file, "--nonce", "wrong")

        assert exc_info.value.code == 1
        assert not cache_file.exists()

    def test_server_error_exits(self, tmp_path) -> None:
        response_file = tmp_path / "error.json"
        response_file.write_text(json.dumps({"error": "invalid_client", "error_description": "bad secret"}))

        with pytest.raises(SystemExit) as exc_info:
            _process(tmp_path / "cache.json", response_file)

        assert exc_info.value.code == 1

    def test_missing_response_file_exits(self, tmp_path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _process(tmp_path / "cache.json", tmp_path / "missing.json")

        assert exc_info.value.code == 1
