from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from curation_publisher.app_cli import EXIT_FAILURE, EXIT_OK, EXIT_PARTIAL, _build_client, main
from curation_publisher.config import PublisherSettings
from curation_publisher.errors import ConfigurationError
from curation_publisher.http_publisher_client import HttpPublisherClient
from curation_publisher.publisher_client import FakePublisherClient

ENV = {"JF_URL": "https://acme.jfrog.io/", "BEARER_TOKEN": "secret-token"}


def test_settings_require_url_and_token() -> None:
    with pytest.raises(ConfigurationError, match="JF_URL"):
        PublisherSettings.from_env({"BEARER_TOKEN": "t"})
    with pytest.raises(ConfigurationError, match="BEARER_TOKEN"):
        PublisherSettings.from_env({"JF_URL": "https://acme.jfrog.io"})


def test_settings_reject_url_without_scheme() -> None:
    with pytest.raises(ConfigurationError, match="http"):
        PublisherSettings.from_env({"JF_URL": "acme.jfrog.io", "BEARER_TOKEN": "t"})


def test_settings_defaults_and_overrides() -> None:
    settings = PublisherSettings.from_env(ENV)
    assert settings.base_url == "https://acme.jfrog.io"
    assert settings.timeout_secs == 30.0
    assert settings.max_workers == 1

    tuned = PublisherSettings.from_env({**ENV, "CURATION_TIMEOUT_SECS": "5", "CURATION_MAX_WORKERS": "4"})
    assert tuned.timeout_secs == 5.0
    assert tuned.max_workers == 4

    junk = PublisherSettings.from_env({**ENV, "CURATION_TIMEOUT_SECS": "soon", "CURATION_MAX_WORKERS": "0"})
    assert junk.timeout_secs == 30.0
    assert junk.max_workers == 1


def test_build_client_dry_run_needs_no_credentials() -> None:
    with patch.dict(os.environ, {}, clear=True):
        client, workers = _build_client(dry_run=True)
    assert isinstance(client, FakePublisherClient)
    assert workers is None


def test_build_client_uses_environment() -> None:
    with patch.dict(os.environ, {**ENV, "CURATION_TIMEOUT_SECS": "12.5"}, clear=True):
        client, workers = _build_client(dry_run=False)
    assert isinstance(client, HttpPublisherClient)
    assert client.base_url == "https://acme.jfrog.io"
    assert client.token == "secret-token"
    assert client.timeout == 12.5
    assert workers == 1


def test_missing_credentials_exit_hard(tmp_path: Path, write_json, capsys) -> None:
    write_json("a-condition.json", {"name": "a"})
    with patch.dict(os.environ, {}, clear=True):
        code = main(["publish", "-d", str(tmp_path)])
    assert code == EXIT_FAILURE
    assert "JF_URL" in capsys.readouterr().err


def test_missing_directory_exit_hard(tmp_path: Path, capsys) -> None:
    code = main(["publish", "--dry-run", "-d", str(tmp_path / "absent")])
    assert code == EXIT_FAILURE
    assert "does not exist" in capsys.readouterr().err


def test_empty_directory_exits_cleanly(tmp_path: Path, capsys) -> None:
    code = main(["publish", "--dry-run", "-d", str(tmp_path)])
    assert code == EXIT_OK
    assert "No condition or policy files found" in capsys.readouterr().out


def test_dry_run_lists_files_and_succeeds(tmp_path: Path, write_json, capsys) -> None:
    write_json("a-condition.json", {"name": "a"})
    write_json("a-policy.json", {"name": "a-policy"})

    with patch.object(httpx.Client, "post") as mock_post:
        code = main(["publish", "--dry-run", "-d", str(tmp_path)])

    mock_post.assert_not_called()
    out = capsys.readouterr().out
    assert code == EXIT_OK
    assert "- a-condition.json" in out
    assert "- a-policy.json" in out
    assert "All files processed successfully! (2 total)" in out


def test_partial_run_enumerates_failures(tmp_path: Path, write_json, capsys) -> None:
    write_json("a-condition.json", {"name": "a"})
    write_json("a-policy.json", {"name": "a-policy"})
    write_json("b-policy.json", {"name": "b-policy"})

    code = main(["publish", "--dry-run", "-d", str(tmp_path)])

    out = capsys.readouterr().out
    assert code == EXIT_PARTIAL
    assert "b-policy.json [UnresolvedDependency]" in out
    assert "Processing completed with 1 errors (2 successful)" in out


def test_live_run_posts_with_bearer_token(tmp_path: Path, write_json, capsys) -> None:
    write_json("a-condition.json", {"name": "a"})
    write_json("a-policy.json", {"name": "a-policy"})

    with patch.dict(os.environ, ENV, clear=True), patch.object(httpx.Client, "post") as mock_post:
        mock_post.return_value.status_code = 201
        mock_post.return_value.text = '{"id": "C-9"}'
        code = main(["publish", "-d", str(tmp_path)])

    assert code == EXIT_OK
    assert mock_post.call_count == 2
    headers = mock_post.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer secret-token"
    assert "secret-token" not in capsys.readouterr().out


def test_workers_must_be_positive(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        main(["publish", "--dry-run", "--workers", "0", "-d", str(tmp_path)])
