"""Tests for credential resolution."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from heroku_provisioner.core.credentials import (
    API_HOSTNAME,
    CredentialError,
    CredentialFileError,
    default_netrc_path,
    read_netrc_login,
    resolve_credentials,
)

if TYPE_CHECKING:
    from pathlib import Path


def _write_netrc(path: Path, body: str) -> Path:
    path.write_text(body)
    path.chmod(0o600)
    return path


class TestDefaultNetrcPath:
    def test_env_override(self, tmp_path: Path) -> None:
        target = tmp_path / "custom-netrc"
        assert default_netrc_path({"NETRC_PATH": str(target)}) == target

    def test_home_default(self) -> None:
        path = default_netrc_path({})
        assert path.name in {".netrc", "_netrc"}


class TestReadNetrcLogin:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert read_netrc_login(tmp_path / "nope") is None

    def test_directory(self, tmp_path: Path) -> None:
        assert read_netrc_login(tmp_path) is None

    def test_entry_found(self, tmp_path: Path) -> None:
        path = _write_netrc(
            tmp_path / "netrc",
            f"machine {API_HOSTNAME}\n  login dev@example.com\n  password tok-123\n",
        )
        assert read_netrc_login(path) == ("dev@example.com", "tok-123")

    def test_other_machine_only(self, tmp_path: Path) -> None:
        path = _write_netrc(
            tmp_path / "netrc",
            "machine git.heroku.com login dev@example.com password tok-123\n",
        )
        assert read_netrc_login(path) is None

    def test_unparseable_file(self, tmp_path: Path) -> None:
        path = _write_netrc(tmp_path / "netrc", "not-a-keyword value\n")
        with pytest.raises(CredentialFileError):
            read_netrc_login(path)


class TestResolveCredentials:
    def test_netrc_missing_falls_back_to_explicit(self, tmp_path: Path) -> None:
        creds = resolve_credentials(email="u", api_key="t", netrc_path=tmp_path / "missing")

        assert creds.email == "u"
        assert creds.api_key.get_secret_value() == "t"

    def test_netrc_directory_falls_back_to_explicit(self, tmp_path: Path) -> None:
        creds = resolve_credentials(email="u", api_key="t", netrc_path=tmp_path)
        assert creds.email == "u"

    def test_netrc_wins_over_explicit(self, tmp_path: Path) -> None:
        path = _write_netrc(
            tmp_path / "netrc",
            f"machine {API_HOSTNAME} login netrc@example.com password netrc-token\n",
        )
        creds = resolve_credentials(email="u", api_key="t", netrc_path=path)

        assert creds.email == "netrc@example.com"
        assert creds.api_key.get_secret_value() == "netrc-token"

    def test_headers_are_attached(self, tmp_path: Path) -> None:
        creds = resolve_credentials(
            api_key="t",
            headers={"X-Request-Source": "ci"},
            netrc_path=tmp_path / "missing",
        )
        assert creds.headers == {"X-Request-Source": "ci"}
        assert creds.email is None

    def test_bad_netrc_logs_warning_and_falls_back(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = _write_netrc(tmp_path / "netrc", "not-a-keyword value\n")

        with caplog.at_level(logging.WARNING, logger="heroku_provisioner.core.credentials"):
            creds = resolve_credentials(email="u", api_key="t", netrc_path=path)

        assert creds.api_key.get_secret_value() == "t"
        assert "falling back" in caplog.text

    def test_no_source_raises(self, tmp_path: Path) -> None:
        with pytest.raises(CredentialError, match="HEROKU_API_KEY"):
            resolve_credentials(email="u", netrc_path=tmp_path / "missing")

    def test_uses_netrc_path_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write_netrc(
            tmp_path / "netrc",
            f"machine {API_HOSTNAME} login env@example.com password env-token\n",
        )
        monkeypatch.setenv("NETRC_PATH", str(path))

        creds = resolve_credentials()
        assert creds.email == "env@example.com"

    def test_api_key_is_not_in_repr(self, tmp_path: Path) -> None:
        creds = resolve_credentials(api_key="super-secret", netrc_path=tmp_path / "missing")
        assert "super-secret" not in repr(creds)
