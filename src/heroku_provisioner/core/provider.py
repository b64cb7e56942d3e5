"""Heroku provider - connection configuration for the Platform API."""

from __future__ import annotations

from functools import cached_property
from pathlib import Path  # noqa: TC003
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from heroku_provisioner.core.client import API_URL, HerokuClient, build_client
from heroku_provisioner.core.credentials import Credentials, resolve_credentials


class HerokuProvider(BaseModel):
    """Connection configuration for the Heroku Platform API.

    Credentials are resolved lazily on first use of :attr:`client`, from the
    netrc file first and the explicit ``email`` / ``api_key`` second. For
    tests, use :meth:`from_client` to inject a client.

    Examples:
        # Explicit API key
        provider = HerokuProvider(email="me@example.com", api_key="...")

        # Injected client
        provider = HerokuProvider.from_client(MagicMock())
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    email: str | None = None
    api_key: SecretStr | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    url: str = API_URL
    netrc_path: Path | None = None
    debug_http: bool = False

    # Injected client (for testing)
    _injected_client: HerokuClient | None = None

    @classmethod
    def from_client(cls, client: HerokuClient) -> Self:
        """Create a provider with an injected client.

        Args:
            client: A pre-configured client (or a mock of one)
        """
        provider = cls.model_construct()
        provider._injected_client = client
        return provider

    @cached_property
    def credentials(self) -> Credentials:
        """Resolve the connection context (netrc first, then explicit config)."""
        return resolve_credentials(
            email=self.email,
            api_key=self.api_key.get_secret_value() if self.api_key else None,
            headers=self.headers,
            netrc_path=self.netrc_path,
        )

    @cached_property
    def client(self) -> HerokuClient:
        """Get the Heroku API client."""
        if self._injected_client is not None:
            return self._injected_client
        return build_client(self.credentials, base_url=self.url, debug=self.debug_http)
