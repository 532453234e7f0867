"""
Vault Auth Providers

Each provider exchanges its credentials for a vault token and installs that
token on the shared client. Providers are immutable and keep no state between
calls.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import hvac
import requests

from ..utils.exceptions import AuthenticationError, NoAuthInfoError
from ..utils.logging import get_logger

logger = get_logger(__name__)


def _install_token(client: hvac.Client, response: Optional[Dict[str, Any]], method: str) -> None:
    auth = response.get("auth") if isinstance(response, dict) else None
    if not auth or not auth.get("client_token"):
        raise NoAuthInfoError(method=method)
    client.token = auth["client_token"]


@dataclass(frozen=True)
class ServiceAccountAuth:
    """Authenticates using a Kubernetes service account token."""

    mount: str
    role: str
    token_file: str

    method = "kubernetes"

    def authenticate(self, client: hvac.Client) -> None:
        logger.info("Authenticating using kubernetes service account")

        logger.debug("Reading service token file", extra={"path": self.token_file})
        try:
            jwt = Path(self.token_file).read_text().strip()
        except OSError as e:
            raise AuthenticationError(f"reading service token file: {e}", method=self.method) from e

        logger.debug(
            "Attempting kubernetes authentication",
            extra={"mount": self.mount, "role": self.role},
        )
        try:
            response = client.auth.kubernetes.login(
                role=self.role,
                jwt=jwt,
                use_token=False,
                mount_point=self.mount,
            )
        except (hvac.exceptions.VaultError, requests.exceptions.RequestException) as e:
            raise AuthenticationError(f"authenticating with service token: {e}", method=self.method) from e

        _install_token(client, response, self.method)

    def __str__(self) -> str:
        return self.method


@dataclass(frozen=True)
class AppRoleAuth:
    """Authenticates using an AppRole role id and secret id."""

    mount: str
    role_id: str
    secret_id: str = field(repr=False)

    method = "approle"

    def authenticate(self, client: hvac.Client) -> None:
        logger.info("Authenticating using approle")

        logger.debug("Attempting approle authentication", extra={"mount": self.mount, "role_id": self.role_id})
        try:
            response = client.auth.approle.login(
                role_id=self.role_id,
                secret_id=self.secret_id,
                use_token=False,
                mount_point=self.mount,
            )
        except (hvac.exceptions.VaultError, requests.exceptions.RequestException) as e:
            raise AuthenticationError(f"authenticating with approle: {e}", method=self.method) from e

        _install_token(client, response, self.method)

    def __str__(self) -> str:
        return self.method


AuthProvider = Union[ServiceAccountAuth, AppRoleAuth]
