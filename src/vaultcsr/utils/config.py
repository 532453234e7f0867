"""
vault-csr Configuration Module

Loads settings from environment variables with the VAULT_CSR_SIGNER_ prefix
(e.g. VAULT_CSR_SIGNER_VAULT_ADDRESS) and an optional .env file. Command-line
flags override these values; see vaultcsr.cli.
"""

from functools import lru_cache
from typing import Any, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..vault.auth import AppRoleAuth, AuthProvider, ServiceAccountAuth
from .exceptions import ConfigValidationError

ENV_PREFIX = "VAULT_CSR_SIGNER_"

DEFAULT_SERVICE_TOKEN_FILE = "/var/run/secrets/kubernetes.io/serviceaccount/token"


class VaultCSRSettings(BaseSettings):
    """
    vault-csr process settings.

    Usage:
        from vaultcsr.utils.config import get_settings

        client = create_vault_client(get_settings().VAULT_ADDRESS)
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # GENERAL
    # ==========================================================================
    ENVIRONMENT: str = Field(default="development", description="Runtime environment: development, production")
    LOG_LEVEL: str = Field(
        default="INFO",
        pattern=r"(?i)^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )

    # ==========================================================================
    # VAULT CLIENT
    # ==========================================================================
    VAULT_ADDRESS: str = Field(default="http://127.0.0.1:8200", description="Vault server address")
    VAULT_MAX_RETRIES: int = Field(default=10, ge=0, description="Retry budget for transient vault faults")
    VAULT_TIMEOUT: int = Field(default=30, gt=0, description="Per-request timeout in seconds")

    # ==========================================================================
    # VAULT AUTH
    # ==========================================================================
    VAULT_AUTH: str = Field(default="", description="Auth method: kubernetes, approle, or empty for none")
    KUBERNETES_AUTH_MOUNT: str = Field(default="kubernetes", description="Kubernetes auth mount in vault")
    KUBERNETES_AUTH_ROLE: str = Field(default="", description="Role used with the service token")
    KUBERNETES_AUTH_TOKEN_FILE: str = Field(
        default=DEFAULT_SERVICE_TOKEN_FILE, description="File to load the service token from"
    )
    APPROLE_AUTH_MOUNT: str = Field(default="approle", description="AppRole auth mount in vault")
    APPROLE_AUTH_ROLEID: str = Field(default="", description="AppRole role id")
    APPROLE_AUTH_SECRETID: str = Field(default="", description="AppRole secret id")

    # ==========================================================================
    # VAULT PKI
    # ==========================================================================
    VAULT_PKI_MOUNT: str = Field(default="pki", description="PKI mount used to sign certificates")
    VAULT_PKI_ROLE: str = Field(default="", description="PKI role; only its ttl applies to sign-verbatim")
    VAULT_PKI_TTL: str = Field(default="1h", description="TTL of bootstrap certificates")

    # ==========================================================================
    # CONTROLLER
    # ==========================================================================
    SIGNER_WORKERS: int = Field(default=4, gt=0, description="Number of concurrent signing workers")

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"


def load_settings(**overrides: Any) -> VaultCSRSettings:
    """
    Build settings from the environment with explicit overrides on top.

    Raises ConfigValidationError naming the first offending setting.
    """
    try:
        return VaultCSRSettings(**overrides)
    except ValidationError as e:
        error = e.errors()[0]
        key = ".".join(str(part) for part in error.get("loc", ())) or "settings"
        raise ConfigValidationError(key, error.get("msg", str(e))) from e


def build_auth_provider(config: VaultCSRSettings) -> Optional[AuthProvider]:
    """Map the configured auth method onto an auth provider."""
    method = config.VAULT_AUTH.strip().lower()
    if method == "kubernetes":
        return ServiceAccountAuth(
            mount=config.KUBERNETES_AUTH_MOUNT,
            role=config.KUBERNETES_AUTH_ROLE,
            token_file=config.KUBERNETES_AUTH_TOKEN_FILE,
        )
    if method == "approle":
        return AppRoleAuth(
            mount=config.APPROLE_AUTH_MOUNT,
            role_id=config.APPROLE_AUTH_ROLEID,
            secret_id=config.APPROLE_AUTH_SECRETID,
        )
    if method == "":
        return None
    raise ConfigValidationError("VAULT_AUTH", f"unknown auth provider: {config.VAULT_AUTH}")


@lru_cache(maxsize=1)
def get_settings() -> VaultCSRSettings:
    """Process settings from the environment, loaded on first use."""
    return load_settings()
