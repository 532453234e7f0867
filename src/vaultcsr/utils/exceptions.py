"""
vault-csr Error Taxonomy.

All errors carry:
- code: Machine-readable error code (e.g., VCS_AUTH_FAILED)
- message: Human-readable description, prefixed with the operation stage
- details: Structured metadata (never secrets, tokens or key material)

Error Code Naming Convention:
- VCS_<CATEGORY>_<SPECIFIC>
- Categories: CONFIG, AUTH, TOKEN, SIGN, BOOTSTRAP
"""

from typing import Any, Dict, Optional


class VaultCSRError(Exception):
    """Base exception for all vault-csr errors."""

    def __init__(
        self,
        message: str,
        code: str = "VCS_INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for structured logging."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# Configuration Errors (VCS_CONFIG_*)
# =============================================================================


class ConfigError(VaultCSRError):
    """Base class for configuration errors. Never retried."""

    pass


class NoAuthProviderError(ConfigError):
    """Raised when authentication is required but no auth method is configured."""

    def __init__(self):
        super().__init__(
            message="no vault authentication method provided",
            code="VCS_CONFIG_NO_AUTH_PROVIDER",
        )


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails."""

    def __init__(self, config_key: str, reason: str):
        super().__init__(
            message=f"invalid configuration for {config_key}: {reason}",
            code="VCS_CONFIG_VALIDATION_FAILED",
            details={"config_key": config_key},
        )


# =============================================================================
# Authentication Errors (VCS_AUTH_*)
# =============================================================================


class AuthError(VaultCSRError):
    """Base class for authentication errors."""

    pass


class AuthenticationError(AuthError):
    """Raised when a login attempt against vault fails."""

    def __init__(self, reason: str, method: Optional[str] = None):
        super().__init__(
            message=f"authenticating with vault: {reason}",
            code="VCS_AUTH_FAILED",
            details={"method": method} if method else {},
        )


class NoAuthInfoError(AuthError):
    """Raised when a login response carries no auth payload."""

    def __init__(self, method: Optional[str] = None):
        super().__init__(
            message="authenticating with vault: no auth info returned",
            code="VCS_AUTH_NO_AUTH_INFO",
            details={"method": method} if method else {},
        )


# =============================================================================
# Token Errors (VCS_TOKEN_*)
# =============================================================================


class TokenError(VaultCSRError):
    """Base class for token lifecycle errors."""

    pass


class TokenLookupError(TokenError):
    """Raised when the token self-lookup call fails."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"looking up own token: {reason}",
            code="VCS_TOKEN_LOOKUP_FAILED",
        )


class TokenStatusError(TokenError):
    """Raised when the self-lookup response cannot be interpreted."""

    def __init__(self, field: str, reason: str):
        super().__init__(
            message=f"parsing token {field}: {reason}",
            code="VCS_TOKEN_STATUS_INVALID",
            details={"field": field},
        )


class TokenRenewError(TokenError):
    """Raised when renewing the current token fails."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"renewing token: {reason}",
            code="VCS_TOKEN_RENEW_FAILED",
        )


# =============================================================================
# Signing Errors (VCS_SIGN_*)
# =============================================================================


class SigningError(VaultCSRError):
    """Raised when the PKI service rejects or garbles a signing request."""

    def __init__(self, reason: str, request: Optional[str] = None):
        super().__init__(
            message=f"signing with PKI: {reason}",
            code="VCS_SIGN_FAILED",
            details={"request": request} if request else {},
        )


class CertificateStatusError(VaultCSRError):
    """Raised when the signed certificate cannot be written back to its request."""

    def __init__(self, reason: str, request: Optional[str] = None):
        super().__init__(
            message=f"updating certificate status: {reason}",
            code="VCS_SIGN_STATUS_UPDATE_FAILED",
            details={"request": request} if request else {},
        )


# =============================================================================
# Bootstrap Errors (VCS_BOOTSTRAP_*)
# =============================================================================


class BootstrapError(VaultCSRError):
    """Raised when minting or writing a bootstrap credential fails."""

    def __init__(self, stage: str, reason: str):
        super().__init__(
            message=f"{stage}: {reason}",
            code="VCS_BOOTSTRAP_FAILED",
            details={"stage": stage},
        )


ERROR_CODES = {
    "VCS_CONFIG_NO_AUTH_PROVIDER": "No vault authentication method configured",
    "VCS_CONFIG_VALIDATION_FAILED": "Configuration validation failed",
    "VCS_AUTH_FAILED": "Vault login failed",
    "VCS_AUTH_NO_AUTH_INFO": "Vault login returned no auth payload",
    "VCS_TOKEN_LOOKUP_FAILED": "Token self-lookup failed",
    "VCS_TOKEN_STATUS_INVALID": "Token self-lookup response malformed",
    "VCS_TOKEN_RENEW_FAILED": "Token renewal failed",
    "VCS_SIGN_FAILED": "Signing with PKI failed",
    "VCS_SIGN_STATUS_UPDATE_FAILED": "Writing signed certificate back failed",
    "VCS_BOOTSTRAP_FAILED": "Bootstrap credential issuance failed",
    "VCS_INTERNAL_ERROR": "Internal error",
}


__all__ = [
    "VaultCSRError",
    "ConfigError",
    "NoAuthProviderError",
    "ConfigValidationError",
    "AuthError",
    "AuthenticationError",
    "NoAuthInfoError",
    "TokenError",
    "TokenLookupError",
    "TokenStatusError",
    "TokenRenewError",
    "SigningError",
    "CertificateStatusError",
    "BootstrapError",
    "ERROR_CODES",
]
