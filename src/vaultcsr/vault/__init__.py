"""
Vault access: the shared client, auth providers and the token renewer.
"""

from .auth import AppRoleAuth, AuthProvider, ServiceAccountAuth
from .client import create_vault_client
from .renewer import Renewer, TokenStatus

__all__ = [
    "AppRoleAuth",
    "AuthProvider",
    "ServiceAccountAuth",
    "create_vault_client",
    "Renewer",
    "TokenStatus",
]
