"""Helpers for reading vault PKI engine responses."""

from typing import Any, Dict, Optional


def pki_path(mount: str, operation: str, role: str) -> str:
    """Path of a PKI role operation, e.g. ``pki/sign-verbatim/nodes``."""
    return f"{mount.strip('/')}/{operation}/{role}"


def response_data(response: Any) -> Dict[str, Any]:
    """The ``data`` section of a vault write response."""
    if not isinstance(response, dict) or not isinstance(response.get("data"), dict):
        raise ValueError("response carries no data")
    return response["data"]


def ensure_trailing_newline(pem: str) -> bytes:
    if not pem.endswith("\n"):
        pem += "\n"
    return pem.encode()


def extract_certificate(data: Dict[str, Any]) -> bytes:
    certificate = data.get("certificate")
    if not isinstance(certificate, str) or not certificate:
        raise ValueError("response carries no certificate")
    return ensure_trailing_newline(certificate)


def extract_private_key(data: Dict[str, Any]) -> Optional[bytes]:
    private_key = data.get("private_key")
    if not isinstance(private_key, str) or not private_key:
        return None
    return ensure_trailing_newline(private_key)


def resolve_ca_chain(data: Dict[str, Any]) -> bytes:
    """
    The CA chain of a signing response.

    Uses ``ca_chain`` when present and non-empty, otherwise ``issuing_ca``;
    some PKI configurations only return the single issuing certificate.
    """
    chain = data.get("ca_chain")
    if isinstance(chain, list):
        chain = "\n".join(c.rstrip("\n") for c in chain if c)

    if not chain:
        chain = data.get("issuing_ca")

    if not chain:
        return b""
    return ensure_trailing_newline(chain)
