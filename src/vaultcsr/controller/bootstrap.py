"""
Bootstrap Issuance - One-shot Node Credentials

Mints the initial client credential a node uses to join the cluster. Two
strategies are available:

- issue: vault generates key and certificate. The organization comes from
  the role, so the caller cannot choose the group, but only the narrower
  issue permission is needed.
- sign-verbatim: a P-256 key is generated locally and its CSR is signed
  verbatim. The caller controls the group at the cost of holding the much
  broader sign-verbatim permission.

The resulting credential is returned in memory; writing it anywhere is up to
the caller.
"""

from dataclasses import dataclass, field

import hvac
import requests
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from ..utils.exceptions import BootstrapError
from ..utils.logging import get_logger
from ..vault.pki import (
    extract_certificate,
    extract_private_key,
    pki_path,
    resolve_ca_chain,
    response_data,
)

logger = get_logger(__name__)

DEFAULT_GROUP = "system:bootstrappers"
NODE_PREFIX = "system:node:"

BOOTSTRAP_KEY_USAGE = ["DigitalSignature", "KeyEncipherment"]
BOOTSTRAP_EXT_KEY_USAGE = ["ClientAuth"]


@dataclass
class BootstrapCredential:
    """PEM encoded key, certificate and CA chain for a node."""

    private_key: bytes = field(repr=False)
    certificate: bytes
    ca_chain: bytes


def node_common_name(node_name: str) -> str:
    return f"{NODE_PREFIX}{node_name}"


def generate_ec_key() -> bytes:
    """Generate a P-256 private key as an ``EC PRIVATE KEY`` PEM block."""
    key = ec.generate_private_key(ec.SECP256R1())
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def create_bootstrap_csr(private_key_pem: bytes, node_name: str, group: str) -> bytes:
    """Build a CSR with subject ``O=<group>, CN=system:node:<node_name>``."""
    try:
        private_key = serialization.load_pem_private_key(private_key_pem, password=None)
    except (ValueError, TypeError) as e:
        raise BootstrapError("generate csr", f"invalid private key for certificate request: {e}") from e

    subject = x509.Name(
        [
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, group),
            x509.NameAttribute(NameOID.COMMON_NAME, node_common_name(node_name)),
        ]
    )
    csr = x509.CertificateSigningRequestBuilder().subject_name(subject).sign(private_key, hashes.SHA256())
    return csr.public_bytes(serialization.Encoding.PEM)


def _write(client: hvac.Client, path: str, payload: dict) -> dict:
    try:
        response = client.write_data(path, data=payload)
        return response_data(response)
    except (hvac.exceptions.VaultError, requests.exceptions.RequestException, ValueError) as e:
        raise BootstrapError("issuing bootstrap certificate", str(e)) from e


def _credential(private_key: bytes, data: dict) -> BootstrapCredential:
    try:
        certificate = extract_certificate(data)
    except ValueError as e:
        raise BootstrapError("issuing bootstrap certificate", str(e)) from e
    return BootstrapCredential(
        private_key=private_key,
        certificate=certificate,
        ca_chain=resolve_ca_chain(data),
    )


def create_bootstrap_cert_with_issue(
    client: hvac.Client,
    pki_mount: str,
    pki_role: str,
    pki_ttl: str,
    node_name: str,
) -> BootstrapCredential:
    """Issue a bootstrap credential; vault generates the key."""
    logger.info("Issuing bootstrap certificate", extra={"node": node_name, "mount": pki_mount, "role": pki_role})

    data = _write(
        client,
        pki_path(pki_mount, "issue", pki_role),
        {
            "common_name": node_common_name(node_name),
            "exclude_cn_from_sans": True,
            "ttl": pki_ttl,
        },
    )

    private_key = extract_private_key(data)
    if private_key is None:
        raise BootstrapError("issuing bootstrap certificate", "response carries no private key")
    return _credential(private_key, data)


def create_bootstrap_cert_with_sign_verbatim(
    client: hvac.Client,
    pki_mount: str,
    pki_role: str,
    pki_ttl: str,
    node_name: str,
    group: str = DEFAULT_GROUP,
) -> BootstrapCredential:
    """Sign a locally generated key's CSR verbatim."""
    logger.info(
        "Signing bootstrap certificate verbatim",
        extra={"node": node_name, "group": group, "mount": pki_mount, "role": pki_role},
    )

    try:
        private_key = generate_ec_key()
    except (ValueError, TypeError) as e:
        raise BootstrapError("generate key", str(e)) from e

    csr = create_bootstrap_csr(private_key, node_name, group)

    data = _write(
        client,
        pki_path(pki_mount, "sign-verbatim", pki_role),
        {
            "csr": csr.decode(),
            "key_usage": BOOTSTRAP_KEY_USAGE,
            "ext_key_usage": BOOTSTRAP_EXT_KEY_USAGE,
            "ttl": pki_ttl,
        },
    )
    return _credential(private_key, data)
