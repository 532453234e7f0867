"""
Pytest configuration and fixtures.

Puts src/ on the import path and provides an in-memory stand-in for vault's
PKI engine that signs real certificates.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src directory to Python path
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from cryptography import x509  # noqa: E402
from cryptography.hazmat.primitives import hashes, serialization  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import ec  # noqa: E402
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID  # noqa: E402

KEY_USAGE_FLAGS = {
    "DigitalSignature": "digital_signature",
    "ContentCommitment": "content_commitment",
    "KeyEncipherment": "key_encipherment",
    "DataEncipherment": "data_encipherment",
    "KeyAgreement": "key_agreement",
    "CertSign": "key_cert_sign",
    "CRLSign": "crl_sign",
}

EXT_KEY_USAGE_OIDS = {
    "ServerAuth": ExtendedKeyUsageOID.SERVER_AUTH,
    "ClientAuth": ExtendedKeyUsageOID.CLIENT_AUTH,
    "CodeSigning": ExtendedKeyUsageOID.CODE_SIGNING,
    "EmailProtection": ExtendedKeyUsageOID.EMAIL_PROTECTION,
    "TimeStamping": ExtendedKeyUsageOID.TIME_STAMPING,
    "OCSPSigning": ExtendedKeyUsageOID.OCSP_SIGNING,
}


def _pem(cert: x509.Certificate) -> str:
    # vault returns PEM without the trailing newline
    return cert.public_bytes(serialization.Encoding.PEM).decode().strip()


class FakePKI:
    """
    Minimal PKI secrets engine.

    Handles ``<mount>/issue/<role>`` and ``<mount>/sign-verbatim/<role>``
    writes, signing with a throwaway CA. The issue role is pre-configured with
    organization ``system:nodes``.
    """

    ROLE_ORGANIZATION = "system:nodes"

    def __init__(self, chain_style: str = "list"):
        self.chain_style = chain_style
        self.calls = []
        self.token = "s.fake"
        self.ca_key = ec.generate_private_key(ec.SECP256R1())
        name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "fake-vault-ca")])
        now = datetime.now(timezone.utc)
        self.ca_cert = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(self.ca_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - timedelta(minutes=1))
            .not_valid_after(now + timedelta(days=1))
            .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
            .sign(self.ca_key, hashes.SHA256())
        )

    def write_data(self, path, data=None):
        self.calls.append((path, data))
        mount, operation, role = path.split("/")
        if operation == "issue":
            return self._issue(data)
        if operation == "sign-verbatim":
            return self._sign_verbatim(data)
        raise AssertionError(f"unexpected path {path}")

    def _response(self, cert, **extra):
        ca = _pem(self.ca_cert)
        data = {"certificate": _pem(cert), "issuing_ca": ca, "serial_number": str(cert.serial_number)}
        if self.chain_style == "list":
            data["ca_chain"] = [ca]
        elif self.chain_style == "empty":
            data["ca_chain"] = ""
        data.update(extra)
        return {"data": data}

    def _build(self, subject, public_key, key_usage=None, ext_key_usage=None):
        now = datetime.now(timezone.utc)
        builder = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(self.ca_cert.subject)
            .public_key(public_key)
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - timedelta(minutes=1))
            .not_valid_after(now + timedelta(hours=1))
        )
        if key_usage:
            flags = {flag: False for flag in KEY_USAGE_FLAGS.values()}
            flags.update({KEY_USAGE_FLAGS[u]: True for u in key_usage})
            builder = builder.add_extension(
                x509.KeyUsage(encipher_only=False, decipher_only=False, **flags), critical=True
            )
        if ext_key_usage:
            builder = builder.add_extension(
                x509.ExtendedKeyUsage([EXT_KEY_USAGE_OIDS[u] for u in ext_key_usage]), critical=False
            )
        return builder.sign(self.ca_key, hashes.SHA256())

    def _issue(self, data):
        key = ec.generate_private_key(ec.SECP256R1())
        subject = x509.Name(
            [
                x509.NameAttribute(NameOID.ORGANIZATION_NAME, self.ROLE_ORGANIZATION),
                x509.NameAttribute(NameOID.COMMON_NAME, data["common_name"]),
            ]
        )
        cert = self._build(subject, key.public_key(), ["DigitalSignature", "KeyEncipherment"], ["ClientAuth"])
        key_pem = key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.TraditionalOpenSSL,
            serialization.NoEncryption(),
        ).decode().strip()
        return self._response(cert, private_key=key_pem, private_key_type="ec")

    def _sign_verbatim(self, data):
        csr = x509.load_pem_x509_csr(data["csr"].encode())
        cert = self._build(
            csr.subject,
            csr.public_key(),
            data.get("key_usage"),
            data.get("ext_key_usage"),
        )
        return self._response(cert)


@pytest.fixture
def fake_pki():
    return FakePKI()


@pytest.fixture
def vault_client():
    """A mocked hvac client holding a token."""
    client = MagicMock()
    client.token = "s.current"
    return client
