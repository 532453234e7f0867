"""
Vault Signer - Certificate Signing Decision Engine

Signs approved certificate signing requests with vault's sign-verbatim
endpoint and hands the result back to the request controller. Watching,
queueing and retrying requests is the controller's job; the signer only sees
one request at a time.
"""

import threading
from dataclasses import dataclass, field
from typing import Callable, List, Protocol, Union

import hvac
import requests

from ..utils.exceptions import CertificateStatusError, SigningError, VaultCSRError
from ..utils.logging import get_logger
from ..vault.pki import extract_certificate, pki_path, response_data
from .usages import KeyUsage, parse_ext_key_usages, parse_key_usages

logger = get_logger(__name__)


@dataclass
class CertificateSigningRequest:
    """A certificate request as delivered by the request controller."""

    name: str
    request: bytes  # PEM encoded CSR
    usages: List[Union[KeyUsage, str]] = field(default_factory=list)
    approved: bool = False
    namespace: str = ""
    certificate: bytes = b""

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}" if self.namespace else self.name


Handler = Callable[[CertificateSigningRequest], None]


class RequestController(Protocol):
    """
    The external controller that watches certificate requests.

    It delivers one request at a time to the handler, never hands the same
    request to two workers at once, and re-queues requests whose handler
    raised.
    """

    def run(self, handler: Handler, workers: int, stop_event: threading.Event) -> None:
        ...

    def update_status(self, csr: CertificateSigningRequest) -> None:
        ...


class VaultSigner:
    """
    Signs certificate requests using vault's sign-verbatim endpoint.

    The ttl is left to the role's configured maximum lease.
    """

    def __init__(
        self,
        client: hvac.Client,
        mount: str,
        role: str,
        update_status: Callable[[CertificateSigningRequest], None],
    ):
        self.client = client
        self.mount = mount
        self.role = role
        self.update_status = update_status

    def handle(self, csr: CertificateSigningRequest) -> None:
        """Controller entry point. Unapproved requests are ignored."""
        if not csr.approved:
            return

        logger.info("Signing csr using vault", extra={"csr": csr.key})

        self.sign(csr)

        try:
            self.update_status(csr)
        except VaultCSRError:
            raise
        except Exception as e:
            raise CertificateStatusError(str(e), request=csr.key) from e

        logger.info("Signed csr", extra={"csr": csr.key})

    def sign(self, csr: CertificateSigningRequest) -> CertificateSigningRequest:
        """Sign `csr` and place the certificate in its output slot."""
        # Both lists are always sent; a missing one makes vault fill in its defaults
        payload = {
            "csr": csr.request.decode() if isinstance(csr.request, bytes) else csr.request,
            "key_usage": parse_key_usages(csr.usages),
            "ext_key_usage": parse_ext_key_usages(csr.usages),
        }

        try:
            response = self.client.write_data(pki_path(self.mount, "sign-verbatim", self.role), data=payload)
        except (hvac.exceptions.VaultError, requests.exceptions.RequestException) as e:
            raise SigningError(str(e), request=csr.key) from e

        try:
            csr.certificate = extract_certificate(response_data(response))
        except ValueError as e:
            raise SigningError(str(e), request=csr.key) from e

        return csr
