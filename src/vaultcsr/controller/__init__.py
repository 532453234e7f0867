"""
Certificate controllers: the sign-verbatim signer and the bootstrap flow.

Components:
- VaultSigner: signs approved certificate requests handed over by an external
  request controller
- create_bootstrap_cert_with_issue / create_bootstrap_cert_with_sign_verbatim:
  one-shot node credential issuance
- run_until_stopped: runs the token renewer and the request controller together
"""

from .bootstrap import (
    BootstrapCredential,
    create_bootstrap_cert_with_issue,
    create_bootstrap_cert_with_sign_verbatim,
)
from .signer import CertificateSigningRequest, RequestController, VaultSigner
from .supervisor import run_until_stopped
from .usages import KeyUsage

__all__ = [
    "BootstrapCredential",
    "create_bootstrap_cert_with_issue",
    "create_bootstrap_cert_with_sign_verbatim",
    "CertificateSigningRequest",
    "RequestController",
    "VaultSigner",
    "run_until_stopped",
    "KeyUsage",
]
