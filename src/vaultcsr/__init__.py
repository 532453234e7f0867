"""
vault-csr: Kubernetes certificate signing backed by Vault PKI.

- Token renewer keeping the process authenticated against vault
- Signer turning approved certificate requests into sign-verbatim calls
- Bootstrap tool minting initial node credentials
"""

__version__ = "0.3.0"

__all__ = ["__version__"]
