"""Writes a bootstrap credential out as a kubeconfig."""

import base64
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..utils.exceptions import BootstrapError
from ..utils.files import write_private_file
from ..utils.logging import get_logger
from .bootstrap import BootstrapCredential

logger = get_logger(__name__)

CLUSTER_NAME = "default-cluster"
AUTH_NAME = "default-auth"
CONTEXT_NAME = "default-context"


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def build_kubeconfig(server: str, credential: BootstrapCredential, insecure: bool = False) -> Dict[str, Any]:
    """A kubeconfig with one cluster, one user and one current context."""
    cluster: Dict[str, Any] = {"server": server}
    if insecure:
        cluster["insecure-skip-tls-verify"] = True
    if credential.ca_chain:
        cluster["certificate-authority-data"] = _b64(credential.ca_chain)

    return {
        "apiVersion": "v1",
        "kind": "Config",
        "clusters": [{"name": CLUSTER_NAME, "cluster": cluster}],
        "users": [
            {
                "name": AUTH_NAME,
                "user": {
                    "client-certificate-data": _b64(credential.certificate),
                    "client-key-data": _b64(credential.private_key),
                },
            }
        ],
        "contexts": [
            {
                "name": CONTEXT_NAME,
                "context": {"cluster": CLUSTER_NAME, "user": AUTH_NAME, "namespace": "default"},
            }
        ],
        "current-context": CONTEXT_NAME,
        "preferences": {},
    }


def write_kubeconfig(
    path: Union[str, Path],
    server: str,
    credential: BootstrapCredential,
    insecure: bool = False,
) -> None:
    config = build_kubeconfig(server, credential, insecure=insecure)
    try:
        write_private_file(path, yaml.safe_dump(config, default_flow_style=False, sort_keys=False))
    except OSError as e:
        raise BootstrapError("write kubeconfig to disk", str(e)) from e
    logger.info("Wrote kubeconfig", extra={"path": str(path)})
