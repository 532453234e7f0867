import hvac
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from typing import Optional

from ..utils.logging import get_logger

logger = get_logger(__name__)

# Connection pool configuration
DEFAULT_POOL_CONNECTIONS = 4
DEFAULT_POOL_MAXSIZE = 16  # signer workers plus the renewer share one pool
DEFAULT_POOL_BLOCK = False

DEFAULT_MAX_RETRIES = 10
DEFAULT_TIMEOUT = 30

# 412 is returned by performance standbys that have not caught up yet
RETRY_STATUS_CODES = [412, 500, 502, 503, 504]


def create_session(
    max_retries: int = DEFAULT_MAX_RETRIES,
    pool_maxsize: int = DEFAULT_POOL_MAXSIZE,
) -> requests.Session:
    """
    Build the HTTP session used for every vault call.

    The retry budget here is the only retry layer: neither the renewer nor the
    signer retries on top of it.
    """
    session = requests.Session()

    retries = Retry(
        total=max_retries,
        backoff_factor=0.5,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=["HEAD", "GET", "OPTIONS", "POST", "PUT", "DELETE", "LIST"],
        raise_on_status=False,
    )

    adapter = HTTPAdapter(
        max_retries=retries,
        pool_connections=DEFAULT_POOL_CONNECTIONS,
        pool_maxsize=pool_maxsize,
        pool_block=DEFAULT_POOL_BLOCK,
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def create_vault_client(
    address: str,
    max_retries: int = DEFAULT_MAX_RETRIES,
    timeout: int = DEFAULT_TIMEOUT,
    token: Optional[str] = None,
) -> hvac.Client:
    """
    Create the vault client shared by the token renewer and the signer.

    The client starts without a token unless one is given; the renewer's first
    tick authenticates it.
    """
    logger.debug("Creating vault client", extra={"address": address, "max_retries": max_retries})
    return hvac.Client(
        url=address,
        token=token,
        timeout=timeout,
        session=create_session(max_retries=max_retries),
    )
