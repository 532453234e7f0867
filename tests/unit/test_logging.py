"""
Logging Tests - namespacing and secret redaction.
"""

import io
import json
import logging

import pytest

from vaultcsr.utils.logging import ROOT_LOGGER, configure_logging, get_logger


@pytest.fixture
def stream():
    buf = io.StringIO()
    yield buf
    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.propagate = True


def test_logger_namespace():
    assert get_logger("renewer").name == "vaultcsr.renewer"
    assert get_logger("vaultcsr.cli").name == "vaultcsr.cli"


def test_json_output_redacts_secrets(stream):
    configure_logging(level="DEBUG", json_format=True, stream=stream)

    get_logger("auth").info("Authenticated", extra={"method": "approle", "secret_id": "sid", "client_token": "s.x"})

    record = json.loads(stream.getvalue())
    assert record["logger"] == "vaultcsr.auth"
    assert record["message"] == "Authenticated"
    assert record["extra"] == {"method": "approle", "secret_id": "[REDACTED]", "client_token": "[REDACTED]"}


def test_development_output(stream):
    configure_logging(level="INFO", json_format=False, stream=stream)

    get_logger("signer").info("Signed", extra={"csr": "node-csr-abc", "private_key": "KEY"})
    get_logger("signer").debug("hidden")

    output = stream.getvalue()
    assert "vaultcsr.signer" in output
    assert "csr=node-csr-abc" in output
    assert "private_key=[REDACTED]" in output
    assert "KEY" not in output.replace("private_key", "")
    assert "hidden" not in output
