"""
vault-csr CLI
Entry point for the certificate signing controller and the bootstrap tool.

Every option can also be set through the environment with the
VAULT_CSR_SIGNER_ prefix (e.g. VAULT_CSR_SIGNER_VAULT_PKI_ROLE); flags given
on the command line win.
"""

import importlib
import signal
import sys
import threading
from typing import Any, Callable, Dict

import click

from .controller.bootstrap import (
    DEFAULT_GROUP,
    create_bootstrap_cert_with_issue,
    create_bootstrap_cert_with_sign_verbatim,
)
from .controller.kubeconfig import write_kubeconfig
from .controller.signer import RequestController, VaultSigner
from .controller.supervisor import run_until_stopped
from .utils.config import VaultCSRSettings, build_auth_provider, load_settings
from .utils.exceptions import ConfigValidationError, VaultCSRError
from .utils.logging import configure_logging, get_logger
from .vault.client import create_vault_client
from .vault.renewer import Renewer

logger = get_logger(__name__)


def _settings(**overrides: Any) -> VaultCSRSettings:
    """Settings from the environment, overridden by flags that were given."""
    given: Dict[str, Any] = {k.upper(): v for k, v in overrides.items() if v is not None}
    return load_settings(**given)


def vault_options(f: Callable) -> Callable:
    """Vault client and auth flags shared by all commands."""
    options = [
        click.option("--vault-address", help="vault server address"),
        click.option(
            "--vault-auth",
            type=click.Choice(["kubernetes", "approle", ""]),
            help="method to use for vault auth (kubernetes|approle)",
        ),
        click.option("--kubernetes-auth-mount", help="name of the kubernetes auth mount in vault"),
        click.option("--kubernetes-auth-role", help="role to use when authenticating with the service token"),
        click.option("--kubernetes-auth-token-file", help="file to load service token from"),
        click.option("--approle-auth-mount", help="name of the approle auth mount in vault"),
        click.option("--approle-auth-roleid", help="vault role id to use when authenticating with an approle"),
        click.option("--approle-auth-secretid", help="vault secret id to use when authenticating with an approle"),
        click.option("--vault-pki-mount", help="pki mount to use to generate certificates"),
        click.option("--vault-pki-role", help="pki role to use"),
        click.option("--log-level", help="log level (DEBUG, INFO, WARNING, ERROR)"),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def load_request_controller(target: str, config: VaultCSRSettings) -> RequestController:
    """
    Load the request controller from a ``module:factory`` reference.

    The factory is called with the process settings and must return an object
    satisfying RequestController.
    """
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise ConfigValidationError("REQUEST_CONTROLLER", f"expected module:factory, got {target!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigValidationError("REQUEST_CONTROLLER", f"cannot import {module_name}: {e}") from e

    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ConfigValidationError("REQUEST_CONTROLLER", f"{target} is not callable")
    return factory(config)


def _prepare(config: VaultCSRSettings) -> Renewer:
    configure_logging(level=config.LOG_LEVEL, json_format=config.is_production())

    client = create_vault_client(
        config.VAULT_ADDRESS,
        max_retries=config.VAULT_MAX_RETRIES,
        timeout=config.VAULT_TIMEOUT,
    )
    renewer = Renewer(client, build_auth_provider(config))

    # Make sure we hold a token before doing anything else
    renewer.run_once()
    return renewer


@click.group()
def cli():
    """Kubernetes certificate signing backed by Vault PKI."""
    pass


@cli.command()
@vault_options
@click.option("--signer-workers", type=int, help="number of signing workers to run")
@click.option(
    "--request-controller",
    envvar="VAULT_CSR_SIGNER_REQUEST_CONTROLLER",
    required=True,
    help="module:factory returning the certificate request controller",
)
def controller(request_controller, **options):
    """Sign approved certificate requests using vault's sign-verbatim endpoint."""
    try:
        config = _settings(**options)
        renewer = _prepare(config)

        request_ctrl = load_request_controller(request_controller, config)
        signer = VaultSigner(
            renewer.client,
            mount=config.VAULT_PKI_MOUNT,
            role=config.VAULT_PKI_ROLE,
            update_status=request_ctrl.update_status,
        )

        stop_event = threading.Event()

        def _terminate(signum, frame):
            logger.info("Received termination signal, exiting gracefully...")
            stop_event.set()

        signal.signal(signal.SIGINT, _terminate)
        signal.signal(signal.SIGTERM, _terminate)

        run_until_stopped(renewer, request_ctrl, signer.handle, config.SIGNER_WORKERS, stop_event)
    except VaultCSRError as e:
        logger.error(f"Unhandled error received: {e}")
        sys.exit(1)


@cli.command()
@vault_options
@click.option("--node-name", required=True, help="node name to use in the bootstrap certificate")
@click.option("--group-name", default=DEFAULT_GROUP, show_default=True, help="group name for sign-verbatim certificates")
@click.option("--vault-pki-ttl", help="ttl of the bootstrap certificate")
@click.option("--sign-verbatim", is_flag=True, default=False, help="use sign-verbatim to create the certificate")
@click.option("--output-kubeconfig-master-url", "master_url", default="", help="url of the apiserver")
@click.option("--output-kubeconfig-insecure", "insecure", is_flag=True, default=False, help="skip apiserver TLS verification")
@click.option("--output-kubeconfig-path", "kubeconfig_path", required=True, type=click.Path(dir_okay=False), help="path to write kubeconfig to")
def bootstrap(node_name, group_name, sign_verbatim, master_url, insecure, kubeconfig_path, **options):
    """Create a bootstrap node credential using vault and write it as a kubeconfig."""
    try:
        config = _settings(**options)
        renewer = _prepare(config)

        if sign_verbatim:
            credential = create_bootstrap_cert_with_sign_verbatim(
                renewer.client,
                config.VAULT_PKI_MOUNT,
                config.VAULT_PKI_ROLE,
                config.VAULT_PKI_TTL,
                node_name,
                group_name,
            )
        else:
            credential = create_bootstrap_cert_with_issue(
                renewer.client,
                config.VAULT_PKI_MOUNT,
                config.VAULT_PKI_ROLE,
                config.VAULT_PKI_TTL,
                node_name,
            )

        write_kubeconfig(kubeconfig_path, master_url, credential, insecure=insecure)
    except VaultCSRError as e:
        logger.error(f"Bootstrap failed: {e}")
        sys.exit(1)

    click.echo(f"Wrote bootstrap kubeconfig for system:node:{node_name} to {kubeconfig_path}")


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
