import logging
import os
import sys
from pathlib import Path

import click
import pytest

from collateral_prod.settings import BASE_DIR

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]
PROD_TESTS_DIR = str(Path(BASE_DIR, "tests_prod"))


def export_settings(provider_url, target_network, deployment_path, patch_fresh_deployment):
    os.environ["WEB3_PROVIDER_URL"] = provider_url
    if target_network:
        os.environ["TARGET_NETWORK"] = target_network
    if deployment_path:
        os.environ["DEPLOYMENT_PATH"] = deployment_path
    os.environ["PATCH_FRESH_DEPLOYMENT"] = "true" if patch_fresh_deployment else "false"


@click.command(context_settings={"ignore_unknown_options": True})
@click.option("--provider-url", envvar="WEB3_PROVIDER_URL", required=True, help="RPC endpoint of the node or fork")
@click.option("--network", "target_network", default=None, help="Network name, required for forks")
@click.option(
    "--deployment-path",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding deployment.json",
)
@click.option(
    "--patch-fresh-deployment/--no-patch-fresh-deployment",
    default=False,
    help="Simulate rates, snapshot debt and mock the bridge before testing",
)
@click.option("--tests-dir", type=click.Path(file_okay=False), default=PROD_TESTS_DIR, show_default=True)
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default="INFO", show_default=True)
@click.argument("pytest_args", nargs=-1, type=click.UNPROCESSED)
def main(provider_url, target_network, deployment_path, patch_fresh_deployment, tests_dir, log_level, pytest_args):
    """Run the multi-collateral production tests against PROVIDER_URL."""
    logging.basicConfig(level=log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    export_settings(provider_url, target_network, deployment_path, patch_fresh_deployment)

    click.echo(f"Running production tests in {tests_dir} against {provider_url}")
    sys.exit(pytest.main([tests_dir, "-m", "prod", *pytest_args]))


if __name__ == "__main__":
    main()
