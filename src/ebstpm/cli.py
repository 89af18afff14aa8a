#!/usr/bin/env python3
"""
ebstpm - Secureboot post-processor CLI
Re-registers amazon-ebs AMIs with UEFI boot mode and TPM support
"""

import click
import logging

from ebstpm import __version__
from ebstpm.core.constants import SOURCE_BUILDER_ID
from ebstpm.core.models.ami import FieldCopyMode
from ebstpm.utils.decorators import config_operation, post_process_operation
from ebstpm.utils.logger import set_console_level, setup_logger


def setup_logging(verbose: bool = False):
    level = "DEBUG" if verbose else "INFO"
    logger = setup_logger("ebstpm_cli", "cli.log", level)
    if verbose:
        for name in list(logging.Logger.manager.loggerDict):
            if name.startswith("ebstpm"):
                set_console_level(logging.getLogger(name), level)
    return logger


def add_common_options(func):
    func = click.option("--force", is_flag=True, help="Skip confirmation prompts")(func)
    func = click.option("--verbose", is_flag=True, help="Enable verbose output")(func)
    func = click.option(
        "--dry-run", is_flag=True, help="Preview changes without executing"
    )(func)
    return func


def add_config_options(func):
    func = click.option("--uefi-data", help="Base64 UEFI variable store to register with")(func)
    func = click.option(
        "--uefi-data-file",
        type=click.File("r"),
        help="File holding the base64 UEFI variable store",
    )(func)
    func = click.option("--tpm-version", help="TPM support value (default: v2.0)")(func)
    func = click.option("--ami-name", help="Name for every new AMI instead of the source name")(func)
    func = click.option(
        "--field-copy",
        type=click.Choice([mode.value for mode in FieldCopyMode], case_sensitive=False),
        help="Copy all source image fields (full) or only the essential ones (reduced)",
    )(func)
    return func


@click.group()
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    help="Settings file (default: $EBSTPM_CONFIG or ./configs/settings.yaml)",
)
@click.option("--region", help="Default AWS region for the session")
@click.option("--profile", help="AWS named profile")
@click.pass_context
def cli(ctx, config_file, region, profile):
    """ebstpm - TPM/secureboot post-processor for amazon-ebs AMIs"""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    ctx.obj["region"] = region
    ctx.obj["profile"] = profile


@cli.command("post-process")
@click.option("--artifact-id", required=True, help="Builder artifact id, e.g. us-east-1:ami-0123,eu-west-1:ami-4567")
@click.option("--builder-id", default=SOURCE_BUILDER_ID, show_default=True, help="Builder that produced the artifact")
@click.option("--output", type=click.Path(), help="Output file path")
@add_config_options
@add_common_options
@click.pass_context
@post_process_operation(requires_confirmation=True)
def post_process(ctx, artifact_id, builder_id, output, dry_run, verbose, force):
    """Replace the artifact's AMIs with TPM/secureboot-enabled registrations

    Each source AMI is deregistered and registered again with boot mode uefi,
    the configured TPM version and UEFI data. Tags, launch permissions and
    the deprecation time are copied to the new AMI.
    """
    setup_logging(verbose)


@cli.command("validate-config")
@add_config_options
@click.pass_context
@config_operation()
def validate_config(ctx):
    """Validate the post-processor configuration without calling AWS"""
    setup_logging()


@cli.command()
def version():
    """Show version information"""
    click.echo(f"ebstpm {__version__}")
    click.echo("TPM/secureboot post-processor for amazon-ebs AMIs")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
