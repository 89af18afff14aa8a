"""Decorator patterns for the post-processor CLI commands."""

import json
import click
from functools import wraps
from typing import Any, Callable, Dict, Optional

from ebstpm.core.models.artifact import Artifact
from ebstpm.core.models.request import parse_artifact_id
from ebstpm.jobs.post_process import PostProcessor, PostProcessResult
from ebstpm.utils.config import ConfigManager, PostProcessorConfig
from ebstpm.utils.exceptions import CLIError, EbsTpmError
from ebstpm.utils.logger import setup_logger
from ebstpm.utils.ui import ConsoleUi

CONFIG_OPTION_NAMES = ("uefi_data", "uefi_data_file", "tpm_version", "ami_name", "field_copy")


def handle_operation_error(operation_name: str, error: Exception) -> None:
    """Centralized error handling for operations.

    Args:
        operation_name: Name of the operation that failed
        error: Exception that occurred
    """
    error_msg = f"Error in {operation_name}: {str(error)}"
    logger = setup_logger("ebstpm.errors")
    logger.error(
        error_msg,
        extra={"operation": operation_name, "error_type": type(error).__name__},
    )


def handle_output(payload: Dict[str, Any], output_path: Optional[str] = None) -> None:
    """Print the payload as JSON or write it to output_path."""
    logger = setup_logger("ebstpm.output", "operations.log")
    text = json.dumps(payload, indent=2, default=str)

    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        click.echo(f"Results saved to {output_path}")
        logger.info(f"Results saved to {output_path}")
    else:
        click.echo(text)


def build_config(ctx: click.Context, options: Dict[str, Any]) -> PostProcessorConfig:
    """Merge settings file, environment and command-line options."""
    uefi_data = options.get("uefi_data")
    uefi_data_file = options.get("uefi_data_file")
    if uefi_data and uefi_data_file:
        raise CLIError("Use either --uefi-data or --uefi-data-file, not both")
    if uefi_data_file:
        uefi_data = uefi_data_file.read().strip()

    obj = ctx.obj or {}
    manager = ConfigManager(config_file=obj.get("config_file"))
    return manager.get_post_processor_config(
        uefi_data=uefi_data,
        tpm_version=options.get("tpm_version"),
        ami_name=options.get("ami_name"),
        field_copy=options.get("field_copy"),
        region=obj.get("region"),
        profile=obj.get("profile"),
    )


def result_payload(outcome: PostProcessResult) -> Dict[str, Any]:
    return {
        "artifact": outcome.artifact.to_dict(),
        "keep": outcome.keep,
        "force_override": outcome.force_override,
        "result": outcome.result.to_dict() if outcome.result is not None else None,
    }


def _split_options(kwargs: Dict[str, Any]) -> Dict[str, Any]:
    return {name: kwargs.pop(name, None) for name in CONFIG_OPTION_NAMES}


def config_operation():
    """Decorator for commands that only build and validate the configuration."""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(ctx, **kwargs):
            operation_name = func.__name__
            options = _split_options(kwargs)
            func(ctx, **kwargs)

            try:
                config = build_config(ctx, options)
                PostProcessor().configure(config)
            except EbsTpmError as e:
                handle_operation_error(operation_name, e)
                raise click.ClickException(str(e)) from e

            click.echo(
                f"Configuration is valid (tpm_version={config.tpm_version}, "
                f"field_copy={config.field_copy}, "
                f"ami_name={config.ami_name or '<source name>'})"
            )
            return config

        return wrapper

    return decorator


def post_process_operation(requires_confirmation: bool = True):
    """Decorator running the secureboot post-processor for a command.

    Args:
        requires_confirmation: Whether to ask before deregistering images
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(ctx, **kwargs):
            operation_name = func.__name__
            options = _split_options(kwargs)
            func(ctx, **kwargs)

            try:
                processor = PostProcessor()
                processor.configure(build_config(ctx, options))
                config = processor.config
                artifact = Artifact(
                    builder_id=kwargs["builder_id"], artifact_id=kwargs["artifact_id"]
                )
                sources = parse_artifact_id(artifact.artifact_id)

                if kwargs.get("dry_run", False):
                    for source in sources:
                        click.echo(
                            f"[DRY RUN] Would re-register {source} with boot mode uefi, "
                            f"TPM {config.tpm_version}, name "
                            f"{config.ami_name or '<source name>'}"
                        )
                    if not sources:
                        click.echo("[DRY RUN] No region:image-id pairs in artifact id")
                    return None

                if requires_confirmation and sources and not kwargs.get("force", False):
                    if not click.confirm(
                        f"Deregister and re-register {len(sources)} image(s)?",
                        err=True,
                    ):
                        click.echo("Operation cancelled by user.")
                        return None

                outcome = processor.post_process(artifact, ConsoleUi())
            except EbsTpmError as e:
                handle_operation_error(operation_name, e)
                raise click.ClickException(str(e)) from e

            handle_output(result_payload(outcome), kwargs.get("output"))
            return outcome

        return wrapper

    return decorator
