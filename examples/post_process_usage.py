#!/usr/bin/env python3
"""
Example usage of PostProcessor

Re-registers the AMIs of an amazon-ebs build artifact with UEFI boot mode
and TPM support. Settings come from configs/settings.yaml; the UEFI data
can also be supplied through EBSTPM_UEFI_DATA.
"""

from ebstpm.core.models import Artifact
from ebstpm.jobs import PostProcessor
from ebstpm.utils import ConfigManager, ConsoleUi


def example_post_process_artifact():
    """
    Example: resecure the AMIs of a two-region build
    """
    print("=== Resecuring amazon-ebs artifact ===")

    config = ConfigManager().get_post_processor_config()

    processor = PostProcessor()
    processor.configure(config)

    artifact = Artifact(
        builder_id="mitchellh.amazonebs",
        artifact_id="us-east-1:ami-0123456789abcdef0,eu-west-1:ami-0fedcba9876543210",
    )

    outcome = processor.post_process(artifact, ConsoleUi())

    print(f"New artifact: {outcome.artifact.artifact_id}")
    print(f"Keep: {outcome.keep}, force override: {outcome.force_override}")
    if outcome.result is not None:
        for error in outcome.result.errors:
            print(f"Failed: {error}")
    return outcome


def example_skip_foreign_artifact():
    """
    Example: artifacts from other builders pass through untouched
    """
    print("\n=== Passing through a docker artifact ===")

    processor = PostProcessor()
    processor.configure(ConfigManager().get_post_processor_config(uefi_data="ZGF0YQ=="))

    artifact = Artifact(builder_id="packer.docker", artifact_id="localhost:5000/foo/bar")
    outcome = processor.post_process(artifact, ConsoleUi())

    print(f"Artifact unchanged: {outcome.artifact is artifact}")
    return outcome


if __name__ == "__main__":
    example_skip_foreign_artifact()
    example_post_process_artifact()
