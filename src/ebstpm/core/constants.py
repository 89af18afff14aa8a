#!/usr/bin/env python3
"""Core constants for the secureboot post-processor."""

# Builder identifiers
BUILDER_ID = "packer.post-processor.ebstpm-secureboot"
SOURCE_BUILDER_ID = "mitchellh.amazonebs"

# Registration attributes
DEFAULT_TPM_VERSION = "v2.0"
BOOT_MODE_UEFI = "uefi"
LAUNCH_PERMISSION_ATTRIBUTE = "launchPermission"

# EC2 error codes meaning the image does not exist (any more)
IMAGE_NOT_FOUND_CODES = frozenset(
    {"InvalidAMIID.NotFound", "InvalidAMIID.Unavailable", "InvalidAMIID.Malformed"}
)

# Artifact id format
ARTIFACT_SEPARATOR = ","
REGION_SEPARATOR = ":"

# Report Format Constants
SCAN_TIME_FORMAT = "%Y-%m-%d %H:%M:%S UTC"
