"""Data models for AMI resecure runs."""

# Image models
from .ami import (
    FieldCopyMode,
    BlockDeviceMapping,
    SourceImage,
)

# Request models
from .request import (
    SourceImageRef,
    ResecureRequest,
    parse_artifact_id,
)

# Result models
from .result import (
    RegionError,
    ResecureResult,
)

# Artifact models
from .artifact import (
    Artifact,
    AmiArtifact,
)

__all__ = [
    # Image models
    "FieldCopyMode",
    "BlockDeviceMapping",
    "SourceImage",
    # Request models
    "SourceImageRef",
    "ResecureRequest",
    "parse_artifact_id",
    # Result models
    "RegionError",
    "ResecureResult",
    # Artifact models
    "Artifact",
    "AmiArtifact",
]
