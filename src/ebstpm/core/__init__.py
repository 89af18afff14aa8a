"""Core module: models, constants, image registry and processors.

Registry and processor classes live in ebstpm.core.aws and
ebstpm.core.processors; they depend on ebstpm.utils, which in turn
imports the models exported here.
"""

from .models import (
    FieldCopyMode,
    BlockDeviceMapping,
    SourceImage,
    SourceImageRef,
    ResecureRequest,
    parse_artifact_id,
    RegionError,
    ResecureResult,
    Artifact,
    AmiArtifact,
)
from .constants import (
    BUILDER_ID,
    SOURCE_BUILDER_ID,
    DEFAULT_TPM_VERSION,
    BOOT_MODE_UEFI,
)

__all__ = [
    # Models
    "FieldCopyMode",
    "BlockDeviceMapping",
    "SourceImage",
    "SourceImageRef",
    "ResecureRequest",
    "parse_artifact_id",
    "RegionError",
    "ResecureResult",
    "Artifact",
    "AmiArtifact",
    # Constants
    "BUILDER_ID",
    "SOURCE_BUILDER_ID",
    "DEFAULT_TPM_VERSION",
    "BOOT_MODE_UEFI",
]
