"""Request models for re-registering source AMIs."""

from dataclasses import dataclass
from typing import List, Optional

from ebstpm.core.constants import (
    ARTIFACT_SEPARATOR,
    DEFAULT_TPM_VERSION,
    REGION_SEPARATOR,
)
from ebstpm.core.models.ami import FieldCopyMode


@dataclass(frozen=True)
class SourceImageRef:
    """One region:image-id pair from a builder artifact id."""
    region: str
    image_id: str

    def __str__(self) -> str:
        return f"{self.region}{REGION_SEPARATOR}{self.image_id}"


def parse_artifact_id(artifact_id: str) -> List[SourceImageRef]:
    """Split "region:ami,region:ami" into refs, in order.

    Entries that do not split into exactly two non-empty tokens are skipped.
    """
    refs = []
    for entry in artifact_id.split(ARTIFACT_SEPARATOR):
        parts = entry.split(REGION_SEPARATOR)
        if len(parts) != 2 or not all(parts):
            continue
        refs.append(SourceImageRef(region=parts[0], image_id=parts[1]))
    return refs


@dataclass
class ResecureRequest:
    """Everything one resecure run needs besides provider access."""
    source_images: List[SourceImageRef]
    uefi_data: str
    tpm_version: str = DEFAULT_TPM_VERSION
    ami_name: Optional[str] = None
    copy_mode: FieldCopyMode = FieldCopyMode.FULL

    @property
    def regions(self) -> List[str]:
        """Distinct regions in input order."""
        return list(dict.fromkeys(ref.region for ref in self.source_images))

    @classmethod
    def from_artifact_id(cls, artifact_id: str, config) -> "ResecureRequest":
        """Build a request from an artifact id and a prepared PostProcessorConfig."""
        return cls(
            source_images=parse_artifact_id(artifact_id),
            uefi_data=config.uefi_data,
            tpm_version=config.tpm_version or DEFAULT_TPM_VERSION,
            ami_name=config.ami_name or None,
            copy_mode=config.copy_mode,
        )
