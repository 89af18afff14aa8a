"""Data models for source AMI snapshots and their re-registration."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Any

from ebstpm.core.constants import BOOT_MODE_UEFI

# fromisoformat before 3.11 only takes 3 or 6 fraction digits
FRACTION_PATTERN = re.compile(r"\.(\d+)(?=[+-]\d{2}:?\d{2}$|$)")


class FieldCopyMode(Enum):
    """Which image fields are carried into the new registration."""
    FULL = "full"
    REDUCED = "reduced"


# Fields copied verbatim from the source image, by copy mode.
REDUCED_COPY_FIELDS = (
    "Architecture",
    "Description",
    "EnaSupport",
    "ImdsSupport",
    "SriovNetSupport",
    "RootDeviceName",
)
FULL_COPY_FIELDS = REDUCED_COPY_FIELDS + (
    "VirtualizationType",
    "KernelId",
    "RamdiskId",
    "ImageLocation",
)


@dataclass
class BlockDeviceMapping:
    """EBS-backed mapping reduced to device name and backing snapshot."""
    device_name: str
    snapshot_id: Optional[str] = None

    def to_aws(self) -> Dict[str, Any]:
        ebs = {"SnapshotId": self.snapshot_id} if self.snapshot_id else {}
        return {"DeviceName": self.device_name, "Ebs": ebs}

    @classmethod
    def from_aws_mappings(cls, mappings: List[Dict[str, Any]]) -> List["BlockDeviceMapping"]:
        """Keep only EBS-backed mappings; ephemeral and NoDevice entries are dropped."""
        return [
            cls(device_name=m.get("DeviceName", ""), snapshot_id=m["Ebs"].get("SnapshotId"))
            for m in mappings
            if m.get("Ebs") is not None
        ]


@dataclass
class SourceImage:
    """Snapshot of a source image, captured once before it is deregistered."""
    image_id: str
    name: str
    architecture: Optional[str] = None
    description: Optional[str] = None
    block_device_mappings: List[BlockDeviceMapping] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)
    launch_permissions: List[Dict[str, Any]] = field(default_factory=list)
    deprecation_time: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def tag_list(self) -> List[Dict[str, str]]:
        return [{"Key": k, "Value": v} for k, v in self.tags.items()]

    @property
    def is_shared(self) -> bool:
        return bool(self.launch_permissions)

    def parse_deprecation_time(self) -> Optional[datetime]:
        """Parse the ISO-8601 deprecation time; raises ValueError when malformed."""
        if self.deprecation_time is None:
            return None
        if isinstance(self.deprecation_time, datetime):
            value = self.deprecation_time
        else:
            text = self.deprecation_time.strip()
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            text = FRACTION_PATTERN.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text)
            value = datetime.fromisoformat(text)
        if value.tzinfo is None:
            raise ValueError(f"deprecation time {self.deprecation_time!r} has no UTC offset")
        return value.astimezone(timezone.utc)

    def to_register_params(
        self,
        tpm_version: str,
        uefi_data: str,
        name: Optional[str] = None,
        copy_mode: FieldCopyMode = FieldCopyMode.FULL,
    ) -> Dict[str, Any]:
        """Build RegisterImage parameters for the secureboot copy of this image.

        Boot mode is always uefi. Fields absent from the source are omitted.
        """
        copy_fields = FULL_COPY_FIELDS if copy_mode is FieldCopyMode.FULL else REDUCED_COPY_FIELDS
        source = dict(self.attributes, Architecture=self.architecture, Description=self.description)
        params: Dict[str, Any] = {
            key: source[key] for key in copy_fields if source.get(key) is not None
        }

        if self.block_device_mappings:
            params["BlockDeviceMappings"] = [m.to_aws() for m in self.block_device_mappings]

        params["Name"] = name or self.name
        params["BootMode"] = BOOT_MODE_UEFI
        params["TpmSupport"] = tpm_version
        params["UefiData"] = uefi_data
        return params

    @classmethod
    def from_aws_image(
        cls, image: Dict[str, Any], launch_permissions: Optional[List[Dict[str, Any]]] = None
    ) -> "SourceImage":
        """Create SourceImage from AWS image data."""
        # Extract tags
        tags = {}
        for tag in image.get("Tags", []):
            if tag.get("Key"):
                tags[tag["Key"]] = tag.get("Value", "")

        attributes = {
            key: image[key]
            for key in FULL_COPY_FIELDS
            if key not in ("Architecture", "Description") and image.get(key) is not None
        }

        return cls(
            image_id=image["ImageId"],
            name=image.get("Name", ""),
            architecture=image.get("Architecture"),
            description=image.get("Description"),
            block_device_mappings=BlockDeviceMapping.from_aws_mappings(
                image.get("BlockDeviceMappings", [])
            ),
            tags=tags,
            launch_permissions=list(launch_permissions or []),
            deprecation_time=image.get("DeprecationTime"),
            attributes=attributes,
        )
