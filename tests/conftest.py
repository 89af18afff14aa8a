"""
Pytest configuration and shared fixtures for ebstpm tests.

FakeImageRegistry keeps images in memory and records every provider call,
so tests can assert the exact call sequence of a resecure run.
"""

import os
import tempfile
from datetime import datetime
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

# Keep log files out of the working tree
os.environ.setdefault("LOG_PATH", tempfile.mkdtemp(prefix="ebstpm-logs-"))

from ebstpm.core.aws.registry import ImageRegistry
from ebstpm.utils.config import AccessConfig, PostProcessorConfig
from ebstpm.utils.exceptions import (
    AmbiguousImageError,
    ImageNotFoundError,
    ImageRegistryError,
)

UEFI_DATA = "ZGF0YQ=="


class FakeImageRegistry(ImageRegistry):
    """In-memory image registry for one region."""

    def __init__(self, region: str, images: Optional[Dict[str, Dict[str, Any]]] = None):
        self.region = region
        self.images: Dict[str, Dict[str, Any]] = dict(images or {})
        self.permissions: Dict[str, List[Dict[str, Any]]] = {}
        self.duplicates: set = set()
        self.failures: Dict[str, ImageRegistryError] = {}
        self.calls: List[tuple] = []
        self.registered: Dict[str, Dict[str, Any]] = {}
        self._counter = 0

    def fail(self, operation: str, code: str = "InternalError", message: str = "boom") -> None:
        self.failures[operation] = ImageRegistryError(operation, message, code=code)

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.failures:
            raise self.failures[operation]

    def describe_image(self, image_id: str) -> Dict[str, Any]:
        self.calls.append(("describe_image", image_id))
        self._maybe_fail("describe_image")
        if image_id in self.duplicates:
            raise AmbiguousImageError(f"2 images found for {image_id} in {self.region}, expected 1")
        if image_id not in self.images:
            raise ImageNotFoundError(f"image {image_id} not found in {self.region}")
        return self.images[image_id]

    def describe_launch_permissions(self, image_id: str) -> List[Dict[str, Any]]:
        self.calls.append(("describe_launch_permissions", image_id))
        self._maybe_fail("describe_launch_permissions")
        return list(self.permissions.get(image_id, []))

    def deregister_image(self, image_id: str) -> None:
        self.calls.append(("deregister_image", image_id))
        self._maybe_fail("deregister_image")
        if image_id not in self.images and image_id not in self.registered:
            raise ImageRegistryError("deregister_image", "gone", code="InvalidAMIID.Unavailable")
        self.images.pop(image_id, None)
        self.registered.pop(image_id, None)

    def register_image(self, params: Dict[str, Any]) -> str:
        self.calls.append(("register_image", params))
        self._maybe_fail("register_image")
        self._counter += 1
        image_id = f"ami-new{self.region.replace('-', '')}{self._counter}"
        self.registered[image_id] = params
        return image_id

    def create_tags(self, image_id: str, tags: List[Dict[str, str]]) -> None:
        self.calls.append(("create_tags", image_id, tags))
        self._maybe_fail("create_tags")

    def add_launch_permissions(self, image_id: str, permissions: List[Dict[str, Any]]) -> None:
        self.calls.append(("add_launch_permissions", image_id, permissions))
        self._maybe_fail("add_launch_permissions")

    def enable_image_deprecation(self, image_id: str, deprecate_at: datetime) -> None:
        self.calls.append(("enable_image_deprecation", image_id, deprecate_at))
        self._maybe_fail("enable_image_deprecation")

    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]


def make_image(image_id: str = "ami-111", **overrides) -> Dict[str, Any]:
    """A describe_images entry for an EBS-backed x86_64 image."""
    image = {
        "ImageId": image_id,
        "Name": "base-image",
        "Architecture": "x86_64",
        "Description": "Base image",
        "EnaSupport": True,
        "ImdsSupport": "v2.0",
        "SriovNetSupport": "simple",
        "VirtualizationType": "hvm",
        "RootDeviceName": "/dev/xvda",
        "ImageLocation": "123456789012/base-image",
        "BlockDeviceMappings": [
            {
                "DeviceName": "/dev/xvda",
                "Ebs": {
                    "SnapshotId": "snap-root",
                    "VolumeSize": 8,
                    "VolumeType": "gp3",
                    "Encrypted": False,
                    "DeleteOnTermination": True,
                },
            },
            {"DeviceName": "/dev/sdb", "VirtualName": "ephemeral0"},
        ],
        "Tags": [
            {"Key": "Name", "Value": "base-image"},
            {"Key": "Team", "Value": "platform"},
        ],
    }
    image.update(overrides)
    return image


@pytest.fixture
def config() -> PostProcessorConfig:
    """Prepared configuration with default TPM version."""
    return PostProcessorConfig(
        uefi_data=UEFI_DATA,
        access=AccessConfig(region="us-east-1", skip_credential_validation=True),
    ).prepare()


@pytest.fixture
def session_manager() -> MagicMock:
    manager = MagicMock()
    manager.get_session.return_value = MagicMock(name="session")
    return manager


@pytest.fixture
def registries() -> Dict[str, FakeImageRegistry]:
    return {
        "us-east-1": FakeImageRegistry("us-east-1", {"ami-111": make_image("ami-111")}),
        "eu-west-1": FakeImageRegistry(
            "eu-west-1", {"ami-222": make_image("ami-222", Name="base-image-eu")}
        ),
    }


@pytest.fixture
def registry_factory(registries):
    factory = MagicMock(side_effect=lambda session, region: registries[region])
    return factory


@pytest.fixture
def job_kwargs(session_manager, registry_factory) -> Dict[str, Any]:
    return {"session_manager": session_manager, "registry_factory": registry_factory}
