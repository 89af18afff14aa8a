"""EC2 image registry backed by boto3."""

from datetime import datetime
from typing import Dict, List, Any
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from ebstpm.core.aws.registry import ImageRegistry
from ebstpm.core.constants import IMAGE_NOT_FOUND_CODES, LAUNCH_PERMISSION_ATTRIBUTE
from ebstpm.utils.exceptions import (
    AmbiguousImageError,
    ImageNotFoundError,
    ImageRegistryError,
)
from ebstpm.utils.logger import setup_logger
from ebstpm.utils.session import SessionManager


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


class EC2ImageRegistry(ImageRegistry):
    """Image registry for one region of EC2."""

    def __init__(self, ec2_client, region: str):
        """Initialize EC2ImageRegistry."""
        self.ec2_client = ec2_client
        self.region = region
        self.logger = setup_logger(__name__, "ec2_registry.log")

    def _call(self, operation: str, **params) -> Dict[str, Any]:
        """Invoke one EC2 operation, wrapping client errors."""
        try:
            return getattr(self.ec2_client, operation)(**params)
        except ClientError as e:
            code = _error_code(e)
            self.logger.debug(f"[{self.region}] {operation} failed with {code}: {e}")
            raise ImageRegistryError(operation, str(e), code=code) from e
        except BotoCoreError as e:
            raise ImageRegistryError(operation, str(e)) from e

    def describe_image(self, image_id: str) -> Dict[str, Any]:
        """Describe a single AMI; raises ImageLookupError unless exactly one matches."""
        try:
            response = self._call("describe_images", ImageIds=[image_id])
        except ImageRegistryError as e:
            if e.code in IMAGE_NOT_FOUND_CODES:
                raise ImageNotFoundError(
                    f"image {image_id} not found in {self.region}"
                ) from e
            raise

        images = response.get("Images", [])
        if not images:
            raise ImageNotFoundError(f"image {image_id} not found in {self.region}")
        if len(images) > 1:
            raise AmbiguousImageError(
                f"{len(images)} images found for {image_id} in {self.region}, expected 1"
            )
        return images[0]

    def describe_launch_permissions(self, image_id: str) -> List[Dict[str, Any]]:
        response = self._call(
            "describe_image_attribute",
            ImageId=image_id,
            Attribute=LAUNCH_PERMISSION_ATTRIBUTE,
        )
        return response.get("LaunchPermissions", [])

    def deregister_image(self, image_id: str) -> None:
        self._call("deregister_image", ImageId=image_id)
        self.logger.info(f"[{self.region}] Deregistered image {image_id}")

    def register_image(self, params: Dict[str, Any]) -> str:
        response = self._call("register_image", **params)
        return response["ImageId"]

    def create_tags(self, image_id: str, tags: List[Dict[str, str]]) -> None:
        self._call("create_tags", Resources=[image_id], Tags=tags)

    def add_launch_permissions(self, image_id: str, permissions: List[Dict[str, Any]]) -> None:
        self._call(
            "modify_image_attribute",
            ImageId=image_id,
            LaunchPermission={"Add": permissions},
        )

    def enable_image_deprecation(self, image_id: str, deprecate_at: datetime) -> None:
        self._call("enable_image_deprecation", ImageId=image_id, DeprecateAt=deprecate_at)


def create_image_registry(session: boto3.Session, region: str) -> EC2ImageRegistry:
    """Create EC2ImageRegistry for one region of a session."""
    return EC2ImageRegistry(SessionManager.get_client(session, "ec2", region), region)
