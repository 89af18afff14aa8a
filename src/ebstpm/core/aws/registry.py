"""Capability interface of an image registry."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List


class ImageRegistry(ABC):
    """Image operations the resecure sequence needs from a provider region.

    Every method is one blocking remote call. Implementations raise
    ImageLookupError from describe_image and ImageRegistryError otherwise.
    """

    region: str

    @abstractmethod
    def describe_image(self, image_id: str) -> Dict[str, Any]:
        """Return the description of exactly one image."""

    @abstractmethod
    def describe_launch_permissions(self, image_id: str) -> List[Dict[str, Any]]:
        """Return the image's shared launch permissions."""

    @abstractmethod
    def deregister_image(self, image_id: str) -> None:
        pass

    @abstractmethod
    def register_image(self, params: Dict[str, Any]) -> str:
        """Register an image and return its new id."""

    @abstractmethod
    def create_tags(self, image_id: str, tags: List[Dict[str, str]]) -> None:
        pass

    @abstractmethod
    def add_launch_permissions(self, image_id: str, permissions: List[Dict[str, Any]]) -> None:
        pass

    @abstractmethod
    def enable_image_deprecation(self, image_id: str, deprecate_at: datetime) -> None:
        pass
