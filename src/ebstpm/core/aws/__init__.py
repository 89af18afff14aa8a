"""AWS core modules."""

from .registry import ImageRegistry
from .ec2 import EC2ImageRegistry, create_image_registry

__all__ = [
    "ImageRegistry",
    "EC2ImageRegistry",
    "create_image_registry",
]
