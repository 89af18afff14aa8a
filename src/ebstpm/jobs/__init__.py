"""Image jobs package."""

from .base import BaseJob
from .resecure_ami import ResecureAMIJob
from .post_process import PostProcessor, PostProcessResult

__all__ = [
    "BaseJob",
    "ResecureAMIJob",
    "PostProcessor",
    "PostProcessResult",
]
