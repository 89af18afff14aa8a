"""Exception classes and validation utilities for the secureboot post-processor.

Region-fatal errors stop the sequence for one source image only. Warnings
(deregistration and tag propagation failures) are recorded and the sequence
goes on. Configuration and session errors abort the whole operation.
"""

import re
from typing import Iterable, List, Optional


class EbsTpmError(Exception):
    """Base class for all post-processor errors."""

    pass


class CLIError(EbsTpmError):
    """Custom exception for CLI-related errors."""

    pass


class ConfigurationError(EbsTpmError):
    """One or more configuration values are missing or invalid."""

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        if len(self.errors) == 1:
            message = self.errors[0]
        else:
            message = f"{len(self.errors)} error(s) occurred:\n" + "\n".join(
                f"* {e}" for e in self.errors
            )
        super().__init__(message)


class SessionError(EbsTpmError):
    """AWS session or client could not be created."""

    pass


class ImageRegistryError(EbsTpmError):
    """An image registry call failed."""

    def __init__(self, operation: str, message: str, code: Optional[str] = None):
        self.operation = operation
        self.code = code
        super().__init__(f"{operation} failed: {message}")


class ImageLookupError(EbsTpmError):
    """Source image could not be resolved to exactly one image."""

    pass


class ImageNotFoundError(ImageLookupError):
    pass


class AmbiguousImageError(ImageLookupError):
    pass


class DeregistrationError(EbsTpmError):
    pass


class RegistrationError(EbsTpmError):
    """New image could not be registered after the source was deregistered."""

    pass


class TagPropagationError(EbsTpmError):
    pass


class PermissionPropagationError(EbsTpmError):
    pass


class DeprecationPropagationError(EbsTpmError):
    pass


class ArtifactDestroyError(EbsTpmError):
    """Collects every failure met while destroying an artifact."""

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors))


class ValidationRules:
    """Validation utilities for AWS resources."""

    REGION_PATTERN = re.compile(r"^[a-z]{2}(-gov|-iso[a-z]?)?-[a-z]+-\d$")
    AMI_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9()\[\] ./\-'@_]{3,128}$")

    @classmethod
    def validate_region(cls, region: str) -> bool:
        return bool(cls.REGION_PATTERN.match(region))

    @classmethod
    def validate_ami_name(cls, name: str) -> bool:
        """AMI names are 3-128 characters of letters, digits and ()[] ./-'@_"""
        return bool(cls.AMI_NAME_PATTERN.match(name))
