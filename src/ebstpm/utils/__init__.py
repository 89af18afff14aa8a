# utils/__init__.py

from .config import AccessConfig, ConfigManager, PostProcessorConfig
from .session import SessionManager, assume_role
from .logger import setup_logger
from .ui import Ui, ConsoleUi, RecordingUi
from .exceptions import (
    EbsTpmError,
    CLIError,
    ConfigurationError,
    SessionError,
    ImageRegistryError,
    ImageLookupError,
    ImageNotFoundError,
    AmbiguousImageError,
    DeregistrationError,
    RegistrationError,
    TagPropagationError,
    PermissionPropagationError,
    DeprecationPropagationError,
    ArtifactDestroyError,
    ValidationRules,
)

__all__ = [
    "AccessConfig",
    "ConfigManager",
    "PostProcessorConfig",
    "SessionManager",
    "assume_role",
    "setup_logger",
    "Ui",
    "ConsoleUi",
    "RecordingUi",
    "EbsTpmError",
    "CLIError",
    "ConfigurationError",
    "SessionError",
    "ImageRegistryError",
    "ImageLookupError",
    "ImageNotFoundError",
    "AmbiguousImageError",
    "DeregistrationError",
    "RegistrationError",
    "TagPropagationError",
    "PermissionPropagationError",
    "DeprecationPropagationError",
    "ArtifactDestroyError",
    "ValidationRules",
]
