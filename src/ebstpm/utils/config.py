#!/usr/bin/env python3
"""
utils/config.py

Configuration management for the secureboot post-processor.
Loads YAML settings, applies environment overrides and builds the typed
configuration the post-processor runs with.
"""

import os
import yaml
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, Any, List, Optional
from ebstpm.core.constants import DEFAULT_TPM_VERSION
from ebstpm.core.models.ami import FieldCopyMode
from ebstpm.utils.exceptions import ConfigurationError, ValidationRules
from ebstpm.utils.logger import setup_logger

logger = setup_logger(__name__, "config.log")

CONFIG_ENV_VAR = "EBSTPM_CONFIG"


@dataclass
class AccessConfig:
    """AWS credential and region settings used to build sessions."""

    region: Optional[str] = None
    profile: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    token: Optional[str] = None
    role_arn: Optional[str] = None
    role_session_name: str = "ebstpm"
    skip_credential_validation: bool = False

    @property
    def has_static_credentials(self) -> bool:
        return bool(self.access_key and self.secret_key)

    def validate(self) -> List[str]:
        errors = []
        if self.region and not ValidationRules.validate_region(self.region):
            errors.append(f"region '{self.region}' is not a valid AWS region")
        if bool(self.access_key) != bool(self.secret_key):
            errors.append("access_key and secret_key must be set together")
        return errors


@dataclass
class PostProcessorConfig:
    """Settings of one post-processor run. Read-only once validated."""

    uefi_data: str = ""
    tpm_version: str = ""
    ami_name: str = ""
    field_copy: str = FieldCopyMode.FULL.value
    access: AccessConfig = field(default_factory=AccessConfig)

    @property
    def copy_mode(self) -> FieldCopyMode:
        return FieldCopyMode(self.field_copy)

    def prepare(self) -> "PostProcessorConfig":
        """Apply defaults and validate; raises ConfigurationError listing every problem."""
        if not self.tpm_version:
            self.tpm_version = DEFAULT_TPM_VERSION

        errors = []
        if not self.uefi_data:
            errors.append("uefi_data is not set")
        if self.ami_name and not ValidationRules.validate_ami_name(self.ami_name):
            errors.append(
                f"ami_name '{self.ami_name}' must be 3-128 characters of letters, "
                "digits and ()[] ./-'@_"
            )
        if self.field_copy not in [mode.value for mode in FieldCopyMode]:
            errors.append(
                f"field_copy must be one of "
                f"{', '.join(mode.value for mode in FieldCopyMode)}, got '{self.field_copy}'"
            )
        errors.extend(self.access.validate())

        if errors:
            raise ConfigurationError(errors)
        return self

    def with_overrides(self, **overrides: Any) -> "PostProcessorConfig":
        """Return a copy with non-empty overrides applied; access keys go to AccessConfig."""
        access_names = {f.name for f in fields(AccessConfig)}
        own = {k: v for k, v in overrides.items() if v not in (None, "") and k not in access_names}
        access = {k: v for k, v in overrides.items() if v not in (None, "") and k in access_names}
        return replace(self, access=replace(self.access, **access), **own)


class ConfigManager:
    """
    Simple configuration manager.

    Features:
    - YAML configuration loading
    - Environment variable override support
    """

    def __init__(self, config_file: Optional[Path] = None, config_dir: Optional[Path] = None):
        """
        Initialize ConfigManager.

        Args:
            config_file: Explicit settings file (defaults to $EBSTPM_CONFIG)
            config_dir: Directory searched for settings.yml/settings.yaml (defaults to ./configs)
        """
        explicit = config_file or os.environ.get(CONFIG_ENV_VAR)
        self.config_dir = Path(config_dir) if config_dir else Path.cwd() / "configs"

        if explicit:
            self.settings_file = Path(explicit)
        else:
            # Try both .yml and .yaml extensions
            yml_file = self.config_dir / "settings.yml"
            yaml_file = self.config_dir / "settings.yaml"
            self.settings_file = yml_file if yml_file.exists() else yaml_file

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load a YAML file safely.
        """
        if not file_path.exists():
            logger.debug(f"Config file not found: {file_path}")
            return {}

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError([f"Error loading {file_path}: {e}"]) from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigurationError([f"{file_path} must contain a mapping at the top level"])
        return content

    def load_settings(self) -> Dict[str, Any]:
        """
        Load application settings.
        """
        return self._load_yaml_file(self.settings_file)

    def get_value(
        self, key_path: str, default: Any = None, env_var: Optional[str] = None
    ) -> Any:
        """
        Get configuration value with dot notation support and environment variable override.
        """
        if env_var and env_var in os.environ:
            return os.environ[env_var]

        keys = key_path.split(".")
        current = self.config

        try:
            for key in keys:
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def get_aws_region(self) -> Optional[str]:
        return self.get_value("aws.region", None, env_var="AWS_REGION")

    def get_access_config(self) -> AccessConfig:
        """Build AccessConfig from the aws section."""
        return AccessConfig(
            region=self.get_aws_region(),
            profile=self.get_value("aws.profile", None, env_var="AWS_PROFILE"),
            access_key=self.get_value("aws.access_key"),
            secret_key=self.get_value("aws.secret_key"),
            token=self.get_value("aws.token"),
            role_arn=self.get_value("aws.assume_role.role_arn"),
            role_session_name=self.get_value("aws.assume_role.session_name", "ebstpm"),
            skip_credential_validation=bool(
                self.get_value("aws.skip_credential_validation", False)
            ),
        )

    def get_post_processor_config(self, **overrides: Any) -> PostProcessorConfig:
        """Build PostProcessorConfig from the post_processor section.

        Non-empty keyword overrides (e.g. CLI flags) win over file and
        environment values. The result is not validated yet.
        """
        config = PostProcessorConfig(
            uefi_data=self.get_value("post_processor.uefi_data", "", env_var="EBSTPM_UEFI_DATA") or "",
            tpm_version=self.get_value("post_processor.tpm_version", "", env_var="EBSTPM_TPM_VERSION") or "",
            ami_name=self.get_value("post_processor.ami_name", "", env_var="EBSTPM_AMI_NAME") or "",
            field_copy=self.get_value("post_processor.field_copy", FieldCopyMode.FULL.value),
            access=self.get_access_config(),
        )
        return config.with_overrides(**overrides)

    @property
    def config(self) -> Dict[str, Any]:
        """Get the full configuration as a cached property."""
        if not hasattr(self, "_cached_config"):
            self._cached_config = self.load_settings()
        return self._cached_config

    def reload_config(self) -> None:
        """Force reload of configuration from file."""
        if hasattr(self, "_cached_config"):
            delattr(self, "_cached_config")
