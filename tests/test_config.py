"""Tests for configuration loading and validation."""

import pytest

from ebstpm.utils.config import AccessConfig, ConfigManager, PostProcessorConfig
from ebstpm.utils.exceptions import ConfigurationError, ValidationRules


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "EBSTPM_CONFIG",
        "EBSTPM_UEFI_DATA",
        "EBSTPM_AMI_NAME",
        "EBSTPM_TPM_VERSION",
        "AWS_REGION",
        "AWS_PROFILE",
    ):
        monkeypatch.delenv(name, raising=False)


class TestPostProcessorConfig:
    """Tests for PostProcessorConfig.prepare."""

    def test_missing_uefi_data(self):
        with pytest.raises(ConfigurationError) as exc_info:
            PostProcessorConfig().prepare()

        assert exc_info.value.errors == ["uefi_data is not set"]
        assert str(exc_info.value) == "uefi_data is not set"

    def test_tpm_version_defaults(self):
        config = PostProcessorConfig(uefi_data="ZGF0YQ==").prepare()

        assert config.tpm_version == "v2.0"

    def test_explicit_tpm_version_kept(self):
        config = PostProcessorConfig(uefi_data="ZGF0YQ==", tpm_version="v3.0").prepare()

        assert config.tpm_version == "v3.0"

    def test_all_errors_collected(self):
        config = PostProcessorConfig(
            ami_name="x",
            field_copy="partial",
            access=AccessConfig(region="moon-1", access_key="AKIA"),
        )

        with pytest.raises(ConfigurationError) as exc_info:
            config.prepare()

        errors = exc_info.value.errors
        assert len(errors) == 5
        assert errors[0] == "uefi_data is not set"
        assert any("ami_name 'x'" in e for e in errors)
        assert any("field_copy" in e for e in errors)
        assert any("moon-1" in e for e in errors)
        assert any("access_key and secret_key" in e for e in errors)
        assert str(exc_info.value).startswith("5 error(s) occurred:")

    def test_with_overrides_ignores_empty_values(self):
        config = PostProcessorConfig(uefi_data="file-data", ami_name="from-file")

        merged = config.with_overrides(
            uefi_data="cli-data", ami_name=None, tpm_version="", region="eu-west-1"
        )

        assert merged.uefi_data == "cli-data"
        assert merged.ami_name == "from-file"
        assert merged.tpm_version == ""
        assert merged.access.region == "eu-west-1"
        assert config.access.region is None


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_reads_settings_file(self, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text(
            "aws:\n"
            "  region: eu-west-1\n"
            "  profile: build\n"
            "  assume_role:\n"
            "    role_arn: arn:aws:iam::123456789012:role/builder\n"
            "post_processor:\n"
            "  uefi_data: ZGF0YQ==\n"
            "  ami_name: golden-2024\n"
            "  field_copy: reduced\n"
        )

        config = ConfigManager(config_file=settings).get_post_processor_config().prepare()

        assert config.uefi_data == "ZGF0YQ=="
        assert config.ami_name == "golden-2024"
        assert config.field_copy == "reduced"
        assert config.tpm_version == "v2.0"
        assert config.access.region == "eu-west-1"
        assert config.access.profile == "build"
        assert config.access.role_arn == "arn:aws:iam::123456789012:role/builder"
        assert config.access.role_session_name == "ebstpm"

    def test_settings_dir_lookup(self, tmp_path):
        (tmp_path / "settings.yml").write_text("post_processor:\n  tpm_version: v2.0\n")

        manager = ConfigManager(config_dir=tmp_path)

        assert manager.settings_file == tmp_path / "settings.yml"
        assert manager.get_value("post_processor.tpm_version") == "v2.0"

    def test_missing_file_gives_defaults(self, tmp_path):
        manager = ConfigManager(config_file=tmp_path / "absent.yaml")

        assert manager.config == {}
        assert manager.get_value("aws.region", "us-east-1") == "us-east-1"

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        settings = tmp_path / "settings.yaml"
        settings.write_text("post_processor:\n  uefi_data: from-file\n")
        monkeypatch.setenv("EBSTPM_UEFI_DATA", "from-env")
        monkeypatch.setenv("AWS_REGION", "ap-southeast-2")

        config = ConfigManager(config_file=settings).get_post_processor_config()

        assert config.uefi_data == "from-env"
        assert config.access.region == "ap-southeast-2"

    def test_cli_overrides_win(self, tmp_path, monkeypatch):
        monkeypatch.setenv("EBSTPM_UEFI_DATA", "from-env")

        config = ConfigManager(config_file=tmp_path / "absent.yaml").get_post_processor_config(
            uefi_data="from-cli", profile="ops"
        )

        assert config.uefi_data == "from-cli"
        assert config.access.profile == "ops"

    def test_config_env_var_selects_file(self, tmp_path, monkeypatch):
        settings = tmp_path / "custom.yaml"
        settings.write_text("post_processor:\n  ami_name: from-env-file\n")
        monkeypatch.setenv("EBSTPM_CONFIG", str(settings))

        assert ConfigManager().get_post_processor_config().ami_name == "from-env-file"

    def test_invalid_yaml(self, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text("post_processor: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Error loading"):
            ConfigManager(config_file=settings).load_settings()

    def test_non_mapping_yaml(self, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            ConfigManager(config_file=settings).load_settings()

    def test_reload_config(self, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text("post_processor:\n  ami_name: first\n")
        manager = ConfigManager(config_file=settings)
        assert manager.get_value("post_processor.ami_name") == "first"

        settings.write_text("post_processor:\n  ami_name: second\n")
        assert manager.get_value("post_processor.ami_name") == "first"

        manager.reload_config()
        assert manager.get_value("post_processor.ami_name") == "second"


class TestValidationRules:
    """Tests for ValidationRules."""

    @pytest.mark.parametrize(
        "region,expected",
        [
            ("us-east-1", True),
            ("ap-southeast-2", True),
            ("us-gov-west-1", True),
            ("moon-1", False),
        ],
    )
    def test_validate_region(self, region, expected):
        assert ValidationRules.validate_region(region) is expected

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("golden-2024", True),
            ("my image (v1) [x]", True),
            ("ab", False),
            ("bad*name", False),
        ],
    )
    def test_validate_ami_name(self, name, expected):
        assert ValidationRules.validate_ami_name(name) is expected
