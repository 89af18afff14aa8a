"""Tests for the PostProcessor gate."""

from unittest.mock import MagicMock

import pytest

from conftest import UEFI_DATA
from ebstpm.core.models import AmiArtifact, Artifact
from ebstpm.jobs.post_process import PostProcessor
from ebstpm.utils.config import AccessConfig, PostProcessorConfig
from ebstpm.utils.exceptions import ArtifactDestroyError, ConfigurationError, SessionError
from ebstpm.utils.ui import RecordingUi


@pytest.fixture
def processor(job_kwargs):
    processor = PostProcessor(**job_kwargs)
    processor.configure(
        PostProcessorConfig(
            uefi_data=UEFI_DATA,
            access=AccessConfig(skip_credential_validation=True),
        )
    )
    return processor


def ebs_artifact(artifact_id: str = "us-east-1:ami-111") -> MagicMock:
    artifact = MagicMock(spec=Artifact)
    artifact.builder_id = "mitchellh.amazonebs"
    artifact.artifact_id = artifact_id
    return artifact


class TestConfigure:
    """Tests for PostProcessor.configure."""

    def test_missing_uefi_data(self, job_kwargs):
        with pytest.raises(ConfigurationError, match="uefi_data is not set"):
            PostProcessor(**job_kwargs).configure(PostProcessorConfig())

    def test_defaults_applied(self, processor):
        assert processor.config.tpm_version == "v2.0"

    def test_post_process_requires_configure(self, job_kwargs):
        with pytest.raises(RuntimeError, match="configure"):
            PostProcessor(**job_kwargs).post_process(ebs_artifact(), RecordingUi())


class TestPostProcess:
    """Tests for PostProcessor.post_process."""

    def test_foreign_builder_is_skipped_without_calls(
        self, processor, session_manager, registry_factory
    ):
        artifact = Artifact(builder_id="packer.docker", artifact_id="localhost:5000/foo/bar")
        ui = RecordingUi()

        outcome = processor.post_process(artifact, ui)

        assert outcome.artifact is artifact
        assert outcome.keep is True
        assert outcome.force_override is True
        assert outcome.result is None
        assert ui.lines == [("say", "Skipping secureboot post-process.")]
        session_manager.get_session.assert_not_called()
        registry_factory.assert_not_called()

    def test_success_wraps_new_images(self, processor):
        artifact = ebs_artifact("us-east-1:ami-111,eu-west-1:ami-222")
        ui = RecordingUi()

        outcome = processor.post_process(artifact, ui)

        assert isinstance(outcome.artifact, AmiArtifact)
        assert outcome.artifact.builder_id == "packer.post-processor.ebstpm-secureboot"
        assert outcome.artifact.amis == outcome.result.images
        assert list(outcome.artifact.amis) == ["us-east-1", "eu-west-1"]
        assert outcome.artifact.state == {}
        assert outcome.keep is True
        assert outcome.force_override is False
        assert ui.lines[0] == ("say", "Creating secureboot images...")
        artifact.destroy.assert_called_once_with()

    def test_partial_success_still_produces_artifact(self, processor, registries):
        registries["eu-west-1"].fail("register_image")

        outcome = processor.post_process(
            ebs_artifact("us-east-1:ami-111,eu-west-1:ami-222"), RecordingUi()
        )

        assert list(outcome.artifact.amis) == ["us-east-1"]
        assert outcome.result.failed_regions == ["eu-west-1"]
        assert outcome.force_override is False

    def test_no_success_passes_original_through(self, processor, registries):
        registries["us-east-1"].images.clear()
        artifact = ebs_artifact()

        outcome = processor.post_process(artifact, RecordingUi())

        assert outcome.artifact is artifact
        assert outcome.keep is True
        assert outcome.force_override is True
        assert outcome.result.errors[0].error_type == "ImageNotFoundError"
        artifact.destroy.assert_not_called()

    def test_destroy_error_reported_not_raised(self, processor):
        artifact = ebs_artifact()
        artifact.destroy.side_effect = ArtifactDestroyError(["us-east-1:ami-111: denied"])
        ui = RecordingUi()

        outcome = processor.post_process(artifact, ui)

        assert isinstance(outcome.artifact, AmiArtifact)
        assert ui.errors == ["Error: us-east-1:ami-111: denied"]

    def test_host_destroy_failure_keeps_new_artifact(self, processor, registries):
        class HostArtifact(Artifact):
            def destroy(self):
                raise OSError("host could not deregister ami-111")

        ui = RecordingUi()

        outcome = processor.post_process(
            HostArtifact(builder_id="mitchellh.amazonebs", artifact_id="us-east-1:ami-111"),
            ui,
        )

        assert isinstance(outcome.artifact, AmiArtifact)
        assert outcome.artifact.amis["us-east-1"] in registries["us-east-1"].registered
        assert outcome.force_override is False
        assert ui.errors == ["Error: host could not deregister ami-111"]

    def test_session_error_propagates(self, processor, session_manager):
        session_manager.get_session.side_effect = SessionError("no credentials")

        with pytest.raises(SessionError):
            processor.post_process(ebs_artifact(), RecordingUi())

    def test_new_artifact_destroy_deregisters_new_images(self, processor, registries):
        outcome = processor.post_process(ebs_artifact(), RecordingUi())
        new_id = outcome.artifact.amis["us-east-1"]

        outcome.artifact.destroy()

        assert registries["us-east-1"].calls[-1] == ("deregister_image", new_id)
        assert new_id not in registries["us-east-1"].registered
