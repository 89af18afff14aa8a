"""Secureboot post-processor: the entry point a build host calls."""

from dataclasses import dataclass
from typing import Optional
from ebstpm.core.constants import BUILDER_ID, SOURCE_BUILDER_ID
from ebstpm.core.models.artifact import AmiArtifact, Artifact
from ebstpm.core.models.request import ResecureRequest
from ebstpm.core.models.result import ResecureResult
from ebstpm.jobs.resecure_ami import ResecureAMIJob
from ebstpm.utils.config import PostProcessorConfig
from ebstpm.utils.logger import setup_logger
from ebstpm.utils.ui import Ui

logger = setup_logger(__name__, "post_processor.log")


@dataclass
class PostProcessResult:
    """What the build host gets back from post_process."""
    artifact: Artifact
    keep: bool
    force_override: bool
    result: Optional[ResecureResult] = None


class PostProcessor:
    """Turns amazon-ebs artifacts into TPM/secureboot-enabled AMIs."""

    def __init__(self, job_class=ResecureAMIJob, **job_kwargs):
        self.job_class = job_class
        self.job_kwargs = job_kwargs
        self.config: Optional[PostProcessorConfig] = None

    def configure(self, config: PostProcessorConfig) -> None:
        """Apply defaults and validate; raises ConfigurationError."""
        self.config = config.prepare()
        logger.debug(
            f"Configured with tpm_version={self.config.tpm_version} "
            f"field_copy={self.config.field_copy} ami_name={self.config.ami_name or '<source name>'}"
        )

    def post_process(self, artifact: Artifact, ui: Ui) -> PostProcessResult:
        """Resecure the AMIs of an amazon-ebs artifact.

        Artifacts from other builders pass through untouched. When no region
        succeeds the original artifact is kept as is.
        """
        if self.config is None:
            raise RuntimeError("post_process called before configure")

        if artifact.builder_id != SOURCE_BUILDER_ID:
            ui.say("Skipping secureboot post-process.")
            return PostProcessResult(artifact=artifact, keep=True, force_override=True)

        ui.say("Creating secureboot images...")
        job = self.job_class(self.config, **self.job_kwargs)
        request = ResecureRequest.from_artifact_id(artifact.artifact_id, self.config)
        result = job.resecure(request, ui)

        if not result.images:
            logger.info(f"No secureboot images created for {artifact.artifact_id}")
            return PostProcessResult(
                artifact=artifact, keep=True, force_override=True, result=result
            )

        new_artifact = AmiArtifact(
            builder_id=BUILDER_ID,
            amis=dict(result.images),
            destroyer=job.deregister_images,
        )
        # Destroy failures on the host's artifact are reported, never raised.
        try:
            artifact.destroy()
        except Exception as e:
            logger.error(f"Failed to destroy original artifact {artifact.artifact_id}: {e}")
            ui.error(f"Error: {e}")

        return PostProcessResult(
            artifact=new_artifact, keep=True, force_override=False, result=result
        )
