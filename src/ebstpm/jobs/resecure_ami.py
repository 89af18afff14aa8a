#!/usr/bin/env python3
"""
Resecure AMI Job

Re-registers source AMIs with UEFI boot mode, TPM support and UEFI data,
carrying over tags, shared launch permissions and the deprecation time.

The source image is deregistered before the new one is registered, so the
new image can reuse the source name. A failed registration therefore leaves
neither image behind.
"""

from typing import Dict, List, Any, Optional
from .base import BaseJob
from ebstpm.core.aws.registry import ImageRegistry
from ebstpm.core.constants import IMAGE_NOT_FOUND_CODES
from ebstpm.core.models.ami import SourceImage
from ebstpm.core.models.request import ResecureRequest, SourceImageRef
from ebstpm.core.models.result import ResecureResult
from ebstpm.core.processors.region_processor import RegionProcessor
from ebstpm.utils.exceptions import (
    ArtifactDestroyError,
    ConfigurationError,
    DeprecationPropagationError,
    DeregistrationError,
    ImageRegistryError,
    PermissionPropagationError,
    RegistrationError,
    TagPropagationError,
)
from ebstpm.utils.ui import Ui


class ResecureAMIJob(BaseJob):
    """Job to replace AMIs with TPM/secureboot-enabled registrations"""

    def __init__(self, config, **kwargs):
        super().__init__(config, job_name="resecure_ami", **kwargs)

    def resecure(self, request: ResecureRequest, ui: Optional[Ui] = None) -> ResecureResult:
        """
        Resecure every source image of the request, in order.

        Regions that fail are absent from result.images and listed in
        result.errors. Raises ConfigurationError before any call when
        uefi_data is empty, SessionError when sessions cannot be built.
        """
        if not request.uefi_data:
            raise ConfigurationError(["uefi_data is not set"])

        if not request.source_images:
            self.logger.info(f"[{self.correlation_id}] No source images to resecure")
            return ResecureResult()

        self.prepare_registries(request.regions)

        processor = RegionProcessor(name=f"{self.job_name}_processor", ui=ui)
        return processor.process_images(
            request.source_images,
            lambda source: self.execute(source, request, ui),
            operation_name=self.job_name,
            correlation_id=self.correlation_id,
        )

    def execute(
        self, source: SourceImageRef, request: ResecureRequest, ui: Optional[Ui] = None
    ) -> Dict[str, Any]:
        """
        Run the re-registration sequence for one source image.

        Returns a success dict with the new image id and any warnings;
        region-fatal failures raise.
        """
        registry = self.registry_for(source.region)
        warnings: List[str] = []

        image = self._capture_source_image(registry, source)
        params = image.to_register_params(
            tpm_version=request.tpm_version,
            uefi_data=request.uefi_data,
            name=request.ami_name,
            copy_mode=request.copy_mode,
        )

        try:
            registry.deregister_image(image.image_id)
            self._say(ui, f"Deregistered AMI {image.image_id} at {source.region}")
        except ImageRegistryError as e:
            warning = str(DeregistrationError(f"Failed to deregister {source}: {e}"))
            self.logger.warning(f"[{self.correlation_id}] {warning}")
            self._error(ui, warning)
            warnings.append(warning)

        try:
            new_image_id = registry.register_image(params)
        except ImageRegistryError as e:
            self.logger.error(
                f"[{self.correlation_id}] Registration of {params['Name']} failed after "
                f"{source} was deregistered; no image remains for {source.region}: {e}"
            )
            raise RegistrationError(
                f"Failed to register secureboot image for {source} "
                f"(source image is already deregistered): {e}"
            ) from e
        self.logger.info(f"[{self.correlation_id}] Registered new AMI ID: {new_image_id}")
        self._say(ui, f"Registered secureboot AMI {new_image_id} at {source.region}")

        warning = self._copy_tags(registry, image, new_image_id)
        if warning:
            self._error(ui, warning)
            warnings.append(warning)

        self._copy_launch_permissions(registry, image, new_image_id)
        self._copy_deprecation_time(registry, image, new_image_id)

        return {
            "status": "success",
            "region": source.region,
            "source_image_id": image.image_id,
            "image_id": new_image_id,
            "name": params["Name"],
            "warnings": warnings,
        }

    def deregister_images(self, amis: Dict[str, str]) -> None:
        """Deregister region -> AMI pairs; images already gone are skipped.

        Raises ArtifactDestroyError listing every other failure.
        """
        errors = []
        for region, image_id in amis.items():
            try:
                self.registry_for(region).deregister_image(image_id)
            except ImageRegistryError as e:
                if e.code in IMAGE_NOT_FOUND_CODES:
                    self.logger.debug(f"[{self.correlation_id}] {region}:{image_id} already gone")
                    continue
                errors.append(f"{region}:{image_id}: {e}")
        if errors:
            raise ArtifactDestroyError(errors)

    def _capture_source_image(
        self, registry: ImageRegistry, source: SourceImageRef
    ) -> SourceImage:
        """Describe the source image and its launch permissions once."""
        description = registry.describe_image(source.image_id)
        permissions = registry.describe_launch_permissions(
            description.get("ImageId", source.image_id)
        )
        return SourceImage.from_aws_image(description, launch_permissions=permissions)

    def _copy_tags(
        self, registry: ImageRegistry, image: SourceImage, new_image_id: str
    ) -> Optional[str]:
        """Copy tags; returns a warning instead of raising."""
        if not image.tags:
            return None
        try:
            registry.create_tags(new_image_id, image.tag_list)
        except ImageRegistryError as e:
            warning = str(
                TagPropagationError(f"Failed to copy tags from {image.image_id} to {new_image_id}: {e}")
            )
            self.logger.warning(f"[{self.correlation_id}] {warning}")
            return warning
        return None

    def _copy_launch_permissions(
        self, registry: ImageRegistry, image: SourceImage, new_image_id: str
    ) -> None:
        if not image.is_shared:
            return
        try:
            registry.add_launch_permissions(new_image_id, image.launch_permissions)
        except ImageRegistryError as e:
            raise PermissionPropagationError(
                f"Failed to copy launch permissions from {image.image_id} to {new_image_id}: {e}"
            ) from e
        self.logger.info(
            f"[{self.correlation_id}] Copied permissions from {image.image_id} to {new_image_id}"
        )

    def _copy_deprecation_time(
        self, registry: ImageRegistry, image: SourceImage, new_image_id: str
    ) -> None:
        if image.deprecation_time is None:
            return
        try:
            deprecate_at = image.parse_deprecation_time()
        except ValueError as e:
            raise DeprecationPropagationError(
                f"Invalid deprecation time {image.deprecation_time!r} on {image.image_id}: {e}"
            ) from e
        try:
            registry.enable_image_deprecation(new_image_id, deprecate_at)
        except ImageRegistryError as e:
            raise DeprecationPropagationError(
                f"Failed to set deprecation time on {new_image_id}: {e}"
            ) from e
        self.logger.info(
            f"[{self.correlation_id}] Deprecation of {new_image_id} set to {deprecate_at.isoformat()}"
        )

    @staticmethod
    def _say(ui: Optional[Ui], message: str) -> None:
        if ui is not None:
            ui.say(message)

    @staticmethod
    def _error(ui: Optional[Ui], message: str) -> None:
        if ui is not None:
            ui.error(message)
