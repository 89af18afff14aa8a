#!/usr/bin/env python3
"""Region processor walking source images one at a time, in input order."""

import time
from typing import Callable, Dict, List, Any, Optional
from ebstpm.core.constants import SCAN_TIME_FORMAT
from ebstpm.core.models.request import SourceImageRef
from ebstpm.core.models.result import RegionError, ResecureResult
from ebstpm.utils.exceptions import SessionError
from ebstpm.utils.logger import setup_logger
from ebstpm.utils.ui import Ui


class RegionProcessor:
    """Sequential per-image processor that isolates failures by region."""

    def __init__(self, name: str = "region_processor", ui: Optional[Ui] = None):
        """Initialize the region processor.

        Args:
            name: Name of the processor instance
            ui: Status sink that receives per-region errors
        """
        self.name = name
        self.ui = ui
        self.logger = setup_logger(__name__, "region_processor.log")

    def process_images(
        self,
        sources: List[SourceImageRef],
        process_function: Callable[[SourceImageRef], Dict[str, Any]],
        operation_name: str = "unknown",
        correlation_id: Optional[str] = None,
    ) -> ResecureResult:
        """Process source images with the given function.

        The function returns {"status": "success", "image_id": ..., "warnings": [...]}
        or raises. A raised error drops that region from the result and is
        recorded in result.errors; SessionError aborts the whole run.

        Args:
            sources: Source images in input order
            process_function: Function executed for each source image
            operation_name: Name of the operation for logging
            correlation_id: Correlation ID for tracking operations across logs
        """
        start_time = time.time()
        correlation_prefix = f"[{correlation_id}] " if correlation_id else ""
        self.logger.info(
            f"{correlation_prefix}Starting {operation_name} operation on {len(sources)} image(s)"
        )

        result = ResecureResult(
            total=len(sources),
            start_time=time.strftime(SCAN_TIME_FORMAT, time.gmtime(start_time)),
        )

        for i, source in enumerate(sources, 1):
            try:
                self.logger.debug(
                    f"{correlation_prefix}Processing image {i}/{len(sources)}: {source}"
                )
                outcome = process_function(source)
                result.warnings.extend(outcome.get("warnings", []))

                if outcome.get("status") == "success" and outcome.get("image_id"):
                    result.images[source.region] = outcome["image_id"]
                    result.processed += 1
                    self.logger.info(
                        f"{correlation_prefix}Successfully processed {source} -> {outcome['image_id']}"
                    )
                else:
                    self._record_error(
                        result,
                        source,
                        "UnsuccessfulResult",
                        outcome.get("message", "processing returned no image"),
                        correlation_prefix,
                    )

            except SessionError:
                raise
            except Exception as e:
                self.logger.error(
                    f"{correlation_prefix}Error processing {source}: {e}", exc_info=True
                )
                self._record_error(result, source, type(e).__name__, str(e), correlation_prefix)

        end_time = time.time()
        result.end_time = time.strftime(SCAN_TIME_FORMAT, time.gmtime(end_time))
        result.execution_time = end_time - start_time

        self.logger.info(
            f"{correlation_prefix}Completed {operation_name}: {result.processed}/{result.total} image(s) processed "
            f"({result.success_rate:.1f}% success rate) in {result.execution_time:.2f}s"
        )
        if result.images:
            self.logger.info(
                f"{correlation_prefix}Successful regions ({len(result.images)}): {', '.join(result.images)}"
            )
        if result.errors:
            self.logger.info(
                f"{correlation_prefix}Failed regions ({len(result.errors)}): {', '.join(result.failed_regions)}"
            )

        return result

    def _record_error(
        self,
        result: ResecureResult,
        source: SourceImageRef,
        error_type: str,
        message: str,
        correlation_prefix: str = "",
    ) -> None:
        result.errors.append(
            RegionError(
                region=source.region,
                image_id=source.image_id,
                error_type=error_type,
                message=message,
            )
        )
        self.logger.warning(f"{correlation_prefix}No secureboot image for {source}: {message}")
        if self.ui is not None:
            self.ui.error(f"Error creating image: {message}")

