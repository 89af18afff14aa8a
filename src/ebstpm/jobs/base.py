"""Base job class for image operations."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Optional
import boto3
import uuid
from ebstpm.core.aws.ec2 import create_image_registry
from ebstpm.core.aws.registry import ImageRegistry
from ebstpm.utils.config import PostProcessorConfig
from ebstpm.utils.logger import setup_logger
from ebstpm.utils.session import SessionManager

RegistryFactory = Callable[[boto3.Session, str], ImageRegistry]


class BaseJob(ABC):
    """Base class for jobs that work on per-region image registries."""

    def __init__(
        self,
        config: PostProcessorConfig,
        job_name: Optional[str] = None,
        session_manager=SessionManager,
        registry_factory: RegistryFactory = create_image_registry,
    ):
        """Initialize the job with a prepared configuration."""
        self.config = config
        self.job_name = job_name or self.__class__.__name__.lower().replace("job", "")
        self.session_manager = session_manager
        self.registry_factory = registry_factory
        self.correlation_id = str(uuid.uuid4())[:8]  # Short correlation ID for tracking
        self._registries: Dict[str, ImageRegistry] = {}

        self.logger = setup_logger(
            name=self.__class__.__module__,
            log_file=f"{self.job_name}.log",
        )

    def create_aws_session(self) -> boto3.Session:
        """Create the AWS session every regional client is derived from."""
        access = self.config.access
        self.logger.info(
            f"[{self.correlation_id}] Creating AWS session"
            + (f" with role {access.role_arn}" if access.role_arn else "")
            + (f" using profile {access.profile}" if access.profile else "")
        )
        return self.session_manager.get_session(access)

    def prepare_registries(self, regions: Iterable[str]) -> Dict[str, ImageRegistry]:
        """Build one registry per distinct region; any failure aborts before work starts."""
        regions = list(dict.fromkeys(regions))
        if not regions:
            return {}

        session = self.create_aws_session()
        for region in regions:
            if region not in self._registries:
                self.logger.debug(f"[{self.correlation_id}] Creating image registry for {region}")
                self._registries[region] = self.registry_factory(session, region)
        return {region: self._registries[region] for region in regions}

    def registry_for(self, region: str) -> ImageRegistry:
        """Registry prepared for a region, creating it on first use."""
        if region not in self._registries:
            self.prepare_registries([region])
        return self._registries[region]

    @abstractmethod
    def execute(self, *args, **kwargs) -> Any:
        """Execute the job with given parameters."""
        pass
