"""Build artifacts passed between the build host and the post-processor."""

from dataclasses import dataclass, field
from typing import Callable, Dict, Any, Optional

from ebstpm.core.constants import ARTIFACT_SEPARATOR, BUILDER_ID, REGION_SEPARATOR


@dataclass
class Artifact:
    """Opaque artifact as handed over by the build host."""
    builder_id: str
    artifact_id: str
    state: Dict[str, Any] = field(default_factory=dict)

    def destroy(self) -> None:
        """Release whatever the artifact holds. Host artifacts hold nothing here."""
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"builder_id": self.builder_id, "id": self.artifact_id}


@dataclass
class AmiArtifact(Artifact):
    """Artifact wrapping a region -> AMI id map."""
    builder_id: str = BUILDER_ID
    artifact_id: str = ""
    amis: Dict[str, str] = field(default_factory=dict)
    destroyer: Optional[Callable[[Dict[str, str]], None]] = field(
        default=None, repr=False, compare=False
    )

    def __post_init__(self):
        self.artifact_id = ARTIFACT_SEPARATOR.join(
            f"{region}{REGION_SEPARATOR}{ami}" for region, ami in sorted(self.amis.items())
        )

    def __str__(self) -> str:
        lines = ["AMIs were created:"]
        lines.extend(f"{region}: {ami}" for region, ami in sorted(self.amis.items()))
        return "\n".join(lines) + "\n"

    def destroy(self) -> None:
        """Deregister every AMI of this artifact; a no-op without a destroyer."""
        if self.destroyer is not None:
            self.destroyer(dict(self.amis))

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["amis"] = dict(self.amis)
        return data
