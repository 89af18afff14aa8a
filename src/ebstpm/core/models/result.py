"""Result models for resecure runs."""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional


@dataclass
class RegionError:
    """A source image whose region produced no new image."""
    region: str
    image_id: str
    error_type: str
    message: str

    def __str__(self) -> str:
        return f"{self.region}:{self.image_id}: {self.error_type}: {self.message}"


@dataclass
class ResecureResult:
    """New image ids per region plus the failures met on the way."""

    images: Dict[str, str] = field(default_factory=dict)
    errors: List[RegionError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    processed: int = 0
    total: int = 0
    execution_time: float = 0.0
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @property
    def success_rate(self) -> float:
        if self.total > 0:
            return (self.processed / self.total) * 100
        return 0.0

    @property
    def failed_regions(self) -> List[str]:
        return [e.region for e in self.errors]

    def __bool__(self) -> bool:
        return bool(self.images)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for serialization."""
        return {
            "images": dict(self.images),
            "processed": self.processed,
            "total": self.total,
            "success_rate": f"{self.success_rate:.2f}%",
            "execution_time": f"{self.execution_time:.2f}s",
            "start_time": self.start_time,
            "end_time": self.end_time,
            "errors_count": len(self.errors),
            "errors": [str(e) for e in self.errors],
            "warnings": list(self.warnings),
        }
