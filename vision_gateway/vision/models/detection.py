"""
Detection Models

Immutable result types produced by a successful remote analysis call, plus
the wire models used to parse the Azure Computer Vision ``analyze`` payload.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Point3D(BaseModel):
    """Location of a detection in label space (z is 0 for 2D detections)."""

    model_config = {"frozen": True}

    x: float
    y: float
    z: float = 0.0

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


class Detection(BaseModel):
    """A single labelled object."""

    model_config = {"frozen": True}

    label: str = Field(..., min_length=1, description="Object name")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Detection confidence")
    location: Point3D = Field(..., description="Where to anchor the label")


class Tag(BaseModel):
    """Image-level tag (the "tags" feature category)."""

    model_config = {"frozen": True}

    name: str = Field(..., min_length=1)
    confidence: float = Field(..., ge=0.0, le=1.0)


class DetectionResult(BaseModel):
    """
    Ordered detections for one image plus a creation timestamp.

    Immutable once built; the same instance is handed to the display sink on
    both the remote and the cache-hit paths.
    """

    model_config = {"frozen": True}

    detections: tuple[Detection, ...] = Field(default_factory=tuple)
    tags: tuple[Tag, ...] = Field(default_factory=tuple)
    created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def of(cls, *detections: tuple[str, float, tuple[float, float, float]]) -> "DetectionResult":
        """
        Build a result from ``(label, confidence, (x, y, z))`` tuples.

        Example:
            DetectionResult.of(("cup", 0.92, (10, 20, 0)))
        """
        return cls(
            detections=tuple(
                Detection(label=label, confidence=confidence, location=Point3D(x=x, y=y, z=z))
                for label, confidence, (x, y, z) in detections
            )
        )

    @classmethod
    def from_analysis(cls, analysis: "ImageAnalysis") -> "DetectionResult":
        """Convert a service payload: each object anchors at its rectangle's top-left corner."""
        return cls(
            detections=tuple(
                Detection(
                    label=obj.object,
                    confidence=obj.confidence,
                    location=Point3D(x=obj.rectangle.x, y=obj.rectangle.y, z=0.0),
                )
                for obj in analysis.objects
            ),
            tags=tuple(Tag(name=tag.name, confidence=tag.confidence) for tag in analysis.tags),
        )

    @property
    def labels(self) -> list[str]:
        return [detection.label for detection in self.detections]

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


# ============================================================================
# Azure Computer Vision wire models (v3.2 analyze response)
# ============================================================================


class BoundingRect(BaseModel):
    x: int
    y: int
    w: int
    h: int


class DetectedObject(BaseModel):
    object: str
    confidence: float
    rectangle: BoundingRect


class ImageTag(BaseModel):
    name: str
    confidence: float


class ImageAnalysis(BaseModel):
    """Subset of the ``analyze`` response this gateway consumes."""

    model_config = {"extra": "ignore"}

    objects: list[DetectedObject] = Field(default_factory=list)
    tags: list[ImageTag] = Field(default_factory=list)
    request_id: str | None = Field(default=None, alias="requestId")
