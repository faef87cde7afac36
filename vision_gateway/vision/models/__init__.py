from .detection import (
    BoundingRect,
    DetectedObject,
    Detection,
    DetectionResult,
    ImageAnalysis,
    ImageTag,
    Point3D,
    Tag,
)

__all__ = [
    "Point3D",
    "Detection",
    "Tag",
    "DetectionResult",
    "BoundingRect",
    "DetectedObject",
    "ImageTag",
    "ImageAnalysis",
]
