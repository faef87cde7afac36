"""
Unit Tests for detection result models.
"""

import pytest
from pydantic import ValidationError

from tests.test_fixtures import ANALYZE_PAYLOAD
from vision_gateway.vision.models.detection import (
    Detection,
    DetectionResult,
    ImageAnalysis,
    Point3D,
)


@pytest.mark.unit
class TestDetectionResult:
    def test_of(self):
        result = DetectionResult.of(("cup", 0.92, (10, 20, 0)))

        assert result.labels == ["cup"]
        assert result.detections[0].confidence == 0.92
        assert result.detections[0].location.as_tuple() == (10.0, 20.0, 0.0)

    def test_empty_result_is_valid(self):
        result = DetectionResult()
        assert result.detections == ()
        assert result.labels == []

    def test_frozen(self, sample_result):
        with pytest.raises(ValidationError):
            sample_result.detections = ()

    @pytest.mark.parametrize("confidence", [-0.1, 1.1])
    def test_confidence_bounds(self, confidence):
        with pytest.raises(ValidationError):
            Detection(label="cup", confidence=confidence, location=Point3D(x=0, y=0))

    def test_blank_label_rejected(self):
        with pytest.raises(ValidationError):
            Detection(label="", confidence=0.5, location=Point3D(x=0, y=0))

    def test_from_analysis(self):
        analysis = ImageAnalysis.model_validate(ANALYZE_PAYLOAD)

        result = DetectionResult.from_analysis(analysis)

        assert analysis.request_id == "5a2a8b4f-4f2c-4b7e-9d1e-7f3a1c9e0b11"
        assert result.labels == ["cup", "laptop"]
        assert result.detections[1].location == Point3D(x=200, y=40, z=0)
        assert [tag.name for tag in result.tags] == ["indoor", "table"]

    def test_to_dict_is_json_ready(self, sample_result):
        data = sample_result.to_dict()

        assert data["detections"][0]["label"] == "cup"
        assert isinstance(data["created_at"], str)


@pytest.mark.unit
class TestImageAnalysis:
    def test_missing_sections_default_empty(self):
        analysis = ImageAnalysis.model_validate({"requestId": "r"})
        assert analysis.objects == []
        assert analysis.tags == []

    def test_malformed_object_rejected(self):
        with pytest.raises(ValidationError):
            ImageAnalysis.model_validate({"objects": [{"object": "cup"}]})
