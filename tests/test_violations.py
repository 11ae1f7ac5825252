"""
Tests for proctoring violation assessment.
"""

from analytics.violations import (
    MULTIPLE_PEOPLE,
    assess_violations,
    highest_severity,
    severity_for,
)
from models.detection import BoundingBox, Detection


def det(class_name, class_id=0, confidence=0.8):
    return Detection(class_id=class_id, class_name=class_name, confidence=confidence,
                     bbox=BoundingBox(cx=50, cy=50, width=20, height=20))


class TestAssessViolations:
    def test_no_detections(self):
        assert assess_violations([]) == []

    def test_single_person_is_not_a_violation(self):
        assert assess_violations([det("person")]) == []

    def test_multiple_people(self):
        people = [det("person"), det("person", confidence=0.6), det("person", confidence=0.7)]

        violations = assess_violations(people, frame_id="7", timestamp=1.5)

        assert len(violations) == 1
        v = violations[0]
        assert v.type == MULTIPLE_PEOPLE
        assert v.severity == "high"
        assert v.description == "AI detected 3 people in frame"
        assert v.detections == people
        assert v.frame_id == "7"
        assert v.timestamp == 1.5

    def test_phone_is_high_severity(self):
        violations = assess_violations([det("person"), det("cell phone", 67, 0.915)])

        assert len(violations) == 1
        assert violations[0].type == "cell phone detected"
        assert violations[0].severity == "high"
        assert violations[0].description == "AI detected: cell phone (confidence: 91.5%)"

    def test_other_relevant_objects_are_medium(self):
        violations = assess_violations([det("cup", 41), det("remote", 65)])

        assert [v.severity for v in violations] == ["medium", "medium"]

    def test_to_dict(self):
        d = assess_violations([det("book", 73)], frame_id="b")[0].to_dict()

        assert d["type"] == "book detected"
        assert d["severity"] == "high"
        assert d["frame_id"] == "b"
        assert d["detections"][0]["class_name"] == "book"


class TestSeverity:
    def test_severity_for(self):
        assert severity_for("laptop") == "high"
        assert severity_for("book") == "high"
        assert severity_for("bottle") == "medium"

    def test_highest_severity(self):
        assert highest_severity([]) is None
        assert highest_severity(assess_violations([det("cup")])) == "medium"
        assert highest_severity(assess_violations([det("cup"), det("laptop")])) == "high"
