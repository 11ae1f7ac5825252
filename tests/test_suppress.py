"""
Tests for IoU and non-maximum suppression.
"""

import random

import pytest

from models.detection import BoundingBox, Detection
from pipeline.stages.suppress import iou, suppress


def det(cx, cy, w, h, confidence, class_id=0, class_name="person"):
    return Detection(
        class_id=class_id,
        class_name=class_name,
        confidence=confidence,
        bbox=BoundingBox(cx=cx, cy=cy, width=w, height=h),
    )


class TestIoU:
    def test_identical_boxes(self):
        box = BoundingBox(cx=150, cy=150, width=100, height=100)
        assert iou(box, box) == 1.0

    def test_identical_boxes_fractional(self):
        box = BoundingBox(cx=123.37, cy=77.1, width=33.3, height=0.7)
        assert iou(box, box) == 1.0

    def test_no_overlap(self):
        a = BoundingBox(cx=25, cy=25, width=50, height=50)
        b = BoundingBox(cx=125, cy=125, width=50, height=50)
        assert iou(a, b) == 0.0

    def test_touching_edges(self):
        a = BoundingBox(cx=50, cy=50, width=100, height=100)
        b = BoundingBox(cx=150, cy=50, width=100, height=100)
        assert iou(a, b) == 0.0

    def test_partial_overlap(self):
        # Intersection: 50x100 = 5000, union: 15000
        a = BoundingBox(cx=50, cy=50, width=100, height=100)
        b = BoundingBox(cx=100, cy=50, width=100, height=100)
        assert iou(a, b) == pytest.approx(1 / 3)

    def test_uses_center_convention(self):
        # As corner+size these would be (0,0)-(100,100) and (50,50)-(150,150);
        # as centers they are offset by 50 in both axes from the same point.
        a = BoundingBox(cx=0, cy=0, width=100, height=100)
        b = BoundingBox(cx=50, cy=50, width=100, height=100)
        assert iou(a, b) == pytest.approx(2500 / 17500)

    def test_contained_box(self):
        outer = BoundingBox(cx=50, cy=50, width=100, height=100)
        inner = BoundingBox(cx=50, cy=50, width=50, height=50)
        assert iou(outer, inner) == pytest.approx(0.25)

    def test_zero_area_box(self):
        flat = BoundingBox(cx=50, cy=50, width=0, height=10)
        assert iou(flat, flat) == 0.0

    def test_symmetric(self):
        rng = random.Random(3)
        for _ in range(200):
            a = BoundingBox(rng.uniform(0, 640), rng.uniform(0, 640), rng.uniform(1, 200), rng.uniform(1, 200))
            b = BoundingBox(rng.uniform(0, 640), rng.uniform(0, 640), rng.uniform(1, 200), rng.uniform(1, 200))
            assert iou(a, b) == iou(b, a)
            assert iou(a, a) == 1.0
            assert 0.0 <= iou(a, b) <= 1.0


class TestSuppress:
    def test_overlapping_keeps_higher_confidence(self):
        # Offset of 25 on 100x100 boxes gives IoU 7500 / 12500 = 0.6
        low = det(75, 50, 100, 100, 0.8)
        high = det(50, 50, 100, 100, 0.9)
        assert iou(low.bbox, high.bbox) == pytest.approx(0.6)

        kept = suppress([low, high], 0.4)

        assert kept == [high]

    def test_overlap_below_threshold_keeps_both(self):
        a = det(75, 50, 100, 100, 0.8)
        b = det(50, 50, 100, 100, 0.9)
        kept = suppress([a, b], 0.7)
        assert kept == [b, a]

    def test_iou_equal_to_threshold_is_suppressed(self):
        a = det(50, 50, 100, 100, 0.9)
        b = det(100, 50, 100, 100, 0.8)  # IoU 1/3
        assert suppress([a, b], iou(a.bbox, b.bbox)) == [a]

    def test_sorted_by_confidence(self):
        a = det(10, 10, 5, 5, 0.6)
        b = det(100, 100, 5, 5, 0.95)
        c = det(300, 300, 5, 5, 0.7)
        assert suppress([a, b, c], 0.4) == [b, c, a]

    def test_ties_preserve_input_order(self):
        first = det(50, 50, 100, 100, 0.8, class_id=67, class_name="cell phone")
        second = det(50, 50, 100, 100, 0.8, class_id=73, class_name="book")
        assert suppress([first, second], 0.4) == [first]
        assert suppress([second, first], 0.4) == [second]

    def test_compares_against_kept_only(self):
        # b overlaps a and is removed; c overlaps b but not a, so it survives.
        a = det(50, 50, 100, 100, 0.9)
        b = det(120, 50, 100, 100, 0.8)
        c = det(190, 50, 100, 100, 0.7)
        assert suppress([a, b, c], 0.1) == [a, c]

    def test_empty(self):
        assert suppress([], 0.4) == []

    def test_survivors_below_threshold(self):
        rng = random.Random(11)
        detections = [
            det(rng.uniform(0, 300), rng.uniform(0, 300), rng.uniform(20, 120), rng.uniform(20, 120),
                rng.uniform(0.5, 1.0))
            for _ in range(150)
        ]
        for threshold in (0.1, 0.4, 0.7):
            kept = suppress(detections, threshold)
            for i, a in enumerate(kept):
                for b in kept[i + 1:]:
                    assert iou(a.bbox, b.bbox) < threshold
