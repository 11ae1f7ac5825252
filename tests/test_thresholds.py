"""
Tests for threshold clamping and the threshold store.
"""

import pytest

from models.config import ThresholdConfig, clamp_threshold
from runtime.thresholds import ThresholdStore


class TestClampThreshold:
    def test_within_range_unchanged(self):
        assert clamp_threshold(0.35) == 0.35

    def test_clamps_high(self):
        assert clamp_threshold(5.0) == 1.0

    def test_clamps_low(self):
        assert clamp_threshold(-3) == 0.1
        assert clamp_threshold(0.0) == 0.1

    def test_bounds_inclusive(self):
        assert clamp_threshold(0.1) == 0.1
        assert clamp_threshold(1.0) == 1.0

    def test_nan_rejected(self):
        with pytest.raises(ValueError):
            clamp_threshold(float("nan"))

    def test_infinity_clamped(self):
        assert clamp_threshold(float("inf")) == 1.0
        assert clamp_threshold(float("-inf")) == 0.1


class TestThresholdStore:
    def test_defaults(self):
        store = ThresholdStore()
        current = store.get_thresholds()
        assert current.confidence == 0.5
        assert current.nms == 0.4

    def test_update_clamps_both(self):
        store = ThresholdStore()
        current = store.update_thresholds(confidence=5.0, nms=-3)
        assert current.confidence == 1.0
        assert current.nms == 0.1
        assert store.get_thresholds() == current

    def test_partial_update_leaves_other_field(self):
        store = ThresholdStore()
        store.update_thresholds(nms=0.7)
        current = store.get_thresholds()
        assert current.confidence == 0.5
        assert current.nms == 0.7

    def test_empty_update_is_noop(self):
        store = ThresholdStore(ThresholdConfig(confidence=0.6, nms=0.3))
        assert store.update_thresholds() == ThresholdConfig(confidence=0.6, nms=0.3)

    def test_snapshot_not_mutated_by_later_update(self):
        store = ThresholdStore()
        snapshot = store.get_thresholds()
        store.update_thresholds(confidence=0.9)
        assert snapshot.confidence == 0.5
        assert store.get_thresholds().confidence == 0.9

    def test_invalid_update_keeps_previous_values(self):
        store = ThresholdStore()
        with pytest.raises(ValueError):
            store.update_thresholds(confidence=0.8, nms=float("nan"))
        assert store.get_thresholds() == ThresholdConfig()

    @pytest.mark.parametrize("value", [-100, -0.5, 0, 0.05, 0.5, 1.5, 42])
    def test_values_always_in_range(self, value):
        store = ThresholdStore()
        current = store.update_thresholds(confidence=value, nms=value)
        assert 0.1 <= current.confidence <= 1.0
        assert 0.1 <= current.nms <= 1.0

    def test_from_dict_clamps(self):
        cfg = ThresholdConfig.from_dict({"confidence": 2, "nms": 0})
        assert cfg.confidence == 1.0
        assert cfg.nms == 0.1
