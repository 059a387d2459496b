"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from concierge.config import AppConfig, BrandConfig, CatalogConfig, ConciergeConfig, _validate_config


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_defaults(self):
        config = AppConfig()
        assert config.concierge.low_confidence_threshold == pytest.approx(0.4)
        assert config.concierge.human_escalation_misses == 2
        assert config.catalog.max_results == 6
        assert config.catalog.default_sort == "featured"

    def test_threshold_above_one(self):
        config = replace(AppConfig(), concierge=ConciergeConfig(low_confidence_threshold=1.5))
        with pytest.raises(ValueError, match="LOW_CONFIDENCE_THRESHOLD"):
            _validate_config(config)

    def test_threshold_negative(self):
        config = replace(AppConfig(), concierge=ConciergeConfig(low_confidence_threshold=-0.1))
        with pytest.raises(ValueError, match="LOW_CONFIDENCE_THRESHOLD"):
            _validate_config(config)

    def test_escalation_misses_must_be_positive(self):
        config = replace(AppConfig(), concierge=ConciergeConfig(human_escalation_misses=0))
        with pytest.raises(ValueError, match="HUMAN_ESCALATION_MISSES"):
            _validate_config(config)

    def test_continuation_words_must_be_positive(self):
        config = replace(AppConfig(), concierge=ConciergeConfig(continuation_max_words=0))
        with pytest.raises(ValueError, match="CONTINUATION_MAX_WORDS"):
            _validate_config(config)

    def test_carousel_size_must_be_positive(self):
        config = replace(AppConfig(), catalog=CatalogConfig(max_results=0))
        with pytest.raises(ValueError, match="CAROUSEL_MAX_RESULTS"):
            _validate_config(config)

    def test_unknown_default_sort(self):
        config = replace(AppConfig(), catalog=CatalogConfig(default_sort="newest"))
        with pytest.raises(ValueError, match="DEFAULT_SORT"):
            _validate_config(config)

    def test_negative_return_window(self):
        config = replace(AppConfig(), brand=BrandConfig(return_window_days=-1))
        with pytest.raises(ValueError, match="RETURN_WINDOW_DAYS"):
            _validate_config(config)

    def test_safe_int_parsing(self):
        from concierge.config import _safe_int

        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_bad_value(self, monkeypatch):
        from concierge.config import _safe_int

        monkeypatch.setenv("CONCIERGE_TEST_INT", "six")
        with pytest.raises(ValueError, match="CONCIERGE_TEST_INT"):
            _safe_int("CONCIERGE_TEST_INT", "6")

    def test_safe_float_parsing(self):
        from concierge.config import _safe_float

        assert _safe_float("NONEXISTENT_VAR_12345", "0.4") == pytest.approx(0.4)
