"""Tests for configuration loading and validation."""

import pytest
from pydantic import ValidationError

from llm_dom_serializer.core.config import Config, IframeConfig, SerializerConfig
from llm_dom_serializer.core.exceptions import ConfigurationError


class TestSerializerConfig:
    def test_defaults(self):
        config = SerializerConfig()

        assert config.enable_paint_order_filtering
        assert config.enable_bounding_box_filtering
        assert config.enable_compound_components
        assert config.opacity_threshold == 0.8
        assert config.containment_threshold == 0.99
        assert config.max_interactive_elements == 1000

    def test_validation(self):
        with pytest.raises(ValidationError):
            SerializerConfig(opacity_threshold=1.5)
        with pytest.raises(ValidationError):
            SerializerConfig(containment_threshold=0)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DOM_ENABLE_PAINT_ORDER", "false")
        monkeypatch.setenv("DOM_OPACITY_THRESHOLD", "0.5")
        monkeypatch.setenv("DOM_MAX_INTERACTIVE_ELEMENTS", "50")

        config = SerializerConfig.from_env()

        assert not config.enable_paint_order_filtering
        assert config.opacity_threshold == 0.5
        assert config.max_interactive_elements == 50

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("DOM_MAX_INTERACTIVE_ELEMENTS", "many")

        with pytest.raises(ConfigurationError) as exc_info:
            SerializerConfig.from_env()
        assert not exc_info.value.recoverable


class TestIframeConfig:
    def test_defaults(self):
        config = IframeConfig()

        assert config.max_iframe_depth == 5
        assert config.min_iframe_size == 100
        assert config.enable_cross_origin
        assert config.max_iframes_per_page == 20

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DOM_ENABLE_CROSS_ORIGIN", "false")
        monkeypatch.setenv("DOM_MAX_IFRAME_DEPTH", "2")

        config = IframeConfig.from_env()
        assert not config.enable_cross_origin
        assert config.max_iframe_depth == 2

    def test_out_of_range_env_value(self, monkeypatch):
        monkeypatch.setenv("DOM_MAX_IFRAME_DEPTH", "-1")

        with pytest.raises(ConfigurationError):
            IframeConfig.from_env()


class TestConfig:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.delenv("LOG_FILE", raising=False)

        config = Config.from_env()

        assert config.log_level == "DEBUG"
        assert config.log_file is None
        assert isinstance(config.serializer, SerializerConfig)
        assert isinstance(config.iframe, IframeConfig)
