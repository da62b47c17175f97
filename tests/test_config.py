"""Tests for trill.config — AppConfig defaults and immutability."""

import dataclasses

import pytest

from trill.config import AppConfig
from trill.head import HeadConfig


class TestAppConfig:
    def test_defaults(self) -> None:
        config = AppConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8000
        assert config.debug is False
        assert config.components_dir is None
        assert config.head == HeadConfig()
        assert config.max_content_length == 16 * 1024 * 1024

    def test_frozen(self) -> None:
        config = AppConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.debug = True  # type: ignore[misc]

    def test_override(self) -> None:
        head = HeadConfig(favicon="/favicon.png")
        config = AppConfig(port=9000, components_dir="components", head=head)
        assert config.port == 9000
        assert config.components_dir == "components"
        assert config.head is head
