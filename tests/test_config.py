from dataclasses import replace

import pytest

from wildwatch.common.config import (
    AppConfig,
    DEFAULT_WATCH_LIST,
    TemperatureConfig,
    config_from_dict,
    load_config,
    validate_config,
)


def test_defaults_match_monitoring_classes() -> None:
    config = AppConfig()
    assert config.filter_classes == ("person", "cat", "dog", "cow", "goat")
    assert config.watch_list == frozenset(DEFAULT_WATCH_LIST)
    validate_config(config)


def test_validate_config_rejects_invalid_conf_threshold() -> None:
    config = AppConfig()
    bad_detector = replace(config.detector, confidence_threshold=1.5)
    bad_config = replace(config, detector=bad_detector)
    with pytest.raises(ValueError):
        validate_config(bad_config)


def test_validate_config_rejects_empty_filter_set() -> None:
    with pytest.raises(ValueError):
        validate_config(replace(AppConfig(), filter_classes=()))


def test_validate_config_rejects_non_positive_fps() -> None:
    config = AppConfig()
    with pytest.raises(ValueError):
        validate_config(replace(config, loop=replace(config.loop, target_fps=0)))


def test_config_from_dict_normalizes_lists() -> None:
    config = config_from_dict(
        {
            "filter_classes": ["dog", "lion", "dog"],
            "watch_list": ["Lion", "TIGER"],
            "camera": {"source": "1"},
            "temperature": {"base_url": "https://example.test/timeline/"},
        }
    )
    assert config.filter_classes == ("dog", "lion")
    assert config.watch_list == frozenset({"lion", "tiger"})
    assert config.camera.source == 1
    assert config.temperature.base_url == "https://example.test/timeline"


def test_load_config_merges_over_defaults(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "detector:\n  name: dummy\n  dummy:\n    mode: random\nloop:\n  target_fps: 5\n",
        encoding="utf-8",
    )
    config = load_config(str(path))
    assert config.detector.name == "dummy"
    assert config.detector.dummy.mode == "random"
    assert config.detector.dummy.seed == 42
    assert config.loop.target_fps == 5.0
    assert config.alert_message == "Red Alert: Wild Animal Detected!"


def test_api_key_env_override(monkeypatch) -> None:
    monkeypatch.setenv("WILDWATCH_WEATHER_API_KEY", "from-env")
    assert TemperatureConfig(api_key="from-file").resolved_api_key == "from-env"
    monkeypatch.delenv("WILDWATCH_WEATHER_API_KEY")
    assert TemperatureConfig(api_key="from-file").resolved_api_key == "from-file"
    assert TemperatureConfig(api_key="").resolved_api_key is None
