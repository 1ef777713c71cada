import pytest
import requests

from wildwatch.common.config import TemperatureConfig
from wildwatch.common.errors import TemperatureFetchError
from wildwatch.common.schemas import UNAVAILABLE
from wildwatch.weather import provider as provider_module
from wildwatch.weather.provider import TemperatureProvider, parse_temperature


class FakeResponse:
    def __init__(self, payload, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


@pytest.fixture(autouse=True)
def _no_env_key(monkeypatch):
    monkeypatch.delenv("WILDWATCH_WEATHER_API_KEY", raising=False)


def _provider() -> TemperatureProvider:
    return TemperatureProvider(
        TemperatureConfig(base_url="https://weather.test/timeline", api_key="secret")
    )


def test_fetch_current_sends_metric_query(monkeypatch) -> None:
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params, timeout))
        return FakeResponse({"currentConditions": {"temp": 29.4}})

    monkeypatch.setattr(provider_module.requests, "get", fake_get)
    assert _provider().fetch_current("trichy") == 29.4
    url, params, timeout = calls[0]
    assert url == "https://weather.test/timeline/trichy"
    assert params == {"unitGroup": "metric", "key": "secret", "contentType": "json"}
    assert timeout == 10.0


def test_network_error_yields_unavailable(monkeypatch) -> None:
    def fake_get(url, params=None, timeout=None):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(provider_module.requests, "get", fake_get)
    assert _provider().fetch_current("trichy") is UNAVAILABLE


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse({"currentConditions": {}}),
        FakeResponse({"days": []}),
        FakeResponse({"currentConditions": {"temp": "hot"}}),
        FakeResponse(ValueError("not json")),
        FakeResponse({}, status_code=401),
    ],
)
def test_bad_responses_yield_unavailable(monkeypatch, response) -> None:
    monkeypatch.setattr(provider_module.requests, "get", lambda *args, **kwargs: response)
    assert _provider().fetch_current("trichy") is UNAVAILABLE


def test_missing_api_key_skips_request(monkeypatch) -> None:
    def fake_get(*args, **kwargs):
        raise AssertionError("request should not be sent")

    monkeypatch.setattr(provider_module.requests, "get", fake_get)
    provider = TemperatureProvider(TemperatureConfig(api_key=None))
    assert provider.fetch_current() is UNAVAILABLE


def test_parse_temperature_rejects_booleans() -> None:
    with pytest.raises(TemperatureFetchError):
        parse_temperature({"currentConditions": {"temp": True}})
    assert parse_temperature({"currentConditions": {"temp": 30}}) == 30.0
