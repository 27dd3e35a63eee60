"""Unit tests for JsonFileConfigProvider with a mocked HTTP session."""

from unittest.mock import Mock

import pytest
import requests

from hospital.services.config_provider import JsonFileConfigProvider

PARAMS_URL = "https://params.example.org/hospital.json"


def _session(payload=None, error=None):
    session = Mock(spec=requests.Session)
    if error is not None:
        session.get.side_effect = error
    else:
        response = Mock(spec=requests.Response)
        response.json.return_value = payload
        session.get.return_value = response
    return session


@pytest.mark.unit
@pytest.mark.services
class TestJsonFileConfigProvider:
    def test_loads_json_object(self):
        session = _session({"oh_telemetry_url": "https://telemetry.example.org"})

        provider = JsonFileConfigProvider(url=PARAMS_URL, timeout=2, session=session)

        session.get.assert_called_once_with(PARAMS_URL, timeout=2)
        assert provider.get_config_data() == {
            "oh_telemetry_url": "https://telemetry.example.org"
        }
        assert provider.get("oh_telemetry_url") is not None
        assert provider.get("someParam") is None

    def test_bad_url_gives_empty_config(self):
        session = _session(error=requests.ConnectionError("no such host"))

        provider = JsonFileConfigProvider(url="https://somebadaddress.xxx", session=session)

        assert provider.get_config_data() == {}
        assert provider.get("someParam") is None

    def test_http_error_gives_empty_config(self):
        session = _session({"a": 1})
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("404")

        provider = JsonFileConfigProvider(url=PARAMS_URL, session=session)

        assert provider.get_config_data() == {}

    @pytest.mark.parametrize("payload", [["a", "b"], "text", 3])
    def test_non_object_payload_gives_empty_config(self, payload):
        provider = JsonFileConfigProvider(url=PARAMS_URL, session=_session(payload))

        assert provider.get_config_data() == {}

    def test_invalid_json_gives_empty_config(self):
        session = _session()
        session.get.return_value.json.side_effect = ValueError("Expecting value")

        provider = JsonFileConfigProvider(url=PARAMS_URL, session=session)

        assert provider.get_config_data() == {}

    def test_no_url_skips_request(self, monkeypatch):
        monkeypatch.delenv("PARAMS_URL", raising=False)
        session = _session({"a": 1})

        provider = JsonFileConfigProvider(session=session)

        session.get.assert_not_called()
        assert provider.get_config_data() == {}

    def test_close_releases_session(self):
        session = _session({})
        provider = JsonFileConfigProvider(url=PARAMS_URL, session=session)

        provider.close()

        session.close.assert_called_once()

    def test_returned_data_is_a_copy(self):
        provider = JsonFileConfigProvider(url=PARAMS_URL, session=_session({"a": 1}))

        provider.get_config_data()["a"] = 2

        assert provider.get("a") == 1
