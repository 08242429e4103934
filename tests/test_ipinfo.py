import pytest
import responses

from pura.http import HttpClient
from pura.ipinfo import IpInfo, IpInfoProvider
from pura.options import AppOptions
from pura.validation import StringValidationError, ValidationErrors

IPINFO = "https://ipinfo.io/"
INFO = {
    "ip": "192.0.2.10",
    "hostname": "host.example.com",
    "city": "Springfield",
    "region": "Region",
    "country": "GB",
    "loc": "0.0000,0.0000",
    "org": "Example Org",
    "postal": "AB1",
    "timezone": "Europe/London",
}


def _provider(tmp_path, expect_ip=None, expect_country=None):
    options = AppOptions(expect_ip=expect_ip, expect_country=expect_country)
    return IpInfoProvider(options, HttpClient(tmp_path / "http"))


def test_ipinfo_str():
    assert str(IpInfo.from_dict(INFO)) == "192.0.2.10 (Springfield, Region, GB)"


def test_validate_none_makes_no_request(tmp_path):
    provider = _provider(tmp_path)
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(responses.GET, IPINFO, json=INFO)
        assert provider.validate() is None
        assert len(rsps.calls) == 0


def test_validate_matching(tmp_path):
    provider = _provider(tmp_path, "192.0.2.10", "GB")
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, IPINFO, json=INFO)
        assert provider.validate() is None
        assert len(rsps.calls) == 1


def test_validate_invalid(tmp_path):
    provider = _provider(tmp_path, "203.0.113.1", "INVALID")
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, IPINFO, json=INFO)
        with pytest.raises(ValidationErrors) as info:
            provider.validate()
    errors = list(info.value)
    assert len(errors) == 2
    assert all(isinstance(error, StringValidationError) for error in errors)
    assert [error.name for error in errors] == ["IP address", "Geolocated country"]


def test_validate_refetches_each_time(tmp_path):
    provider = _provider(tmp_path, expect_country="GB")
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, IPINFO, json=INFO)
        first = provider.validate()
        second = provider.validate()
        assert len(rsps.calls) == 2
    assert first is None
    assert second is None


def test_validate_refetch_sees_changed_country(tmp_path):
    provider = _provider(tmp_path, expect_country="GB")
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, IPINFO, json=INFO)
        assert provider.validate() is None
        rsps.replace(responses.GET, IPINFO, json={**INFO, "country": "FR"})
        with pytest.raises(ValidationErrors) as info:
            provider.validate()
    errors = list(info.value)
    assert [error.name for error in errors] == ["Geolocated country"]


def test_validate_http_failure(tmp_path):
    provider = _provider(tmp_path, expect_ip="192.0.2.10")
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, IPINFO, status=500)
        with pytest.raises(ValidationErrors) as info:
            provider.validate()
    errors = list(info.value)
    assert len(errors) == 1
    assert errors[0].name is None
    assert "500" in str(errors[0])


def test_validate_incomplete_response(tmp_path):
    provider = _provider(tmp_path, expect_ip="192.0.2.10")
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, IPINFO, json={"ip": "192.0.2.10"})
        with pytest.raises(ValidationErrors) as info:
            provider.validate()
    assert len(info.value) == 1
    assert "deserialization" in str(info.value)