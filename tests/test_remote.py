"""Tests for clean_lint/remote.py"""

import pytest
import requests

from clean_lint.remote import (
    AuthenticationError,
    NetworkError,
    NotFoundError,
    RemoteConfigClient,
    RemoteConfigError,
)

URL = "https://lint.example.com/team.yaml"


@pytest.fixture
def client() -> RemoteConfigClient:
    return RemoteConfigClient(token="tok_test")


# ---------------------------------------------------------------------------
# fetch(): happy path
# ---------------------------------------------------------------------------

def test_fetch_returns_parsed_yaml(client, requests_mock):
    requests_mock.get(URL, text="fail_on: warning\nrules:\n  magic-number: off\n")
    assert client.fetch(URL) == {"fail_on": "warning", "rules": {"magic-number": False}}


def test_fetch_sends_auth_header(client, requests_mock):
    adapter = requests_mock.get(URL, text="{}")
    client.fetch(URL)
    assert adapter.last_request.headers.get("Authorization") == "Bearer tok_test"
    assert adapter.last_request.headers.get("User-Agent").startswith("clean-lint/")


def test_fetch_without_token_sends_no_auth_header(requests_mock):
    adapter = requests_mock.get(URL, text="{}")
    RemoteConfigClient().fetch(URL)
    assert "Authorization" not in adapter.last_request.headers


def test_fetch_empty_body_is_empty_mapping(client, requests_mock):
    requests_mock.get(URL, text="")
    assert client.fetch(URL) == {}


# ---------------------------------------------------------------------------
# fetch(): HTTP error codes
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("status", [401, 403])
def test_fetch_access_denied_raises_authentication_error(client, requests_mock, status):
    requests_mock.get(URL, status_code=status)
    with pytest.raises(AuthenticationError, match="CLEAN_LINT_TOKEN"):
        client.fetch(URL)


def test_fetch_404_raises_not_found_error(client, requests_mock):
    requests_mock.get(URL, status_code=404)
    with pytest.raises(NotFoundError, match="not found"):
        client.fetch(URL)


def test_fetch_500_raises_remote_config_error(client, requests_mock):
    requests_mock.get(URL, status_code=500, text="Internal Server Error")
    with pytest.raises(RemoteConfigError, match="500"):
        client.fetch(URL)


# ---------------------------------------------------------------------------
# fetch(): network errors
# ---------------------------------------------------------------------------

def test_fetch_timeout_raises_network_error(client, requests_mock):
    requests_mock.get(URL, exc=requests.exceptions.Timeout)
    with pytest.raises(NetworkError, match="timed out"):
        client.fetch(URL)


def test_fetch_connection_error_raises_network_error(client, requests_mock):
    requests_mock.get(URL, exc=requests.exceptions.ConnectionError)
    with pytest.raises(NetworkError, match="Unable to reach"):
        client.fetch(URL)


# ---------------------------------------------------------------------------
# fetch(): body validation
# ---------------------------------------------------------------------------

def test_fetch_invalid_yaml(client, requests_mock):
    requests_mock.get(URL, text="rules: [unclosed\n")
    with pytest.raises(RemoteConfigError, match="Invalid YAML"):
        client.fetch(URL)


def test_fetch_non_mapping(client, requests_mock):
    requests_mock.get(URL, text="- a\n- b\n")
    with pytest.raises(RemoteConfigError, match="mapping"):
        client.fetch(URL)
