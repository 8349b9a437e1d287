import json

import pytest

from APIConnect import (
    APIError,
    AuthenticationError,
    ClientError,
    HTTPRequest,
    HTTPResponse,
    MockResponse,
    NotFoundError,
    RateLimitError,
    ServerError,
)
from conftest import ExampleConnector, GetServer, make_connector


def make_response(status=200, body=b'', headers=None) -> HTTPResponse:
    request = HTTPRequest(method="GET", url="https://api.example.test/v1/servers/1")
    return HTTPResponse(status_code=status, headers=headers or {}, body=body, request=request)


class TestJson:
    def test_decodes_body(self):
        response = make_response(body=b'{"data": {"servers": [{"id": 7}]}}')

        assert response.json() == {"data": {"servers": [{"id": 7}]}}
        assert response.json('data.servers.0.id') == 7

    def test_missing_key_returns_default(self):
        response = make_response(body=b'{"data": {}}')

        assert response.json('data.servers.0.id') is None
        assert response.json('data.name', 'unnamed') == 'unnamed'

    def test_empty_body_is_empty_object(self):
        assert make_response(body=b'').json() == {}

    def test_malformed_body_raises(self):
        with pytest.raises(json.JSONDecodeError):
            make_response(body=b'<html>').json()

    def test_decoded_once(self):
        response = make_response(body=b'{"id": 1}')

        assert response.json() is response.json()


class TestClassification:
    @pytest.mark.parametrize("status,successful,client,server", [
        (200, True, False, False),
        (204, True, False, False),
        (302, False, False, False),
        (404, False, True, False),
        (503, False, False, True),
    ])
    def test_status_families(self, status, successful, client, server):
        response = make_response(status=status)

        assert response.successful() is successful
        assert response.client_error() is client
        assert response.server_error() is server
        assert response.failed() is (client or server)

    def test_redirect_and_ok(self):
        assert make_response(status=301).redirect()
        assert make_response(status=200).ok()
        assert not make_response(status=201).ok()

    def test_header_lookup_is_case_insensitive(self):
        response = make_response(headers={'Content-Type': 'application/json'})

        assert response.header('content-type') == 'application/json'
        assert response.header('x-missing', 'none') == 'none'


class TestExceptions:
    @pytest.mark.parametrize("status,exc_class", [
        (401, AuthenticationError),
        (404, NotFoundError),
        (418, ClientError),
        (429, RateLimitError),
        (500, ServerError),
        (502, ServerError),
    ])
    def test_to_exception_picks_status_class(self, status, exc_class):
        response = make_response(status=status, body=b'{"error": "nope"}')

        error = response.to_exception()

        assert type(error) is exc_class
        assert error.status_code == status
        assert error.body == '{"error": "nope"}'
        assert error.response is response

    def test_successful_response_has_no_exception(self):
        response = make_response(status=200)

        assert response.to_exception() is None
        assert response.throw() is response

    def test_throw_raises(self):
        with pytest.raises(NotFoundError):
            make_response(status=404).throw()

    def test_retry_after_is_parsed(self):
        error = make_response(status=429, headers={'Retry-After': '3'}).to_exception()

        assert error.retry_after == 3.0

    def test_on_error_only_calls_back_on_failure(self):
        seen = []

        make_response(status=200).on_error(seen.append)
        failed = make_response(status=500).on_error(seen.append)

        assert seen == [failed]

    def test_predicate_failure_on_success_status(self):
        connector = make_connector(MockResponse({"ok": False}), failure_predicate=lambda r: not r.json('ok'))
        error = connector.send(GetServer(1)).to_exception()

        assert type(error) is APIError
        assert error.status_code == 200


def test_response_links_back_to_request_and_connector(send, server_json):
    request = GetServer(1)
    response = send(request, MockResponse(server_json))

    assert response.api_request is request
    assert isinstance(response.connector, ExampleConnector)
    assert response.status == 200
    assert response.text() == json.dumps(server_json)
