import pytest

from APIConnect import MockClient, MockResponse
from conftest import ExampleConnector, GetServer, GetStatus


def test_dict_keys_match_request_class_and_url(server_json):
    mock = MockClient({
        GetServer: MockResponse(server_json),
        "*/status": MockResponse({"error": "down"}, status=503),
    })
    connector = ExampleConnector(mock_client=mock)

    assert connector.send(GetServer(1)).status_code == 200
    assert connector.send(GetStatus()).status_code == 503

    mock.assert_sent(GetServer)
    mock.assert_sent("https://api.example.test/v1/status")
    mock.assert_sent_count(2)


def test_callable_responder_sees_request():
    mock = MockClient({"*": lambda request: MockResponse({"echo": request.url})})

    response = ExampleConnector(mock_client=mock).send(GetServer(5))

    assert response.json('echo') == "https://api.example.test/v1/servers/5"


def test_sequence_is_served_in_order():
    mock = MockClient([MockResponse("first"), MockResponse(b"second")])
    connector = ExampleConnector(mock_client=mock)

    assert connector.send(GetStatus()).text() == "first"
    assert connector.send(GetStatus()).text() == "second"
    with pytest.raises(LookupError):
        connector.send(GetStatus())


def test_unmatched_request_raises():
    connector = ExampleConnector(mock_client=MockClient({GetStatus: MockResponse()}))

    with pytest.raises(LookupError):
        connector.send(GetServer(1))


def test_assertion_helpers_fail_loudly(server_json):
    mock = MockClient({GetServer: MockResponse(server_json)})
    ExampleConnector(mock_client=mock).send(GetServer(1))

    mock.assert_not_sent(GetStatus)
    with pytest.raises(AssertionError):
        mock.assert_sent(GetStatus)
    with pytest.raises(AssertionError):
        mock.assert_not_sent(GetServer)
    with pytest.raises(AssertionError):
        mock.assert_sent_count(3)


def test_json_bodies_get_a_content_type():
    response = MockResponse({"id": 1}, status=201)

    assert response.as_tuple() == (201, {'Content-Type': 'application/json'}, b'{"id": 1}')
