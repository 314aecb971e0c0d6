import base64
import json
from unittest import mock

import pytest
import requests

from core.discovery.http_clients import HttpAnimalIdentifier, HttpBadgeGenerator, linear_wait
from core.errors import NotFound, RemoteFailure, RemoteFailureKind


def make_response(status=200, json_body=None, content=b"", content_type=None):
    response = requests.Response()
    response.status_code = status
    response.encoding = "utf-8"
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers["content-type"] = "application/json; charset=utf-8"
    else:
        response._content = content
        if content_type:
            response.headers["content-type"] = content_type
    return response


@pytest.fixture
def session():
    return mock.create_autospec(requests.Session, instance=True)


@pytest.fixture
def identifier(session):
    return HttpAnimalIdentifier("http://identify.local/upload", timeout=7, max_tries=3, retry_delay=0, session=session)


@pytest.fixture
def generator(session):
    return HttpBadgeGenerator("http://generate.local/badge", timeout=9, max_tries=3, retry_delay=0, session=session)


def test_linear_wait_grows_by_the_base_delay():
    waits = linear_wait(2.0)
    assert next(waits) is None
    assert [next(waits) for _ in range(3)] == [2.0, 4.0, 6.0]


def test_identify_uploads_photo_and_parses_flat_reply(identifier, session):
    session.post.return_value = make_response(json_body={"name": " Lion ", "description": "King of the jungle "})

    result = identifier.identify(b"jpeg bytes")

    assert result.name == "Lion"
    assert result.description == "King of the jungle"
    _, kwargs = session.post.call_args
    assert kwargs["files"]["image"] == ("animal.jpg", b"jpeg bytes", "image/jpeg")
    assert kwargs["timeout"] == 7


def test_identify_accepts_wrapped_output(identifier, session):
    session.post.return_value = make_response(json_body={"output": {"name": "Tiger", "description": "Striped"}})
    assert identifier.identify(b"jpeg").name == "Tiger"


def test_identify_reads_photo_from_path(tmp_path, identifier, session):
    photo = tmp_path / "photo.jpg"
    photo.write_bytes(b"from disk")
    session.post.return_value = make_response(json_body={"name": "Lion", "description": "Cat"})

    identifier.identify(photo)

    assert session.post.call_args.kwargs["files"]["image"][1] == b"from disk"


def test_identify_missing_photo_raises_not_found(tmp_path, identifier, session):
    with pytest.raises(NotFound):
        identifier.identify(tmp_path / "missing.jpg")
    session.post.assert_not_called()


def test_identify_retries_server_errors(identifier, session):
    session.post.side_effect = [
        make_response(status=503, content=b"busy"),
        make_response(json_body={"name": "Lion", "description": "Cat"}),
    ]

    assert identifier.identify(b"jpeg").name == "Lion"
    assert session.post.call_count == 2


def test_identify_gives_up_after_max_tries(identifier, session):
    session.post.side_effect = requests.Timeout("slow")

    with pytest.raises(RemoteFailure) as excinfo:
        identifier.identify(b"jpeg")

    assert excinfo.value.kind is RemoteFailureKind.TIMEOUT
    assert excinfo.value.service == "identify"
    assert session.post.call_count == 3


def test_connection_errors_are_server_errors(identifier, session):
    session.post.side_effect = requests.ConnectionError("refused")

    with pytest.raises(RemoteFailure) as excinfo:
        identifier.identify(b"jpeg")

    assert excinfo.value.kind is RemoteFailureKind.SERVER_ERROR


@pytest.mark.parametrize(
    "response",
    [
        make_response(content=b"<html>oops</html>", content_type="text/html"),
        make_response(json_body={"name": "Lion"}),
        make_response(json_body={"name": "  ", "description": "Cat"}),
        make_response(json_body=["Lion"]),
    ],
)
def test_identify_malformed_replies_are_not_retried(identifier, session, response):
    session.post.return_value = response

    with pytest.raises(RemoteFailure) as excinfo:
        identifier.identify(b"jpeg")

    assert excinfo.value.kind is RemoteFailureKind.MALFORMED_RESPONSE
    assert session.post.call_count == 1


def test_identify_without_endpoint_fails_fast(session):
    identifier = HttpAnimalIdentifier(None, session=session)

    with pytest.raises(RemoteFailure) as excinfo:
        identifier.identify(b"jpeg")

    assert excinfo.value.kind is RemoteFailureKind.SERVER_ERROR
    session.post.assert_not_called()


def test_check_connection(identifier, session):
    session.head.return_value = make_response(status=200)
    assert identifier.check_connection() is True
    assert session.head.call_args.kwargs["timeout"] == 5.0

    session.head.side_effect = requests.ConnectionError("down")
    assert identifier.check_connection() is False

    assert HttpAnimalIdentifier(None, session=session).check_connection() is False


def test_generate_returns_binary_body(generator, session):
    session.get.return_value = make_response(content=b"\x89PNG data", content_type="image/png")

    badge = generator.generate("Lion")

    assert badge.image_bytes == b"\x89PNG data"
    assert badge.extra is None
    session.get.assert_called_once_with("http://generate.local/badge", params={"name": "Lion"}, timeout=9)


def test_generate_decodes_json_data_field(generator, session):
    document = {"data": base64.b64encode(b"badge").decode("ascii"), "badgeTier": "rare"}
    session.get.return_value = make_response(json_body=document)

    badge = generator.generate("Lion")

    assert badge.image_bytes == b"badge"
    assert badge.extra == document


def test_generate_reads_inline_data_from_candidates(generator, session):
    encoded = base64.b64encode(b"gemini badge").decode("ascii")
    document = {"candidates": [{"content": {"parts": [{"text": "here"}, {"inlineData": {"data": encoded}}]}}]}
    session.get.return_value = make_response(json_body=[document])

    badge = generator.generate("Lion")

    assert badge.image_bytes == b"gemini badge"
    assert badge.extra == document


@pytest.mark.parametrize(
    "response",
    [
        make_response(content=b"", content_type="image/png"),
        make_response(json_body={"message": "no image"}),
        make_response(json_body={"data": "not base64!"}),
        make_response(json_body={"candidates": {"x": 1}}),
        make_response(json_body={"candidates": [{"content": "oops"}]}),
        make_response(json_body={"candidates": [{"content": {"parts": ["text"]}}]}),
        make_response(json_body={"candidates": [{"content": {"parts": [{"inlineData": "x"}]}}]}),
    ],
)
def test_generate_malformed_replies(generator, session, response):
    session.get.return_value = response

    with pytest.raises(RemoteFailure) as excinfo:
        generator.generate("Lion")

    assert excinfo.value.kind is RemoteFailureKind.MALFORMED_RESPONSE
    assert session.get.call_count == 1


def test_generate_retries_then_surfaces_server_error(generator, session):
    session.get.return_value = make_response(status=500, content=b"boom")

    with pytest.raises(RemoteFailure) as excinfo:
        generator.generate("Lion")

    assert excinfo.value.kind is RemoteFailureKind.SERVER_ERROR
    assert "HTTP 500" in str(excinfo.value)
    assert session.get.call_count == 3
