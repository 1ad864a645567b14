import json

import httpx
import pytest

from xbrl_survey import to_xbrl
from xbrl_survey.errors import ValidationServiceError
from xbrl_survey.validation_service import ArelleClient


def client_for(handler, **kwargs):
    return ArelleClient(base_url="http://arelle.test", transport=httpx.MockTransport(handler), **kwargs)


def test_posts_raw_xml(submission):
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = request.content.decode("utf-8")
        return httpx.Response(200, json={
            "valid": False,
            "messages": [
                {"severity": "error", "message": "t001 missing"},
                {"severity": "warning", "message": "check t002"},
            ],
        })

    xml = to_xbrl(submission)
    with client_for(handler) as client:
        result = client.validate(xml)

    assert seen["path"] == "/validate"
    assert seen["content_type"] == "application/xml"
    assert seen["body"] == xml
    assert not result.valid
    assert [m.message for m in result.errors] == ["t001 missing"]
    assert len(result.messages) == 2


def test_base_url_from_environment(monkeypatch):
    monkeypatch.setenv("ARELLE_API_URL", "http://from-env:9000/")
    client = ArelleClient()
    assert client.base_url == "http://from-env:9000"
    client.close()


def test_http_error_is_wrapped():
    client = client_for(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(ValidationServiceError):
        client.validate("<xbrl/>")


def test_invalid_json_is_wrapped():
    client = client_for(lambda request: httpx.Response(200, text="not json"))
    with pytest.raises(ValidationServiceError):
        client.validate("<xbrl/>")


def test_unexpected_payload_is_rejected():
    client = client_for(lambda request: httpx.Response(200, content=json.dumps([1, 2])))
    with pytest.raises(ValidationServiceError):
        client.validate("<xbrl/>")


def test_available():
    def down(request):
        raise httpx.ConnectError("refused", request=request)

    assert client_for(lambda request: httpx.Response(200)).available()
    assert not client_for(down).available()
