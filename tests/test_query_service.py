import json
import pytest
import requests
from unittest.mock import patch, MagicMock
from explorer_report.models import QueryResult
from explorer_report.query_service import QueryService, QueryError, execute_query


class CaptureLogger:
    def __init__(self):
        self.lines = []

    def debug(self, message):
        self.lines.append(message)


def _mock_response(status_code=200, reason="OK", payload=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = reason
    resp.text = json.dumps(payload) if payload is not None else ""
    resp.json.return_value = payload
    return resp


PAYLOAD = {
    "success": True,
    "errors": [],
    "duration": 3.2,
    "result_count": 2,
    "params": {"foo": "bar"},
    "columns": ["a", "b"],
    "default_limit": 1000,
    "relations": {},
    "colrender": {},
    "rows": [[1, "x"], [2, "y"]],
}


def test_run_url():
    qs = QueryService("forum.example.com", "secret")
    assert qs.run_url(42) == "https://forum.example.com/admin/plugins/explorer/queries/42/run"


def test_request_body_double_encodes_params():
    qs = QueryService("forum.example.com", "secret")
    body = qs.request_body({"foo": "bar"})
    assert body == '{\n  "params": "{\\"foo\\":\\"bar\\"}"\n}'
    assert json.loads(json.loads(body)["params"]) == {"foo": "bar"}


def test_request_body_without_params():
    qs = QueryService("forum.example.com", "secret")
    assert json.loads(qs.request_body(None)) == {"params": "{}"}


def test_execute_posts_signed_request():
    with patch("requests.post", return_value=_mock_response(payload=PAYLOAD)) as mock_post:
        result = execute_query("forum.example.com", 42, {"foo": "bar"}, "secret")

    args, kwargs = mock_post.call_args
    assert args[0] == "https://forum.example.com/admin/plugins/explorer/queries/42/run"
    assert kwargs["headers"] == {
        "api-key": "secret",
        "api-username": "system",
        "content-type": "application/json; charset=UTF-8",
    }
    assert json.loads(kwargs["data"].decode("utf-8")) == {"params": '{"foo":"bar"}'}
    assert kwargs["timeout"] is None

    assert isinstance(result, QueryResult)
    assert result.columns == ["a", "b"]
    assert result.rows == [[1, "x"], [2, "y"]]
    assert result.result_count == 2
    assert result.default_limit == 1000


def test_execute_non_200_raises():
    with patch("requests.post", return_value=_mock_response(404, "Not Found")):
        with pytest.raises(QueryError) as exc_info:
            execute_query("forum.example.com", 42, {}, "secret")

    assert str(exc_info.value) == "404 Not Found"
    assert exc_info.value.status_code == 404
    assert exc_info.value.reason == "Not Found"


def test_execute_does_not_parse_error_body():
    resp = _mock_response(500, "Internal Server Error")
    with patch("requests.post", return_value=resp):
        with pytest.raises(QueryError, match="500 Internal Server Error"):
            QueryService("forum.example.com", "secret").execute(1)
    resp.json.assert_not_called()


def test_transport_error_propagates_unchanged():
    err = requests.ConnectionError("refused")
    with patch("requests.post", side_effect=err):
        with pytest.raises(requests.ConnectionError) as exc_info:
            execute_query("forum.example.com", 42, {}, "secret")
    assert exc_info.value is err


def test_execute_traces_body_and_response():
    logger = CaptureLogger()
    with patch("requests.post", return_value=_mock_response(payload=PAYLOAD)):
        execute_query("forum.example.com", "7", {"foo": "bar"}, "secret", logger=logger)

    assert logger.lines[0] == (
        "Submit POST request: https://forum.example.com/admin/plugins/explorer/queries/7/run"
    )
    assert logger.lines[1:4] == [
        "===== Body =====",
        '{\n  "params": "{\\"foo\\":\\"bar\\"}"\n}',
        "================",
    ]
    assert logger.lines[4] == "===== Response ====="
    assert logger.lines[5].startswith("200 OK\n")
    assert logger.lines[6] == "===================="


def test_timeout_is_forwarded():
    with patch("requests.post", return_value=_mock_response(payload=PAYLOAD)) as mock_post:
        QueryService("forum.example.com", "secret", timeout=5.0).execute(1)
    assert mock_post.call_args.kwargs["timeout"] == 5.0


def test_success_flag_is_not_inspected():
    payload = dict(PAYLOAD, success=False, errors=["PG::SyntaxError"])
    with patch("requests.post", return_value=_mock_response(payload=payload)):
        result = execute_query("forum.example.com", 42, {}, "secret")
    assert result.has_errors
    assert result.errors == ["PG::SyntaxError"]
