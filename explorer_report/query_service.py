import json
import logging
from typing import Optional, Union

import requests

from explorer_report.models import QueryResult
from explorer_report.tracing import DebugLogger, debug_block

API_USERNAME = "system"


class QueryError(RuntimeError):
    """Raised when the query runner answers with anything but HTTP 200."""

    def __init__(self, status_code: int, reason: str):
        super().__init__(f"{status_code} {reason}")
        self.status_code = status_code
        self.reason = reason


class QueryService:
    """Thin client for the Data Explorer query runner of a Discourse forum."""

    def __init__(
        self,
        hostname: str,
        api_key: str,
        logger: Optional[DebugLogger] = None,
        timeout: Optional[float] = None,
    ):
        self.hostname = hostname
        self.api_key = api_key
        self.logger = logger or logging.getLogger(__name__)
        self.timeout = timeout

    def run_url(self, query_id: Union[str, int]) -> str:
        return f"https://{self.hostname}/admin/plugins/explorer/queries/{query_id}/run"

    def request_body(self, params: Optional[dict] = None) -> str:
        # The endpoint expects params as a JSON string inside the JSON body.
        encoded = json.dumps(params or {}, separators=(",", ":"), ensure_ascii=False)
        return json.dumps({"params": encoded}, indent=2, ensure_ascii=False)

    def execute(
        self, query_id: Union[str, int], params: Optional[dict] = None
    ) -> QueryResult:
        url = self.run_url(query_id)
        body = self.request_body(params)

        self.logger.debug(f"Submit POST request: {url}")
        debug_block(self.logger, "Body", body)

        response = requests.post(
            url,
            data=body.encode("utf-8"),
            headers={
                "api-key": self.api_key,
                "api-username": API_USERNAME,
                "content-type": "application/json; charset=UTF-8",
            },
            timeout=self.timeout,
        )

        debug_block(
            self.logger,
            "Response",
            f"{response.status_code} {response.reason}\n{response.text}",
        )

        if response.status_code != 200:
            raise QueryError(response.status_code, response.reason)

        return QueryResult.from_dict(response.json())


def execute_query(
    hostname: str,
    query_id: Union[str, int],
    params: Optional[dict],
    key: str,
    logger: Optional[DebugLogger] = None,
) -> QueryResult:
    """Run query ``query_id`` on ``hostname`` and return the parsed result."""
    return QueryService(hostname, key, logger=logger).execute(query_id, params)
