# Stub WEBSERVICES server for client tests
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from wwsvc.client.infrastructure.transport import RawResponse, RequestDescriptor
from wwsvc.common.crypto import sign
from wwsvc.common.exceptions import TransportError

TICKET = "tkt-123"
APP_ID = "app-1"


@dataclass
class StubState:
    vendor_hash: str
    app_hash: str
    secret: str
    revision: int
    articles: list[dict[str, str]]
    tickets: set[str] = field(default_factory=set)
    registrations: int = 0
    deregistrations: list[str] = field(default_factory=list)
    calls: list[dict[str, Any]] = field(default_factory=list)
    request_ids: list[int] = field(default_factory=list)


def _com_result(status: int = 200, info: str = "", code: str = "") -> dict[str, Any]:
    return {"STATUS": status, "CODE": code or ("OK" if status == 200 else "ERROR"), "INFO": info}


def _error(status: int, info: str) -> JSONResponse:
    return JSONResponse({"COMRESULT": _com_result(status, info)})


def make_articles(count: int) -> list[dict[str, str]]:
    return [
        {"ART_1_25": f"A{i:04d}", "ART_6_40": f"Article {i}"} for i in range(1, count + 1)
    ]


def create_stub_app(
    vendor_hash: str = "V1",
    app_hash: str = "A1",
    secret: str = "s3cr3t",
    revision: int = 1,
    article_count: int = 5,
) -> FastAPI:
    """Build a FastAPI app speaking the REGISTER / EXECJSON / DEREGISTER protocol."""
    app = FastAPI()
    state = StubState(
        vendor_hash=vendor_hash,
        app_hash=app_hash,
        secret=secret,
        revision=revision,
        articles=make_articles(article_count),
    )
    app.state.stub = state

    @app.get("/WWSVC/WWSERVICE/REGISTER/{vendor}/{app_hash}/{secret}/{revision}/")
    def register(
        vendor: str, app_hash: str, secret: str, revision: int, request: Request
    ) -> JSONResponse:
        if (vendor, app_hash, secret, revision) != (
            state.vendor_hash,
            state.app_hash,
            state.secret,
            state.revision,
        ):
            return _error(403, "unknown application")
        timestamp = request.headers.get("WWSVC-TS", "")
        if request.headers.get("WWSVC-HASH") != sign(state.secret, None, timestamp):
            return _error(403, "invalid signature")
        state.registrations += 1
        state.tickets.add(TICKET)
        return JSONResponse(
            {
                "COMRESULT": _com_result(),
                "SERVICEPASS": {"PASSID": TICKET, "APPID": APP_ID},
            }
        )

    @app.get("/WWSVC/WWSERVICE/DEREGISTER/{ticket}/")
    def deregister(ticket: str) -> JSONResponse:
        state.deregistrations.append(ticket)
        if ticket not in state.tickets:
            return _error(401, "service pass unknown")
        state.tickets.discard(ticket)
        return JSONResponse({"COMRESULT": _com_result()})

    @app.api_route("/WWSVC/EXECJSON", methods=["GET", "POST", "PUT", "DELETE"])
    async def execjson(request: Request) -> JSONResponse:
        body = json.loads(await request.body())
        function = body["WWSVC_FUNCTION"]
        pass_info = body["WWSVC_PASSINFO"]
        headers = request.headers
        state.calls.append(
            {
                "method": request.method,
                "function": function["FUNCTIONNAME"],
                "parameters": {p["PNAME"]: p["PCONTENT"] for p in function["PARAMETER"]},
                "headers": dict(headers),
            }
        )

        ticket = pass_info["SERVICEPASS"]
        if ticket not in state.tickets:
            return _error(401, "service pass expired")
        expected = sign(state.secret, ticket, headers.get("WWSVC-TS", ""))
        if headers.get("WWSVC-HASH") != expected or pass_info["APPHASH"] != expected:
            return _error(403, "invalid signature")
        state.request_ids.append(int(headers.get("WWSVC-REQID", "0")))

        if function["FUNCTIONNAME"] != "ARTIKEL.GET":
            return _error(404, f"unknown function {function['FUNCTIONNAME']}")

        max_lines = int(headers.get("WWSVC-ACCEPT-RESULT-MAX-LINES", "1000"))
        cursor = headers.get("WWSVC-CURSOR")
        offset = 0
        if cursor and cursor != "CREATE":
            offset = int(cursor.removeprefix("c-"))
        page = state.articles[offset : offset + max_lines]

        response_headers = {}
        if cursor:
            next_offset = offset + len(page)
            response_headers["WWSVC-CURSOR"] = (
                "CLOSED" if next_offset >= len(state.articles) else f"c-{next_offset}"
            )
        return JSONResponse(
            {"COMRESULT": _com_result(), "ARTIKELLISTE": {"ARTIKEL": page}},
            headers=response_headers,
        )

    return app


class TestClientSession:
    """requests.Session look-alike that routes calls into a FastAPI TestClient."""

    __test__ = False

    def __init__(self, client: Any) -> None:
        self.client = client
        self.closed = False

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        data: bytes | None = None,
        timeout: float | None = None,
    ) -> Any:
        return self.client.request(method, url, headers=headers, content=data)

    def close(self) -> None:
        self.closed = True


class FakeTransport:
    """Records descriptors and replays canned responses."""

    def __init__(self, responses: list[RawResponse | Exception] | None = None) -> None:
        self.responses = list(responses or [])
        self.sent: list[RequestDescriptor] = []
        self.closed = False

    def queue(self, payload: Any, status_code: int = 200, headers: dict | None = None) -> None:
        self.responses.append(json_response(payload, status_code, headers))

    def send(self, descriptor: RequestDescriptor) -> RawResponse:
        self.sent.append(descriptor)
        if not self.responses:
            msg = "no response queued"
            raise TransportError(msg)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


def json_response(
    payload: Any, status_code: int = 200, headers: dict | None = None
) -> RawResponse:
    return RawResponse(
        status_code=status_code,
        headers=headers or {"Content-Type": "application/json"},
        content=json.dumps(payload).encode("utf-8"),
    )


def ok(**extra: Any) -> dict[str, Any]:
    return {"COMRESULT": {"STATUS": 200, "CODE": "OK", "INFO": ""}, **extra}


REGISTER_OK = ok(SERVICEPASS={"PASSID": TICKET, "APPID": APP_ID})
