"""
Request tracing for the storefront.

Every request runs under a RequestTrace taken from the incoming W3C
`traceparent` header or started fresh. The logger stamps entries with its
trace id, and outgoing events carry it as their correlation id.
"""

import re
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

_TRACEPARENT = re.compile(r'^00-(?P<trace>[0-9a-f]{32})-(?P<span>[0-9a-f]{16})-(?P<flags>[0-9a-f]{2})$')


@dataclass(frozen=True)
class RequestTrace:
    trace_id: str
    span_id: str
    flags: str = "01"

    @classmethod
    def start(cls) -> "RequestTrace":
        return cls(trace_id=uuid.uuid4().hex, span_id=uuid.uuid4().hex[:16])

    @classmethod
    def parse(cls, header: Optional[str]) -> Optional["RequestTrace"]:
        """Read a version-00 traceparent; all-zero ids are rejected"""
        match = _TRACEPARENT.match(header or "")
        if not match:
            return None
        if set(match["trace"]) == {"0"} or set(match["span"]) == {"0"}:
            return None
        return cls(trace_id=match["trace"], span_id=match["span"], flags=match["flags"])

    def child(self) -> "RequestTrace":
        """Same trace, new span: used for calls this service makes"""
        return RequestTrace(trace_id=self.trace_id, span_id=uuid.uuid4().hex[:16], flags=self.flags)

    @property
    def traceparent(self) -> str:
        return f"00-{self.trace_id}-{self.span_id}-{self.flags}"


_current_trace: ContextVar[Optional[RequestTrace]] = ContextVar("storefront_trace", default=None)


def current_trace() -> Optional[RequestTrace]:
    return _current_trace.get()


def get_trace_id() -> Optional[str]:
    trace = _current_trace.get()
    return trace.trace_id if trace else None


class TraceContextMiddleware(BaseHTTPMiddleware):
    """Binds a RequestTrace to the request and echoes it on the response"""

    async def dispatch(self, request: Request, call_next):
        trace = RequestTrace.parse(request.headers.get("traceparent")) or RequestTrace.start()
        token = _current_trace.set(trace)
        request.state.trace = trace

        try:
            response = await call_next(request)
        finally:
            _current_trace.reset(token)

        response.headers["traceparent"] = trace.traceparent
        response.headers["X-Trace-ID"] = trace.trace_id
        return response
