"""Request/response tracing using the Rich console.

Dumps outgoing requests and incoming responses when tracing is enabled.
Bodies are summarized, never read: a byte stream belongs to whoever sends
or consumes it and can only be read once.
"""

from typing import Optional

import httpx
from rich.console import Console

from bucketwire.body import is_stream
from bucketwire.models import Request

STREAMED_BODY = "STREAMED BODY"


def describe_payload(payload) -> str:
    """Summary of a request payload that does not touch streams."""
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return f"<bytes of size {len(payload)}>"
    if is_stream(payload):
        return f"<{STREAMED_BODY.lower()}: {type(payload).__name__}>"
    return str(payload)


class Tracer:
    """Diagnostic dump of HTTP traffic.

    Args:
        enabled: Trace nothing unless True.
        console: Rich console to write to (stdout by default).
    """

    def __init__(self, enabled: bool = False, console: Optional[Console] = None):
        self.enabled = enabled
        # Plain output: headers and bodies must not be interpreted as markup
        self.console = console or Console(highlight=False, soft_wrap=True)

    def _emit(self, lines: list[str]) -> None:
        self.console.print("\n".join(lines), markup=False, highlight=False, emoji=False)

    def trace_request(self, request: Request) -> None:
        if not self.enabled:
            return

        lines = [f"REQUEST: {request.method} {request.url}"]
        lines.extend(f"{key}: {value}" for key, value in request.headers.items())
        lines.append(describe_payload(request.payload))
        self._emit(lines)

    def trace_response(self, response: httpx.Response, streamed: bool = False) -> None:
        """Dump a response. Streamed bodies are labelled, not read."""
        if not self.enabled:
            return

        lines = [f"RESPONSE: {response.status_code} {response.reason_phrase}"]
        lines.extend(f"{key}: {value}" for key, value in response.headers.items())
        lines.append(STREAMED_BODY if streamed else response.text)
        self._emit(lines)
