"""ASGI response sending: translates a perch Response to ASGI messages."""

import logging

from perch._internal.asgi import Send
from perch.http.response import Response

logger = logging.getLogger("perch.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def encode_headers(response: Response) -> list[tuple[bytes, bytes]]:
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    raw_headers.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
    )
    raw_headers.extend(
        (b"set-cookie", cookie.to_header_value().encode("latin-1")) for cookie in response.cookies
    )
    return raw_headers


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Send *response* as one start and one body message.

    For ``HEAD`` requests the content length of the full body is sent
    without the body.
    """
    raw_headers = encode_headers(response)
    body = response.body_bytes if _body_allowed(response.status) else b""
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": b"" if head else body,
        }
    )
