"""ASGI handler: translates ASGI scope/messages to perch types.

The only component that touches raw ASGI directly. Reads and parses the
body, builds the request ``Context``, installs it together with a fresh
dispatch scope, runs the page lifecycle and sends the response back
through ASGI ``send()``.
"""

import logging
from contextvars import Token

from perch._internal.asgi import Receive, Scope, Send
from perch.config import AppConfig
from perch.context import Context, context_var, negotiate_locale
from perch.dispatch import pop_scope, push_scope
from perch.http.forms import FormData
from perch.http.params import RequestParameters
from perch.http.request import Request
from perch.http.response import Response
from perch.server.lifecycle import PageProcessor
from perch.server.sender import send_response
from perch.sessions import Session, SessionStore

logger = logging.getLogger("perch.server")


def build_context(
    request: Request,
    form: FormData,
    config: AppConfig,
    processor: PageProcessor,
    session_store: SessionStore | None,
) -> Context:
    """Merge query and body parameters and load the session for *request*."""
    parameters = RequestParameters.from_query_string(request.query_string)
    parameters.merge(form.fields)
    session = session_store.load(request) if session_store is not None else Session()
    return Context(
        method=request.method,
        resource_path=request.path,
        parameters=parameters,
        headers=request.headers,
        session=session,
        files=dict(form.files),
        locale=negotiate_locale(request.headers.get("accept-language"), config.locale),
        config=config,
        request=request,
        renderer=processor.renderer,
    )


def _plain_error(status: int, detail: str) -> Response:
    return Response(body=detail, status=status, content_type="text/plain; charset=utf-8")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    config: AppConfig,
    processor: PageProcessor,
    session_store: SessionStore | None,
) -> None:
    """Process a single HTTP request through the page lifecycle."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    length = request.content_length
    if length is not None and length > config.max_content_length:
        logger.info("413 %s %s: %d bytes", request.method, request.path, length)
        await send_response(_plain_error(413, "Request body too large"), send)
        return

    try:
        form = await request.form()
    except ValueError as exc:
        logger.info("400 %s %s: %s", request.method, request.path, exc)
        await send_response(_plain_error(400, "Malformed request body"), send)
        return

    ctx = build_context(request, form, config, processor, session_store)
    token: Token[Context] = context_var.set(ctx)
    push_scope()
    try:
        response = processor.process(ctx)
    finally:
        pop_scope()
        context_var.reset(token)

    if session_store is not None:
        response = session_store.save(response, ctx.session)
    await send_response(response, send, head=request.method == "HEAD")
