"""ASGI middleware adding the tracking snippet to rendered HTML pages."""

import re
from typing import TYPE_CHECKING

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from pagetrack.core.errors import PageTrackError
from pagetrack.core.logging import get_logger

from .auth import user_from_scope


if TYPE_CHECKING:
    from .plugin import AnalyticsPlugin


logger = get_logger(__name__)

_HEAD_CLOSE_RE = re.compile(r"</head\s*>", re.IGNORECASE)
_BODY_CLOSE_RE = re.compile(r"</body\s*>", re.IGNORECASE)


def insert_markup(page: str, markup: str) -> str:
    """Insert ``markup`` before ``</head>``, else before ``</body>``, else at the end."""
    for pattern in (_HEAD_CLOSE_RE, _BODY_CLOSE_RE):
        match = pattern.search(page)
        if match:
            return page[: match.start()] + markup + "\n" + page[match.start() :]
    return page + markup


# Responses that never carry a body
_BODYLESS_STATUSES = frozenset({204, 205, 304})


def _may_have_body(status: int) -> bool:
    return status >= 200 and status not in _BODYLESS_STATUSES


def _is_plain_html(headers: Headers) -> bool:
    content_type = headers.get("content-type", "")
    return (
        content_type.split(";", 1)[0].strip().lower() == "text/html"
        and "content-encoding" not in headers
    )


def _charset(headers: Headers) -> str:
    for part in headers.get("content-type", "").split(";")[1:]:
        name, _, value = part.partition("=")
        if name.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return "utf-8"


class SnippetInjectionMiddleware:
    """Buffers HTML responses and adds the plugin's render output to them.

    Non-HTML responses, compressed bodies, bodyless statuses (1xx, 204, 205,
    304), HEAD requests and paths under ``skip_prefixes`` pass through
    untouched.
    """

    def __init__(
        self,
        app: ASGIApp,
        plugin: "AnalyticsPlugin",
        skip_prefixes: tuple[str, ...] = (),
    ):
        """Initialize the snippet injection middleware.

        Args:
            app: The ASGI application
            plugin: Plugin providing the ``on_render`` hook
            skip_prefixes: Path prefixes that are never instrumented
        """
        self.app = app
        self.plugin = plugin
        self.skip_prefixes = tuple(p for p in skip_prefixes if p)

    def _skipped(self, path: str) -> bool:
        return any(
            path == prefix or path.startswith(prefix + "/")
            for prefix in self.skip_prefixes
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI application entrypoint."""
        if (
            scope["type"] != "http"
            or scope.get("method") == "HEAD"
            or self._skipped(scope.get("path", ""))
        ):
            await self.app(scope, receive, send)
            return

        start_message: Message | None = None
        body_parts: list[bytes] = []
        passthrough = False

        async def send_wrapper(message: Message) -> None:
            nonlocal start_message, passthrough

            if message["type"] == "http.response.start":
                if not _may_have_body(message["status"]) or not _is_plain_html(
                    Headers(raw=message.get("headers", []))
                ):
                    passthrough = True
                    await send(message)
                    return
                start_message = message
                return

            if (
                message["type"] == "http.response.body"
                and not passthrough
                and start_message is not None
            ):
                body_parts.append(message.get("body", b""))
                if message.get("more_body", False):
                    return
                body = await self._render(scope, start_message, b"".join(body_parts))
                headers = MutableHeaders(raw=list(start_message.get("headers", [])))
                headers["content-length"] = str(len(body))
                start_message["headers"] = headers.raw
                await send(start_message)
                await send({"type": "http.response.body", "body": body})
                return

            await send(message)

        await self.app(scope, receive, send_wrapper)

    async def _render(self, scope: Scope, start_message: Message, body: bytes) -> bytes:
        """Return ``body`` with the snippet added, or unchanged when there is none."""
        user = user_from_scope(scope)
        try:
            markup = await self.plugin.on_render(user)
        except PageTrackError as e:
            logger.error(
                "snippet_render_failed",
                path=scope.get("path"),
                error=str(e),
                error_type=e.error_type,
                exc_info=e,
            )
            return body
        if not markup:
            return body

        charset = _charset(Headers(raw=start_message.get("headers", [])))
        try:
            page = body.decode(charset)
        except (LookupError, UnicodeDecodeError) as e:
            logger.warning(
                "snippet_page_undecodable",
                path=scope.get("path"),
                charset=charset,
                error=str(e),
            )
            return body

        logger.debug("snippet_injected", path=scope.get("path"))
        return insert_markup(page, markup).encode(charset, errors="xmlcharrefreplace")
