import logging

from aiohttp import web
from aiohttp.typedefs import Handler

from sabmon.config import Configuration
from sabmon.log import log_request_event


def request_logger(config: Configuration):
    """Middleware logging every incoming request before it is dispatched."""

    @web.middleware
    async def middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        log_request_event(
            config,
            logging.INFO,
            f"Request: {request.method} {request.path}",
            request,
        )
        return await handler(request)

    return middleware
