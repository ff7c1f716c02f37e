import logging
import sys
from typing import Optional

from aiohttp import web

from sabmon.config import LOG_LEVEL, REDACTED, Configuration


def setup_logging(debug: bool = False):
    """
    Configures the logging for the application.
    """
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)


def redact(text: str, secret: str) -> str:
    if not secret:
        return text
    return text.replace(secret, REDACTED)


def client_ip(request: web.BaseRequest) -> str:
    """Best-effort client address, honouring X-Forwarded-For from proxies."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        # The first address in the list is the client
        return forwarded.split(",")[0].strip()

    ip = request.remote or ""
    if ip.startswith("["):
        # [::1]:port
        return ip[1:].split("]")[0]
    if ip.count(":") == 1:
        ip = ip.split(":")[0]
    return ip


def log_request_event(
    config: Configuration,
    level: int,
    message: str,
    request: Optional[web.BaseRequest] = None,
) -> None:
    if level <= logging.DEBUG and not config.debug:
        return

    logging.log(level, message)

    if config.log_client_info and request is not None:
        logging.log(
            level,
            f"  Client: {client_ip(request)}, "
            f"User-Agent: {request.headers.get('User-Agent', '')}, "
            f"URI: {request.path_qs}",
        )
