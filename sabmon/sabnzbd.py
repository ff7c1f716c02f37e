import asyncio
import json
import logging

import aiohttp

from sabmon.config import UPSTREAM_TIMEOUT, Configuration
from sabmon.errors import (
    UpstreamConnectionError,
    UpstreamDecodeError,
    UpstreamStatusError,
)
from sabmon.log import log_request_event, redact
from sabmon.models import QueueStatus, parse_status


def build_queue_url(config: Configuration) -> str:
    return (
        f"{config.sabnzbd_url}/api?output=json"
        f"&apikey={config.sabnzbd_api_key}&mode=queue"
    )


async def fetch_status(config: Configuration) -> QueueStatus:
    """Fetch the current download queue from the SABnzbd API"""
    url = build_queue_url(config)
    api_key = config.sabnzbd_api_key
    log_request_event(
        config, logging.DEBUG, f"Requesting SABnzbd API: {redact(url, api_key)}"
    )

    timeout = aiohttp.ClientTimeout(total=UPSTREAM_TIMEOUT)
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url) as response:
                if response.status != 200:
                    logging.error(f"API returned non-OK status: {response.status}")
                    raise UpstreamStatusError(response.status)
                body = await response.read()
                log_request_event(
                    config,
                    logging.DEBUG,
                    f"API response received, status: {response.status} "
                    f"{response.reason}, length: {len(body)} bytes",
                )
    except asyncio.TimeoutError:
        logging.error(f"API request timed out after {UPSTREAM_TIMEOUT} seconds")
        raise UpstreamConnectionError(
            f"request timed out after {UPSTREAM_TIMEOUT} seconds"
        ) from None
    except (aiohttp.ClientError, ValueError) as e:
        # yarl raises ValueError for malformed base URLs
        message = redact(str(e), api_key)
        logging.error(f"API request failed: {message}")
        raise UpstreamConnectionError(message) from None

    try:
        return parse_status(json.loads(body))
    except ValueError as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
        logging.error(f"Failed to decode API response: {e}")
        raise UpstreamDecodeError(f"invalid JSON: {e}") from None
    except UpstreamDecodeError as e:
        logging.error(f"Failed to decode API response: {e}")
        raise
