import logging
import sys

import jinja2
from aiohttp import web
from aiohttp_jinja2 import setup as jinja_setup
from aiohttp_jinja2 import template as jinja_template

from sabmon.config import (
    HOST,
    PORT,
    STATIC_DIR,
    TEMPLATE_DIR,
    Configuration,
    load_config,
)
from sabmon.errors import ConfigError, UpstreamError
from sabmon.log import log_request_event, setup_logging
from sabmon.middleware import request_logger
from sabmon.sabnzbd import fetch_status

CONFIG_KEY = web.AppKey("config", Configuration)

# --- Route Handlers ---


@jinja_template("index.html")
async def index(request: web.Request) -> dict:
    config = request.app[CONFIG_KEY]
    log_request_event(config, logging.INFO, "Serving index page", request)
    return {
        "refresh_interval": config.refresh_interval,
        "debug": config.debug,
    }


@jinja_template("status.html")
async def status(request: web.Request):
    config = request.app[CONFIG_KEY]
    log_request_event(config, logging.INFO, "Fetching SABnzbd status", request)

    try:
        queue_status = await fetch_status(config)
    except UpstreamError as e:
        log_request_event(
            config, logging.ERROR, f"Failed to fetch status: {e}", request
        )
        # Details stay in the log, the browser only gets a generic message
        return web.Response(text="Failed to fetch status", status=500)

    log_request_event(
        config, logging.INFO, "SABnzbd status fetched successfully", request
    )
    return {"status": queue_status["status"], "queue": queue_status["queue"]}


# --- App Factory and Entrypoint ---


def create_app(config: Configuration) -> web.Application:
    app = web.Application(middlewares=[request_logger(config)])
    app[CONFIG_KEY] = config
    jinja_setup(
        app,
        loader=jinja2.FileSystemLoader(TEMPLATE_DIR),
        autoescape=jinja2.select_autoescape(["html"]),
    )
    app.router.add_get("/", index)
    app.router.add_get("/status", status)
    app.router.add_static("/static", path=STATIC_DIR, name="static")
    return app


def main() -> None:
    setup_logging()
    try:
        config = load_config()
    except ConfigError as e:
        logging.critical(f"Configuration error: {e}")
        sys.exit(1)

    # --- Initialization ---
    setup_logging(config.debug)
    logging.info("Application starting")
    if config.debug:
        logging.info(f"Configuration: {config.redacted()}")

    app = create_app(config)

    logging.info(f"Server starting on http://localhost:{PORT}")
    web.run_app(app, host=HOST, port=PORT, access_log=None, print=None)


if __name__ == "__main__":
    main()
