#!/usr/bin/env python3
"""
Easel Application Starter
Initializes the Application (storage, services, rebuild orchestrator) then starts the API server.
"""

import logging
import signal
import sys

import uvicorn

from easel.app import application
from easel.interfaces.api.api_app import api_app, mount_assets, mount_site

# Configure logging once for the whole process
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def shutdown_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    logging.info(f"Received signal {signum}, shutting down...")
    application.stop()
    sys.exit(0)


def main() -> None:
    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    logging.info("[Application] Starting Easel...")
    application.start()

    mount_assets(api_app, application.assets_dir)
    if application.serve_site and application.live_dir:
        mount_site(api_app, application.live_dir)

    logging.info(
        "Effective config: data_dir=%s api=%s:%d live_dir=%s",
        application.data_dir,
        application.api_host,
        application.api_port,
        application.live_dir,
    )

    try:
        uvicorn.run(
            api_app,
            host=application.api_host,
            port=application.api_port,
            timeout_keep_alive=90,
            log_level="info",
        )
    finally:
        logging.info("API server stopped, cleaning up...")
        application.stop()


if __name__ == "__main__":
    main()
