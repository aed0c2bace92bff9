#!/usr/bin/env python3
"""Entry point for the Catpoint security system."""

import os
import sys
import traceback

from catpoint_security.config_manager import ConfigManager
from catpoint_security.logging_config import get_logger, setup_logging


def main():
    """Main entry point for the security system."""
    config_manager = ConfigManager(os.environ.get("CATPOINT_CONFIG"))
    config = config_manager.get_config()

    setup_logging(config.log_level, config.log_dir)
    logger = get_logger("start_security")
    logger.info("Starting Catpoint Security System")

    # Log Python version and environment info
    logger.info(f"Python version: {sys.version}")
    logger.info(f"Working directory: {os.getcwd()}")

    if not config_manager.validate_config():
        logger.error(f"Invalid configuration in {config_manager.config_path}")
        return 1

    try:
        from catpoint_security.web.app import build_web_app

        web_app = build_web_app(config_manager)
        web_app.run(host=config.web_host, port=config.web_port)
        return 0

    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
        return 0
    except Exception as e:
        logger.error(f"Security system failed: {e}")
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
