#!/usr/bin/env python3
"""Script to start the Bigtable service broker API server."""

import sys
import logging
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bigtable_broker.api.service_broker import run_server
from bigtable_broker.logging_config import setup_logging
from bigtable_broker.config import config


def main():
    """Start the API server."""
    setup_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting Bigtable broker API server...")
    logger.info(
        f"Server configuration: host={config.api.host}, port={config.api.port}, "
        f"auth={'enabled' if config.api.username else 'disabled'}, "
        f"database={config.database.type}, project={config.gcp.project_id}"
    )

    try:
        run_server()
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
