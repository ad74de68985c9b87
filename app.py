#!/usr/bin/env python3
"""
Market Crawler - Main Application Entry Point.

============================================================
SINGLE ENTRYPOINT
============================================================
Collects crypto tickers and market indices every interval and
appends them to CSV files under the data directory.

- No command-line flags
- Runs until SIGINT/SIGTERM
- Configured through environment variables or a .env file

============================================================
USAGE
============================================================
Direct execution:
    python app.py

Environment-based configuration:
    CRAWLER_INTERVAL_MINUTES=15 CRAWLER_DATA_DIR=data python app.py

============================================================
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.absolute()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.exceptions import ConfigurationError
from orchestrator.core import CrawlerRuntime, setup_logging
from orchestrator.models import CrawlerConfig


async def run_application(config: CrawlerConfig) -> int:
    """
    Run the crawler until stopped.

    Returns:
        Exit code
    """
    logger = logging.getLogger("runtime")
    runtime = CrawlerRuntime(config)

    try:
        await runtime.run_forever()
        return 0
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


def main() -> int:
    """Main entry point."""
    try:
        config = CrawlerConfig.from_env()
    except ConfigurationError as e:
        print(f"Error: {e.to_log_format()}", file=sys.stderr)
        return 1

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    setup_logging(config.log_level, config.log_format)

    try:
        return asyncio.run(run_application(config))
    except KeyboardInterrupt:
        return 130


# ============================================================
# ENTRY POINT
# ============================================================

if __name__ == "__main__":
    sys.exit(main())
