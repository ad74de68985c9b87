"""
Orchestrator Package - Process Coordination Layer.

============================================================
PACKAGE OVERVIEW
============================================================
Controls start-up, the periodic collection loop and shutdown.
It has no collection logic of its own.

    +-----------------------------------------------------+
    |                   CrawlerRuntime                    |
    |-----------------------------------------------------|
    |  CrawlerConfig    |  env / .env configuration       |
    |  setup_logging    |  json or text log lines         |
    |  CycleScheduler   |  fixed-interval driver          |
    |  IngestionService |  one dual-source cycle per tick |
    +-----------------------------------------------------+

============================================================
"""

from orchestrator.models import CrawlerConfig
from orchestrator.scheduler import CycleScheduler
from orchestrator.core import CrawlerRuntime, build_ingestion_service, setup_logging


__all__ = [
    "CrawlerConfig",
    "CycleScheduler",
    "CrawlerRuntime",
    "build_ingestion_service",
    "setup_logging",
]
