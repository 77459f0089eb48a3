import logging
import os
from logging import FATAL, getLogger

import structlog
from structlog import get_logger

ENV_LOG_LEVEL = "QUICKSHOP_LOG_LEVEL"


def setup_logging() -> None:
  """Configure logging for the application."""
  level_name = os.environ.get(ENV_LOG_LEVEL, "INFO").strip().upper() or "INFO"
  level = logging.getLevelNamesMapping().get(level_name, logging.INFO)
  structlog.configure(
    processors=[
      structlog.contextvars.merge_contextvars,
      structlog.processors.add_log_level,
      structlog.processors.TimeStamper(fmt="%H:%M:%S"),
      structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(level),
    cache_logger_on_first_use=True,
  )
  get_logger().debug("Logging initialized from environment", level=level_name)

  getLogger("httpx").setLevel(FATAL)
  getLogger("httpcore").setLevel(FATAL)
