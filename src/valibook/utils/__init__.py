"""Shared utilities: configuration, logging, timing."""

from valibook.utils.config import Config, get_config, load_config, set_config
from valibook.utils.logging import get_logger, setup_logging
from valibook.utils.timing import TimingContext, get_latency_tracker, timed

__all__ = [
    "Config",
    "TimingContext",
    "get_config",
    "get_latency_tracker",
    "get_logger",
    "load_config",
    "set_config",
    "setup_logging",
    "timed",
]
