"""Logging infrastructure for pipeline-xray.

Prefect-integrated logging with YAML or default configuration.

Example:
    >>> from pipeline_xray.logging import get_pipeline_logger
    >>>
    >>> logger = get_pipeline_logger(__name__)
    >>> logger.info("Processing started")

Note:
    Never import Python's logging module directly in library code. Always
    use get_pipeline_logger() for consistent configuration.
"""

from .logging_config import LoggingConfig, get_pipeline_logger, setup_logging

__all__ = [
    "LoggingConfig",
    "setup_logging",
    "get_pipeline_logger",
]
