"""
Structured logging with correlation IDs for background jobs.

Provides a consistent logging setup for the gateway, the scanner
and the CLI so that a cache load can be traced end to end.
"""

import logging
import uuid


def setup_logging(name: str, level: str = "INFO") -> logging.Logger:
    """
    Configure process-wide logging and return a named logger.

    Args:
        name: Logger name (e.g. 'archmap.gateway').
        level: Log level string (e.g. 'INFO', 'DEBUG').

    Returns:
        Configured logger instance.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s  %(name)-30s  %(levelname)-7s  %(message)s",
    )
    return logging.getLogger(name)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for tracing a background job."""
    return uuid.uuid4().hex[:12]
