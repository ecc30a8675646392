# Structured logging

import structlog


def configure_logging():
    """Configure structlog for JSON lines with ISO timestamps"""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
        ]
    )
