"""
Structured Logging & Observability
Production-grade logging that's both human-readable and machine-parseable.
"""
import sys
from loguru import logger
from typing import Any
from src.config import get_settings


def configure_logging():
    """
    Configure loguru for production observability.

    In development: Human-readable colorized output
    In production: Structured JSON logs for ingestion (ELK, Datadog, etc.)
    """
    settings = get_settings()

    # Remove default handler
    logger.remove()

    # Development mode: Beautiful console output
    if not settings.enable_structured_logging:
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "{message}"
            ),
            level=settings.log_level,
            colorize=True,
        )
    # Production mode: JSON structured logs
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level=settings.log_level,
            serialize=True,  # Output as JSON
        )

    logger.info(f"Logging configured: level={settings.log_level}, structured={settings.enable_structured_logging}")


def log_conversation_event(
    event_type: str,
    conversation_id: str,
    **details: Any
):
    """
    Log conversation lifecycle events for audit and analytics.

    Examples:
        - Conversation created / removed
        - Robot message shared with the customer
        - Summarization watermark advanced

    Args:
        event_type: Type of event (e.g., "conversation_created", "robot_message_shared")
        conversation_id: The conversation involved
        **details: Event-specific data
    """
    log_data = {
        "event_type": event_type,
        "conversation_id": conversation_id,
        **details
    }

    logger.bind(**log_data).info("Conversation Event: {}", event_type)
