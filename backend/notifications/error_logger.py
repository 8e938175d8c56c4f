"""
Error logging utility for notification system.

Writes a timestamped report file for each failed notification so the
failure can be inspected after the flush has moved on.
"""

import logging
import os
import uuid
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)


def log_notification_error(
    error_type: str, error_message: str, context: dict[str, Any] | None = None
) -> str:
    """
    Log a notification error to a timestamped file.

    Args:
        error_type: Type of error (e.g., 'broadcast', 'marking', 'claiming')
        error_message: The error message
        context: Optional dictionary with additional context (table, row_id, delivery_mode)

    Returns:
        Path to the log file created
    """
    log_dir = os.getenv(
        "NOTIFICATION_ERROR_LOG_DIR", os.path.join(os.path.dirname(__file__), "logs")
    )
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = os.path.join(
        log_dir, f"notification_error_{error_type}_{timestamp}_{uuid.uuid4().hex[:8]}.txt"
    )

    with open(filename, "w", encoding="utf-8") as f:
        f.write(f"Notification Error Report - {datetime.now()}\n")
        f.write("=" * 60 + "\n\n")
        f.write(f"Error Type: {error_type}\n")
        f.write(f"Error Message: {error_message}\n\n")

        if context:
            f.write("Context:\n")
            f.write("-" * 60 + "\n")
            for key, value in context.items():
                f.write(f"{key}: {value}\n")

    logger.debug("Wrote notification error report %s", filename)
    return filename
