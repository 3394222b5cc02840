"""
Structured logging for idea posting, ingestion, projection and matching.
"""

import logging
from typing import Any, Dict


def truncate(value: str, limit: int = 50) -> str:
    """Shorten long text for log details."""
    if value is None:
        return value
    return value[:limit] + "..." if len(value) > limit else value


class StructuredLogger:
    """Structured logger for sparkmap operations."""

    def __init__(self, name: str = "sparkmap"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status in ("failed", "error"):
            self.logger.error(message)
        elif status in ("dropped", "rejected", "stale"):
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_idea_operation(self, operation: str, idea_id: Any, author: str = None,
                           content: str = None, status: str = "success"):
        """Log an idea store operation."""
        details = {"idea_id": idea_id}
        if author is not None:
            details["author"] = author
        if content is not None:
            details["content"] = truncate(content)

        self.log_operation(f"idea.{operation}", status, details)

    def log_ingestion_drop(self, record_id: Any, reason: str):
        """Log a record dropped during embedding ingestion."""
        self.log_operation("ingestion.drop", "dropped", {"record_id": record_id, "reason": reason})

    def log_projection_run(self, population: int, status: str, start_time: float, end_time: float,
                           details: Dict[str, Any] = None):
        """Log a projection run with its duration."""
        duration_ms = round((end_time - start_time) * 1000, 2)
        log_details = {"population": population, "duration_ms": duration_ms}
        if details:
            log_details.update(details)

        self.log_operation("projection.run", status, log_details)

    def log_match(self, exclude_author: str, candidates: int, matches: int, threshold: float,
                  top_score: float = None):
        """Log a similarity match request."""
        log_details = {
            "exclude_author": exclude_author,
            "candidates": candidates,
            "matches": matches,
            "threshold": threshold
        }
        if top_score is not None:
            log_details["top_score"] = round(top_score, 4)

        self.log_operation("match.query", "found" if matches else "not_found", log_details)

    def log_embedding_call(self, provider: str, text: str, status: str = "success",
                           details: Dict[str, Any] = None):
        """Log a call to the embedding service."""
        log_details = {"provider": provider, "text": truncate(text, 10)}
        if details:
            log_details.update(details)

        self.log_operation("embedding.embed", status, log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
