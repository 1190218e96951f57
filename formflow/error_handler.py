"""Error types and boundary error handling for form sessions."""
from dataclasses import asdict, dataclass
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """A draft could not be read from or written to the session storage slot.

    Raised inside the draft store and recovered there; never reaches the user.
    """

    def __init__(self, key: str, message: str):
        super().__init__(f"{message} (key={key})")
        self.key = key


@dataclass(frozen=True)
class SubmissionError:
    """Why the last submission failed; shown to the user as a session-level banner."""

    kind: str
    message: str
    retryable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        logger.error("Unhandled exception in form session: %s", exc, exc_info=True)
        return {
            "error": "internal_error",
            "message": "An internal error occurred while processing your request. Please try again later.",
            "metadata": {"error": str(exc), "context": context or {}},
        }
