from .submission import SubmissionContract, SubmissionErrorKind, SubmissionGateway, SubmissionOutcome

__all__ = [
    "SubmissionContract",
    "SubmissionErrorKind",
    "SubmissionGateway",
    "SubmissionOutcome",
]
