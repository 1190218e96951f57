"""
Real HTTP clients.

These call the host application's backend once its endpoint and credentials
are configured (`submission.backend: http` in config/formflow.yml).

Keep each client as the ONLY place where its backend is called over HTTP.
"""
from .submission import HttpSubmissionClient

__all__ = ["HttpSubmissionClient"]
