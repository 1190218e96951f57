"""
Mock integration clients.

These clients return fake (but realistic) responses without calling any external API.
They are used when:
- the host application's backend is not available
- we want to exercise wizards end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients should return data shaped according to formflow/integrations/contracts/*
"""
from .submission import MockSubmissionClient

__all__ = ["MockSubmissionClient"]
