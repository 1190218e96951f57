"""
External integrations used by form sessions.

- contracts/: the Submission Gateway interface and normalized response shapes
- clients/mocks/: timer-backed fake backend for development and tests
- clients/real_http/: httpx client for the host application's backend
"""
