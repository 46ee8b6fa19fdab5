from __future__ import annotations


class CredentialNotConfigured(Exception):
    def __init__(self, account: str):
        super().__init__(f"Mailgun API key for account {account} is not configured")
        self.account = account


class UnsafePaginationURL(ValueError):
    pass


def describe(exc: BaseException) -> str:
    """Human-readable failure text (some httpx errors have an empty str())."""
    return str(exc) or type(exc).__name__
