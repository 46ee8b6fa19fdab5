from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from mailstats.core.config import Settings, split_csv
from mailstats.mailgun.errors import CredentialNotConfigured

log = logging.getLogger(__name__)

ENV_SUFFIX = "_MAILGUN_API_KEY"


def _norm(account: str) -> str:
    return (account or "").strip().upper()


@dataclass(frozen=True)
class CredentialResolver:
    """Account -> Mailgun API key, built once at startup.

    Accounts are matched case-insensitively (ACME == acme).
    """

    keys: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: Settings, *, environ: Mapping[str, str] | None = None) -> CredentialResolver:
        env = os.environ if environ is None else environ

        keys: dict[str, str] = {}
        # .env lines land in model_extra; process env overrides them.
        for source in (settings.model_extra or {}, env):
            for name, value in source.items():
                if name.upper().endswith(ENV_SUFFIX) and isinstance(value, str) and value:
                    account = _norm(name[: -len(ENV_SUFFIX)])
                    if account:
                        keys[account] = value
        # Explicit mapping wins over loose env vars.
        for account, value in (settings.MAILGUN_API_KEYS or {}).items():
            if value:
                keys[_norm(account)] = value

        resolver = cls(keys=keys)
        resolver.require(split_csv(settings.MAILGUN_ACCOUNTS))
        log.info("Loaded Mailgun credentials for %s account(s)", len(keys))
        return resolver

    def require(self, accounts: list[str]) -> None:
        """Fail fast when an expected account has no key."""
        for account in accounts:
            if _norm(account) not in self.keys:
                raise CredentialNotConfigured(account)

    def resolve(self, account: str) -> str:
        key = self.keys.get(_norm(account))
        if not key:
            raise CredentialNotConfigured(account)
        return key

    def accounts(self) -> list[str]:
        return sorted(self.keys)
