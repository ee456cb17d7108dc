"""Pytest fixtures for Acmeflow test suite."""

import logging
import logging.handlers
from collections.abc import Generator
from typing import Any

import pytest

from acmeflow.crypto import create_csr, generate_rsa_key
from acmeflow.exceptions import NotRegisteredError
from acmeflow.models import Authorization, Challenge
from acmeflow.providers.base import ChallengeRecordProvider
from acmeflow.transport import AcmeTransport

CERTIFICATE_PEM = b"-----BEGIN CERTIFICATE-----\nMIIB\n-----END CERTIFICATE-----\n"


def make_authorization(domain: str, challenge_types: list[str] | None = None) -> Authorization:
    """Build a pending authorization offering the given challenge types."""
    if challenge_types is None:
        challenge_types = ["dns-01", "http-01"]
    return Authorization.model_validate(
        {
            "status": "pending",
            "identifier": {"type": "dns", "value": domain},
            "challenges": [
                {
                    "type": challenge_type,
                    "url": f"https://acme.test/chall/{domain}/{challenge_type}",
                    "status": "pending",
                    "token": f"token-{domain}-{challenge_type}",
                }
                for challenge_type in challenge_types
            ],
        }
    )


def domain_of(challenge: Challenge) -> str:
    """Recover the domain from a challenge built by make_authorization()."""
    return challenge.url.split("/")[-2]


class FakeTransport(AcmeTransport):
    """In-memory ACME transport recording every call.

    Authorizations are generated from the order payload and returned in
    reverse order, so tests catch any positional association.
    """

    def __init__(self, account_url: str | None = None) -> None:
        self.account_url = account_url
        self.calls: list[tuple[str, Any]] = []
        self.challenge_types: dict[str, list[str]] = {}
        self.invalid_domains: set[str] = set()

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def get_account_url(self) -> str | None:
        self.calls.append(("get_account_url", None))
        if self.account_url is None:
            raise NotRegisteredError("No account")
        return self.account_url

    async def create_account(self, payload: dict[str, Any]) -> Any:
        self.calls.append(("create_account", payload))
        self.account_url = "https://acme.test/acct/1"
        return {"status": "valid"}

    async def create_order(self, payload: dict[str, Any]) -> Any:
        self.calls.append(("create_order", payload))
        return {"identifiers": payload["identifiers"], "url": "https://acme.test/order/1"}

    async def get_authorizations(self, order: Any) -> list[Authorization]:
        self.calls.append(("get_authorizations", order))
        domains = [identifier["value"] for identifier in order["identifiers"]]
        return [
            make_authorization(domain, self.challenge_types.get(domain))
            for domain in reversed(domains)
        ]

    async def get_challenge_key_authorization(self, challenge: Challenge) -> str:
        self.calls.append(("get_challenge_key_authorization", challenge))
        return f"{challenge.token}.thumbprint"

    async def complete_challenge(self, challenge: Challenge) -> Any:
        self.calls.append(("complete_challenge", domain_of(challenge)))
        return {}

    async def wait_for_valid_status(self, challenge: Challenge) -> Any:
        domain = domain_of(challenge)
        self.calls.append(("wait_for_valid_status", domain))
        if domain in self.invalid_domains:
            raise RuntimeError(f"Challenge for {domain} is invalid")
        return {"status": "valid"}

    async def finalize_order(self, order: Any, csr: bytes) -> Any:
        self.calls.append(("finalize_order", csr))
        return order

    async def get_certificate(self, order: Any, preferred_chain: str | None = None) -> bytes:
        self.calls.append(("get_certificate", preferred_chain))
        return CERTIFICATE_PEM


class RecordingProvider(ChallengeRecordProvider):
    """Provider recording create/remove calls, with per-domain failures."""

    def __init__(self) -> None:
        self.created: list[str] = []
        self.removed: list[tuple[str, Any]] = []
        self.fail_create: set[str] = set()
        self.fail_remove: set[str] = set()

    async def create_record(
        self, authorization: Authorization, challenge: Challenge, key_authorization: str
    ) -> Any:
        domain = authorization.identifier.value
        if domain in self.fail_create:
            raise RuntimeError(f"create failed for {domain}")
        self.created.append(domain)
        return {"record": domain, "value": key_authorization}

    async def remove_record(
        self,
        authorization: Authorization,
        challenge: Challenge,
        key_authorization: str,
        record: Any,
    ) -> None:
        domain = authorization.identifier.value
        self.removed.append((domain, record))
        if domain in self.fail_remove:
            raise RuntimeError(f"remove failed for {domain}")


@pytest.fixture(scope="session")
def csr_key():
    """RSA key shared by CSR fixtures (key generation is slow)."""
    return generate_rsa_key(2048)


@pytest.fixture(scope="session")
def csr_pem(csr_key) -> bytes:
    """CSR with common name a.com and alt names a.com, b.com, c.com."""
    return create_csr(csr_key, ["a.com", "b.com", "c.com"])


@pytest.fixture
def transport() -> FakeTransport:
    """A fake transport with no registered account."""
    return FakeTransport()


@pytest.fixture
def provider() -> RecordingProvider:
    """A provider recording every call."""
    return RecordingProvider()


class LogCapture:
    """Helper class to capture and inspect log records."""

    def __init__(self, handler: logging.handlers.MemoryHandler) -> None:
        self._handler = handler

    @property
    def records(self) -> list[logging.LogRecord]:
        """Get all captured log records."""
        return self._handler.buffer

    def get_records(
        self, level: int | None = None, name: str | None = None
    ) -> list[logging.LogRecord]:
        """Get log records filtered by level and/or logger name.

        Args:
            level: Filter by log level (e.g., logging.INFO).
            name: Filter by logger name prefix (e.g., "acmeflow.issuance").

        Returns:
            List of matching log records.
        """
        records = self.records
        if level is not None:
            records = [r for r in records if r.levelno == level]
        if name is not None:
            records = [r for r in records if r.name.startswith(name)]
        return records

    def get_messages(self, level: int | None = None, name: str | None = None) -> list[str]:
        """Get log messages filtered by level and/or logger name."""
        return [r.getMessage() for r in self.get_records(level, name)]

    def clear(self) -> None:
        """Clear all captured log records."""
        self._handler.buffer.clear()


@pytest.fixture
def log_capture() -> Generator[LogCapture]:
    """Capture logs from the acmeflow library during a test.

    Usage:
        def test_something(log_capture):
            # do something that logs
            assert "Phase started" in log_capture.get_messages(logging.INFO)
    """
    # Capacity high enough that the buffer never flushes during a test
    handler = logging.handlers.MemoryHandler(capacity=10000)
    handler.setLevel(logging.DEBUG)

    acmeflow_logger = logging.getLogger("acmeflow")
    original_level = acmeflow_logger.level
    acmeflow_logger.setLevel(logging.DEBUG)
    acmeflow_logger.addHandler(handler)

    try:
        yield LogCapture(handler)
    finally:
        acmeflow_logger.removeHandler(handler)
        acmeflow_logger.setLevel(original_level)
        handler.close()
