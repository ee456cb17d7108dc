"""Pydantic models for ACME resources handled during issuance."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

# =============================================================================
# ACME Protocol Enums (RFC 8555)
# =============================================================================


class ChallengeStatus(StrEnum):
    """Challenge statuses (RFC 8555 Section 7.1.6)."""

    PENDING = "pending"
    PROCESSING = "processing"
    VALID = "valid"
    INVALID = "invalid"


class AuthorizationStatus(StrEnum):
    """Authorization statuses (RFC 8555 Section 7.1.6)."""

    PENDING = "pending"
    VALID = "valid"
    INVALID = "invalid"
    DEACTIVATED = "deactivated"
    EXPIRED = "expired"
    REVOKED = "revoked"


class ChallengeType(StrEnum):
    """Challenge types (RFC 8555 Section 8)."""

    HTTP_01 = "http-01"
    DNS_01 = "dns-01"
    TLS_ALPN_01 = "tls-alpn-01"


class IdentifierType(StrEnum):
    """Identifier types (RFC 8555 Section 9.7.7)."""

    DNS = "dns"


# =============================================================================
# Pydantic Models
# =============================================================================


class Identifier(BaseModel):
    """ACME identifier (RFC 8555 Section 7.1.3)."""

    type: IdentifierType
    value: str


class Challenge(BaseModel):
    """ACME challenge resource (RFC 8555 Section 7.5.1).

    ``type`` is kept as a plain string so challenge types this library
    does not know about still parse and simply sort last during selection.
    """

    type: str
    url: str
    status: ChallengeStatus
    token: str
    validated: datetime | None = None
    error: dict[str, Any] | None = None


class Authorization(BaseModel):
    """ACME authorization resource (RFC 8555 Section 7.1.4)."""

    status: AuthorizationStatus
    identifier: Identifier
    challenges: list[Challenge]
    expires: datetime | None = None
    wildcard: bool | None = None


class CsrDomains(BaseModel):
    """Domain names read from a Certificate Signing Request."""

    common_name: str | None
    alt_names: list[str]

    @property
    def domains(self) -> list[str]:
        """Common name followed by alternative names, duplicates dropped."""
        names = [self.common_name] if self.common_name else []
        names.extend(self.alt_names)
        return list(dict.fromkeys(names))


class ChallengeInfo(BaseModel):
    """The challenge selected for one domain of an issuance attempt."""

    domain: str
    authorization: Authorization
    challenge: Challenge
    key_authorization: str


class ProvisionResult(BaseModel):
    """Outcome of creating the challenge record for one domain.

    Exactly one of ``record`` (on success) or ``error`` is meaningful;
    ``record`` itself is opaque and may legitimately be None.
    """

    info: ChallengeInfo
    record: Any = None
    error: Exception | None = None

    model_config = {"arbitrary_types_allowed": True}

    @property
    def ok(self) -> bool:
        """Whether the record was created."""
        return self.error is None
