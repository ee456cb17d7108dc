"""Issuance configuration."""

from pydantic import BaseModel, Field, field_validator

from acmeflow.models import ChallengeType
from acmeflow.providers.base import ChallengeRecordProvider

DEFAULT_CHALLENGE_PRIORITY = [ChallengeType.HTTP_01.value, ChallengeType.DNS_01.value]


class IssueOptions(BaseModel):
    """Options for a single certificate issuance attempt.

    Attributes:
        csr: Certificate Signing Request, PEM or DER. A string is
            encoded as UTF-8.
        email: Contact address used when an account has to be registered.
        preferred_chain: Issuer common name of the alternate chain to
            download, if the server offers one.
        terms_of_service_agreed: Sent with account registration.
        skip_challenge_verification: Skip the local pre-flight check and
            go straight to asking the server to validate.
        challenge_priority: Challenge types in order of preference.
        http_challenge_port: Port the http-01 pre-flight check queries.
        provider: Creates and removes challenge records.
        stagger_delay: Seconds between consecutive provider calls, so
            the n-th domain waits ``n * stagger_delay``.
        settle_delay: Seconds to wait for records to propagate before
            verification.
    """

    csr: bytes = Field(min_length=1)
    email: str | None = None
    preferred_chain: str | None = None
    terms_of_service_agreed: bool = False
    skip_challenge_verification: bool = False
    challenge_priority: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CHALLENGE_PRIORITY)
    )
    http_challenge_port: int = Field(default=80, ge=1, le=65535)
    provider: ChallengeRecordProvider | None = None
    stagger_delay: float = Field(default=2.0, ge=0)
    settle_delay: float = Field(default=30.0, ge=0)

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("csr", mode="before")
    @classmethod
    def _encode_csr(cls, value: object) -> object:
        if isinstance(value, str):
            return value.encode("utf-8")
        return value

    def account_payload(self) -> dict:
        """Build the new-account request payload."""
        payload: dict = {"termsOfServiceAgreed": self.terms_of_service_agreed}
        if self.email:
            payload["contact"] = [f"mailto:{self.email}"]
        return payload
