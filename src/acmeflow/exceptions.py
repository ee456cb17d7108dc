"""Issuance exceptions."""


class IssuanceError(Exception):
    """Base exception for errors raised by the issuance workflow."""

    pass


class ConfigurationError(IssuanceError):
    """Invalid or incomplete issuance configuration.

    Covers a missing CSR, a CSR without any domain names, a missing record
    provider, and authorizations the workflow cannot act upon.
    """

    pass


class ChallengeSelectionError(ConfigurationError):
    """An authorization offered no challenge to select."""

    def __init__(self, domain: str):
        self.domain = domain
        super().__init__(f"Unable to select challenge for {domain}, no challenge found")


class UnsupportedChallengeError(ConfigurationError):
    """No local verifier is registered for the challenge type."""

    def __init__(self, challenge_type: str):
        self.challenge_type = challenge_type
        super().__init__(f"No verifier available for challenge type: {challenge_type}")


class NotRegisteredError(IssuanceError):
    """Raised by a transport when no account URL is known yet."""

    pass


class ProvisioningError(IssuanceError):
    """The record provider failed to create a challenge record.

    The provider's original exception is chained as ``__cause__``.
    """

    def __init__(self, domain: str, detail: str):
        self.domain = domain
        self.detail = detail
        super().__init__(f"Failed to create challenge record for {domain}: {detail}")


class VerificationError(IssuanceError):
    """A challenge response is not publicly visible for a domain.

    Raised by the local pre-flight verifiers before the ACME server is
    asked to validate the challenge.
    """

    def __init__(self, domain: str, challenge_type: str, detail: str):
        self.domain = domain
        self.challenge_type = challenge_type
        self.detail = detail
        super().__init__(f"{challenge_type} verification failed for {domain}: {detail}")
