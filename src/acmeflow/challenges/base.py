"""Base class for local challenge verifiers."""

from abc import ABC, abstractmethod

from acmeflow.models import Authorization, Challenge


class BaseVerifier(ABC):
    """Abstract base class for a single challenge type's pre-flight check.

    A verifier confirms that the key authorization for a challenge is
    publicly visible before the ACME server is asked to validate it.
    Verifiers only read from the network, so they are safe to retry and
    to run concurrently for several domains.
    """

    #: Challenge type this verifier handles (e.g. "http-01")
    challenge_type: str

    @abstractmethod
    async def verify(
        self,
        authorization: Authorization,
        challenge: Challenge,
        key_authorization: str,
    ) -> bool:
        """Check that the key authorization is publicly visible.

        Args:
            authorization: The authorization containing the challenge.
            challenge: The challenge to verify.
            key_authorization: The value expected at the challenge location.

        Returns:
            True when the expected value was found.

        Raises:
            VerificationError: If the value is missing, differs, or the
                lookup failed.
        """
        ...
