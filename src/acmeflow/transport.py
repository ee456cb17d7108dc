"""Abstract ACME transport consumed by the issuance workflow."""

from abc import ABC, abstractmethod
from typing import Any

from acmeflow.challenges import ChallengeVerifier
from acmeflow.models import Authorization, Challenge


class AcmeTransport(ABC):
    """Interface to an already-authenticated ACME client.

    Implementations own the wire protocol: directory discovery, JWS
    signing, nonces, polling and retries. Errors they raise are passed
    through the issuance workflow unchanged.

    Orders are opaque to the workflow; whatever create_order() returns
    is handed back to get_authorizations(), finalize_order() and
    get_certificate().
    """

    @abstractmethod
    def get_account_url(self) -> str | None:
        """Get the URL of the account this client is bound to.

        Returns:
            The account URL, or None if not registered.

        Raises:
            NotRegisteredError: If no account is known yet. Any other
                exception is treated the same way by the issuance workflow.
        """
        ...

    @abstractmethod
    async def create_account(self, payload: dict[str, Any]) -> Any:
        """Register an account (RFC 8555 Section 7.3).

        Args:
            payload: ``{"termsOfServiceAgreed": bool, "contact": [...]}``,
                ``contact`` only present when an email was configured.
        """
        ...

    @abstractmethod
    async def create_order(self, payload: dict[str, Any]) -> Any:
        """Place a new order (RFC 8555 Section 7.4).

        Args:
            payload: ``{"identifiers": [{"type": "dns", "value": ...}, ...]}``.

        Returns:
            The order resource.
        """
        ...

    @abstractmethod
    async def get_authorizations(self, order: Any) -> list[Authorization]:
        """Fetch every authorization of an order.

        The returned order is not guaranteed to match the identifiers'.
        """
        ...

    @abstractmethod
    async def get_challenge_key_authorization(self, challenge: Challenge) -> str:
        """Compute the value to publish for a challenge.

        For dns-01 this is the digest placed in the TXT record; for other
        types the plain ``token.thumbprint`` key authorization.
        """
        ...

    async def verify_challenge(
        self,
        authorization: Authorization,
        challenge: Challenge,
        *,
        verifier: ChallengeVerifier | None = None,
    ) -> bool:
        """Check locally that a challenge response is publicly visible.

        The default implementation computes the key authorization through
        this transport and runs the matching local verifier.

        Args:
            authorization: The authorization containing the challenge.
            challenge: The challenge to check.
            verifier: Verifier to run. Without one, a ChallengeVerifier
                with default settings is used, so http-01 is checked on
                port 80; pass ``ChallengeVerifier(http_port=...)`` for
                another port.

        Raises:
            VerificationError: If the response is not visible.
        """
        if verifier is None:
            verifier = ChallengeVerifier()
        key_authorization = await self.get_challenge_key_authorization(challenge)
        return await verifier.verify(
            challenge.type, authorization, challenge, key_authorization
        )

    @abstractmethod
    async def complete_challenge(self, challenge: Challenge) -> Any:
        """Notify the server that the challenge is ready for validation."""
        ...

    @abstractmethod
    async def wait_for_valid_status(self, challenge: Challenge) -> Any:
        """Poll the challenge until the server reports it valid.

        Raises:
            Exception: If the challenge reaches a terminal failure status
                or polling gives up.
        """
        ...

    @abstractmethod
    async def finalize_order(self, order: Any, csr: bytes) -> Any:
        """Submit the CSR to finalize an order (RFC 8555 Section 7.4)."""
        ...

    @abstractmethod
    async def get_certificate(self, order: Any, preferred_chain: str | None = None) -> bytes:
        """Download the issued certificate chain.

        Args:
            order: The finalized order.
            preferred_chain: Issuer common name of an alternate chain to
                prefer, when the server offers alternates.

        Returns:
            The PEM certificate chain.
        """
        ...
