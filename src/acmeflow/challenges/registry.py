"""Challenge verifier dispatch by challenge type."""

from acmeflow.challenges.base import BaseVerifier
from acmeflow.challenges.dns01 import Dns01Verifier
from acmeflow.challenges.http01 import Http01Verifier
from acmeflow.exceptions import UnsupportedChallengeError
from acmeflow.models import Authorization, Challenge


class ChallengeVerifier:
    """Run the local pre-flight check matching a challenge's type.

    Ships with http-01 and dns-01 verifiers. Additional or replacement
    verifiers can be passed in or added with register().

    Args:
        http_port: Port used by the default http-01 verifier.
        verifiers: Verifiers to use instead of the defaults.
    """

    def __init__(
        self,
        http_port: int = 80,
        verifiers: list[BaseVerifier] | None = None,
    ):
        if verifiers is None:
            verifiers = [Http01Verifier(port=http_port), Dns01Verifier()]
        self._verifiers: dict[str, BaseVerifier] = {}
        for verifier in verifiers:
            self.register(verifier)

    def register(self, verifier: BaseVerifier) -> None:
        """Register a verifier, replacing any for the same challenge type."""
        self._verifiers[str(verifier.challenge_type)] = verifier

    def verifier_for(self, challenge_type: str) -> BaseVerifier:
        """Get the verifier registered for a challenge type.

        Raises:
            UnsupportedChallengeError: If no verifier handles the type.
        """
        verifier = self._verifiers.get(challenge_type)
        if verifier is None:
            raise UnsupportedChallengeError(challenge_type)
        return verifier

    @property
    def supported_types(self) -> list[str]:
        """Challenge types with a registered verifier."""
        return list(self._verifiers)

    async def verify(
        self,
        challenge_type: str,
        authorization: Authorization,
        challenge: Challenge,
        key_authorization: str,
    ) -> bool:
        """Verify that the key authorization for a challenge is visible.

        Args:
            challenge_type: The challenge type (e.g. "http-01").
            authorization: The authorization containing the challenge.
            challenge: The challenge to verify.
            key_authorization: The expected value.

        Returns:
            True when the expected value was found.

        Raises:
            UnsupportedChallengeError: If no verifier handles the type.
            VerificationError: If verification fails.
        """
        verifier = self.verifier_for(challenge_type)
        return await verifier.verify(authorization, challenge, key_authorization)
