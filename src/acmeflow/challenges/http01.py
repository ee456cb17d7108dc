"""HTTP-01 challenge verification (RFC 8555 Section 8.3)."""

import httpx

from acmeflow._logging import get_logger
from acmeflow.challenges.base import BaseVerifier
from acmeflow.exceptions import VerificationError
from acmeflow.models import Authorization, Challenge, ChallengeType

logger = get_logger(__name__)


class Http01Verifier(BaseVerifier):
    """Verify an HTTP-01 challenge by fetching the token over plain HTTP.

    The response body, with trailing whitespace stripped, must equal the
    key authorization exactly.

    Args:
        port: Port the challenge is served on (default: 80).
        suffix: URL path to fetch instead of
            ``/.well-known/acme-challenge/<token>``.
        timeout: HTTP request timeout in seconds (default: 10).
    """

    challenge_type = ChallengeType.HTTP_01

    def __init__(
        self,
        port: int = 80,
        suffix: str | None = None,
        timeout: float = 10.0,
    ):
        self.port = port
        self.suffix = suffix
        self.timeout = timeout

    def challenge_url(self, authorization: Authorization, challenge: Challenge) -> str:
        """Build the URL the challenge response is expected at."""
        suffix = self.suffix or f"/.well-known/acme-challenge/{challenge.token}"
        return f"http://{authorization.identifier.value}:{self.port}{suffix}"

    async def verify(
        self,
        authorization: Authorization,
        challenge: Challenge,
        key_authorization: str,
    ) -> bool:
        domain = authorization.identifier.value
        url = self.challenge_url(authorization, challenge)

        logger.debug(
            "Sending HTTP challenge query",
            extra={"domain": domain, "url": url, "port": self.port},
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as http:
                response = await http.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise VerificationError(domain, self.challenge_type, f"HTTP query failed: {e}") from e

        logger.debug(
            "HTTP challenge query successful",
            extra={"domain": domain, "status_code": response.status_code},
        )

        body = response.text.rstrip()
        if not body or body != key_authorization:
            raise VerificationError(
                domain,
                self.challenge_type,
                f"Authorization not found in HTTP response from {domain}",
            )

        logger.info(
            "Key authorization match, challenge verified",
            extra={"domain": domain, "challenge_type": self.challenge_type},
        )
        return True
