"""DNS-01 challenge verification (RFC 8555 Section 8.4)."""

from typing import Any

import dns.asyncresolver
import dns.exception

from acmeflow._logging import get_logger
from acmeflow.challenges.base import BaseVerifier
from acmeflow.exceptions import VerificationError
from acmeflow.models import Authorization, Challenge, ChallengeType

logger = get_logger(__name__)


class Dns01Verifier(BaseVerifier):
    """Verify a DNS-01 challenge by reading TXT records.

    Resolves ``_acme-challenge.<domain>``, following a CNAME first so
    that challenges delegated to another zone are checked where they
    actually live. The key authorization must be one of the TXT values
    found; other values may coexist for parallel issuance attempts.

    Args:
        prefix: Label prepended to the domain (default: "_acme-challenge.").
        nameservers: Nameserver addresses to query instead of the system
            resolver configuration.
        lifetime: Total time allowed for each DNS query in seconds.
        resolver: Pre-configured resolver exposing an async
            ``resolve(name, rdtype)``; overrides nameservers and lifetime.
    """

    challenge_type = ChallengeType.DNS_01

    def __init__(
        self,
        prefix: str = "_acme-challenge.",
        nameservers: list[str] | None = None,
        lifetime: float = 10.0,
        resolver: Any = None,
    ):
        self.prefix = prefix
        self.nameservers = nameservers
        self.lifetime = lifetime
        self._resolver = resolver

    def _get_resolver(self) -> Any:
        if self._resolver is not None:
            return self._resolver

        if self.nameservers:
            resolver = dns.asyncresolver.Resolver(configure=False)
            resolver.nameservers = list(self.nameservers)
        else:
            resolver = dns.asyncresolver.Resolver()
        resolver.lifetime = self.lifetime
        return resolver

    async def resolve_challenge_name(self, resolver: Any, name: str) -> str:
        """Follow a CNAME at the challenge name, if there is one.

        Args:
            resolver: Resolver to query.
            name: The challenge record name.

        Returns:
            The CNAME target, or the original name when no CNAME exists.
        """
        try:
            answer = await resolver.resolve(name, "CNAME")
        except dns.exception.DNSException:
            logger.debug("No CNAME found for challenge record", extra={"record_name": name})
            return name

        targets = [rdata.target.to_text(omit_final_dot=True) for rdata in answer]
        if not targets:
            return name

        logger.debug(
            "CNAME found for challenge record",
            extra={"record_name": name, "target": targets[0]},
        )
        return targets[0]

    async def verify(
        self,
        authorization: Authorization,
        challenge: Challenge,
        key_authorization: str,
    ) -> bool:
        domain = authorization.identifier.value.removeprefix("*.")
        resolver = self._get_resolver()

        record_name = await self.resolve_challenge_name(resolver, f"{self.prefix}{domain}")

        try:
            answer = await resolver.resolve(record_name, "TXT")
        except dns.exception.DNSException as e:
            raise VerificationError(
                domain,
                self.challenge_type,
                f"DNS TXT lookup for {record_name} failed: {e}",
            ) from e

        # A TXT record may carry several character-strings; check each one
        records = [
            segment.decode("utf-8", errors="replace")
            for rdata in answer
            for segment in rdata.strings
        ]

        logger.debug(
            "DNS TXT query successful",
            extra={"domain": domain, "record_name": record_name, "record_count": len(records)},
        )

        if key_authorization not in records:
            raise VerificationError(
                domain,
                self.challenge_type,
                f"Authorization not found in DNS TXT records for {domain}",
            )

        logger.info(
            "Key authorization match, challenge verified",
            extra={"domain": domain, "challenge_type": self.challenge_type},
        )
        return True
