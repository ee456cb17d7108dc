"""Automated certificate issuance (RFC 8555).

Drives one issuance attempt from CSR to certificate:

1. Reuse or register the ACME account
2. Read the domains from the CSR and place an order
3. Select one challenge per authorization and compute its key authorization
4. Create every challenge record through the provider, staggered
5. Wait for propagation, verify locally, and have the server validate
6. Remove every record that was created, whatever happened above
7. Finalize the order and download the certificate

All domains go through each phase together: no domain starts
verification before every record exists, and nothing is finalized
before every challenge is valid.
"""

import asyncio
import contextlib
from collections.abc import AsyncIterator, Awaitable, Iterable, Iterator
from typing import Any

from acmeflow._logging import Timer, domain_context, get_logger
from acmeflow.challenges import ChallengeVerifier
from acmeflow.crypto import read_csr_domains
from acmeflow.exceptions import (
    ChallengeSelectionError,
    ConfigurationError,
    ProvisioningError,
)
from acmeflow.models import Authorization, Challenge, ChallengeInfo, IdentifierType, ProvisionResult
from acmeflow.observer import IssuanceObserver, Phase
from acmeflow.options import IssueOptions
from acmeflow.transport import AcmeTransport

logger = get_logger(__name__)


async def _delay(seconds: float) -> None:
    """Sleep for a stagger or settle period."""
    if seconds > 0:
        await asyncio.sleep(seconds)


async def _gather_all(aws: Iterable[Awaitable[Any]]) -> list[Any]:
    """Run awaitables concurrently and wait for all of them.

    If one fails, the others are cancelled and awaited before the error
    propagates, so nothing from the phase is still running afterwards.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def select_challenge(authorization: Authorization, priority: list[str]) -> Challenge:
    """Pick the challenge to use for an authorization.

    Challenges are ranked by the position of their type in ``priority``;
    types missing from it rank last. Ties keep the authorization's own
    order, so with no listed type the first offered challenge wins.

    Args:
        authorization: The authorization to select from.
        priority: Challenge types in order of preference.

    Returns:
        The selected challenge.

    Raises:
        ChallengeSelectionError: If the authorization has no challenges.
    """
    if not authorization.challenges:
        raise ChallengeSelectionError(authorization.identifier.value)

    def rank(challenge: Challenge) -> int:
        try:
            return priority.index(challenge.type)
        except ValueError:
            return len(priority)

    return min(authorization.challenges, key=rank)


class IssuanceOrchestrator:
    """Runs a single certificate issuance attempt.

    Args:
        client: Authenticated ACME transport.
        options: Issuance options; must include a record provider.
        verifier: Local pre-flight verifier. Defaults to a
            ChallengeVerifier using ``options.http_challenge_port``.
        observer: Receives lifecycle events. Defaults to logging them.
    """

    def __init__(
        self,
        client: AcmeTransport,
        options: IssueOptions,
        verifier: ChallengeVerifier | None = None,
        observer: IssuanceObserver | None = None,
    ):
        self.client = client
        self.options = options
        self.verifier = verifier or ChallengeVerifier(http_port=options.http_challenge_port)
        self.observer = observer or IssuanceObserver()

    @contextlib.contextmanager
    def _phase(self, phase: Phase) -> Iterator[None]:
        self.observer.phase_started(phase)
        with Timer() as timer:
            yield
        self.observer.phase_finished(phase, timer.elapsed_ms)

    async def run(self) -> bytes:
        """Issue the certificate.

        Returns:
            The certificate chain returned by the transport.

        Raises:
            ConfigurationError: For a missing provider, an unusable CSR or
                an authorization without challenges.
            ProvisioningError: If any challenge record could not be created.
            VerificationError: If a challenge response is not visible.
            Exception: Transport errors, unchanged.
        """
        try:
            if self.options.provider is None:
                raise ConfigurationError("No challenge record provider configured")
            await self._ensure_account()
            domains = self._read_domains()
            with domain_context(domains):
                order, authorizations = await self._place_order(domains)
                infos = await self._prepare_challenges(authorizations)
                async with self._provisioned(infos) as provisioned:
                    await self._validate_challenges(provisioned)
                return await self._finalize(order)
        except Exception as e:
            self.observer.issuance_failed(e)
            raise

    async def _ensure_account(self) -> None:
        with self._phase(Phase.ACCOUNT):
            try:
                account_url = self.client.get_account_url()
            except Exception as e:
                # Any lookup error means no usable account; register a new one
                logger.debug(
                    "Account lookup failed, registering",
                    extra={"error": str(e), "error_type": type(e).__name__},
                )
                account_url = None

            if account_url:
                self.observer.account_registered(existing=True)
                return

            await self.client.create_account(self.options.account_payload())
            self.observer.account_registered(existing=False)

    def _read_domains(self) -> list[str]:
        with self._phase(Phase.DOMAINS):
            domains = read_csr_domains(self.options.csr).domains
            if not domains:
                raise ConfigurationError("Certificate Signing Request contains no domain names")
            self.observer.domains_resolved(domains)
            return domains

    async def _place_order(self, domains: list[str]) -> tuple[Any, list[Authorization]]:
        with self._phase(Phase.ORDER):
            payload = {
                "identifiers": [
                    {"type": IdentifierType.DNS.value, "value": domain} for domain in domains
                ]
            }
            order = await self.client.create_order(payload)
            authorizations = await self.client.get_authorizations(order)

            # Wildcard authorizations carry the base domain as their identifier
            requested = {domain.removeprefix("*.") for domain in domains}
            unexpected = [
                authz.identifier.value
                for authz in authorizations
                if authz.identifier.value not in requested
            ]
            if unexpected:
                logger.warning(
                    "Order returned authorizations for unrequested identifiers",
                    extra={"identifiers": unexpected},
                )

            self.observer.order_placed(len(authorizations))
            return order, authorizations

    async def _prepare_challenges(self, authorizations: list[Authorization]) -> list[ChallengeInfo]:
        with self._phase(Phase.CHALLENGES):
            return await _gather_all(self._prepare_challenge(authz) for authz in authorizations)

    async def _prepare_challenge(self, authorization: Authorization) -> ChallengeInfo:
        # Associate by the authorization's own identifier, never by position
        domain = authorization.identifier.value
        with domain_context([domain]):
            challenge = select_challenge(authorization, self.options.challenge_priority)
            self.observer.challenge_selected(domain, challenge.type, len(authorization.challenges))
            key_authorization = await self.client.get_challenge_key_authorization(challenge)

        return ChallengeInfo(
            domain=domain,
            authorization=authorization,
            challenge=challenge,
            key_authorization=key_authorization,
        )

    @contextlib.asynccontextmanager
    async def _provisioned(
        self, infos: list[ChallengeInfo]
    ) -> AsyncIterator[list[ProvisionResult]]:
        """Create every challenge record; remove the created ones on exit.

        Each domain's task writes only its own slot of ``results``. Records
        are removed even when creation failed for a sibling domain, when
        the body raises, or when the attempt is cancelled.
        """
        results: list[ProvisionResult | None] = [None] * len(infos)
        try:
            with self._phase(Phase.PROVISIONING):
                await _gather_all(
                    self._create_record(index, info, results) for index, info in enumerate(infos)
                )

            failures = [result for result in results if result is not None and not result.ok]
            if failures:
                first = failures[0]
                raise ProvisioningError(first.info.domain, str(first.error)) from first.error

            yield [result for result in results if result is not None]
        finally:
            created = [result for result in results if result is not None and result.ok]
            if created:
                await asyncio.shield(self._cleanup(created))

    async def _create_record(
        self,
        index: int,
        info: ChallengeInfo,
        results: list[ProvisionResult | None],
    ) -> None:
        with domain_context([info.domain]):
            await _delay(index * self.options.stagger_delay)
            try:
                record = await self.options.provider.create_record(
                    info.authorization, info.challenge, info.key_authorization
                )
            except Exception as e:
                self.observer.record_failed(info.domain, e)
                results[index] = ProvisionResult(info=info, error=e)
                return

            results[index] = ProvisionResult(info=info, record=record)
            self.observer.record_created(info.domain)

    async def _validate_challenges(self, provisioned: list[ProvisionResult]) -> None:
        with self._phase(Phase.VERIFICATION):
            logger.info(
                "Waiting for challenge records to propagate",
                extra={"settle_delay": self.options.settle_delay},
            )
            await _delay(self.options.settle_delay)
            await _gather_all(self._validate_challenge(result.info) for result in provisioned)

    async def _validate_challenge(self, info: ChallengeInfo) -> None:
        with domain_context([info.domain]):
            if self.options.skip_challenge_verification:
                self.observer.verification_skipped(info.domain)
            else:
                await self.verifier.verify(
                    info.challenge.type,
                    info.authorization,
                    info.challenge,
                    info.key_authorization,
                )

            await self.client.complete_challenge(info.challenge)
            await self.client.wait_for_valid_status(info.challenge)
            self.observer.challenge_valid(info.domain)

    async def _cleanup(self, created: list[ProvisionResult]) -> None:
        with self._phase(Phase.CLEANUP):
            await asyncio.gather(
                *(self._remove_record(index, result) for index, result in enumerate(created))
            )

    async def _remove_record(self, index: int, result: ProvisionResult) -> None:
        info = result.info
        with domain_context([info.domain]):
            await _delay(index * self.options.stagger_delay)
            try:
                await self.options.provider.remove_record(
                    info.authorization, info.challenge, info.key_authorization, result.record
                )
            except Exception as e:
                self.observer.cleanup_failed(info.domain, e)
                return
            self.observer.record_removed(info.domain)

    async def _finalize(self, order: Any) -> bytes:
        with self._phase(Phase.FINALIZATION):
            await self.client.finalize_order(order, self.options.csr)
            return await self.client.get_certificate(order, self.options.preferred_chain)


async def issue(
    client: AcmeTransport,
    options: IssueOptions | dict[str, Any],
    *,
    verifier: ChallengeVerifier | None = None,
    observer: IssuanceObserver | None = None,
) -> bytes:
    """Issue a certificate for the domains in a CSR.

    Args:
        client: Authenticated ACME transport.
        options: IssueOptions, or a dict of its fields.
        verifier: Local pre-flight verifier override.
        observer: Lifecycle observer override.

    Returns:
        The certificate chain returned by the transport.
    """
    if not isinstance(options, IssueOptions):
        options = IssueOptions.model_validate(options)
    orchestrator = IssuanceOrchestrator(client, options, verifier=verifier, observer=observer)
    return await orchestrator.run()
