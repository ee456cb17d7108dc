"""Lifecycle notifications for the issuance workflow."""

from enum import StrEnum

from acmeflow._logging import get_domain_extra, get_logger

logger = get_logger(__name__)


class Phase(StrEnum):
    """Phases of an issuance attempt, in execution order."""

    ACCOUNT = "account"
    DOMAINS = "domains"
    ORDER = "order"
    CHALLENGES = "challenges"
    PROVISIONING = "provisioning"
    VERIFICATION = "verification"
    CLEANUP = "cleanup"
    FINALIZATION = "finalization"


class IssuanceObserver:
    """Receives lifecycle events from the issuance workflow.

    The default implementation turns every event into a log record on
    the ``acmeflow.observer`` logger. Subclass and override individual
    methods to feed metrics or progress reporting; methods must not
    raise.

    Per-domain events are emitted from the domain's own task, so the
    domain logging context is already set when they are called.
    """

    def phase_started(self, phase: Phase) -> None:
        logger.info("Phase started", extra={"phase": str(phase), **get_domain_extra()})

    def phase_finished(self, phase: Phase, elapsed_ms: float) -> None:
        logger.info(
            "Phase finished",
            extra={"phase": str(phase), "elapsed_ms": round(elapsed_ms, 1), **get_domain_extra()},
        )

    def account_registered(self, existing: bool) -> None:
        message = "Using existing account" if existing else "Registered new account"
        logger.info(message, extra={"existing": existing})

    def domains_resolved(self, domains: list[str]) -> None:
        logger.info("Resolved domains from CSR", extra={"domains": domains})

    def order_placed(self, authorization_count: int) -> None:
        logger.info(
            "Placed certificate order",
            extra={"authorization_count": authorization_count},
        )

    def challenge_selected(self, domain: str, challenge_type: str, candidates: int) -> None:
        logger.info(
            "Selected challenge",
            extra={"domain": domain, "challenge_type": challenge_type, "candidates": candidates},
        )

    def record_created(self, domain: str) -> None:
        logger.info("Challenge record created", extra={"domain": domain})

    def record_failed(self, domain: str, error: Exception) -> None:
        logger.error(
            "Challenge record creation failed",
            extra={"domain": domain, "error": str(error)},
        )

    def verification_skipped(self, domain: str) -> None:
        logger.info("Skipping challenge verification", extra={"domain": domain})

    def challenge_valid(self, domain: str) -> None:
        logger.info("Challenge valid", extra={"domain": domain})

    def record_removed(self, domain: str) -> None:
        logger.info("Challenge record removed", extra={"domain": domain})

    def cleanup_failed(self, domain: str, error: Exception) -> None:
        logger.warning(
            "Challenge record removal failed",
            extra={"domain": domain, "error": str(error)},
        )

    def issuance_failed(self, error: BaseException) -> None:
        logger.error(
            "Certificate issuance failed",
            extra={"error": str(error), "error_type": type(error).__name__},
        )
