"""Acmeflow - automated ACME certificate issuance with pluggable challenge provisioning."""

from acmeflow.challenges import ChallengeVerifier
from acmeflow.issuance import IssuanceOrchestrator, issue
from acmeflow.observer import IssuanceObserver, Phase
from acmeflow.options import IssueOptions
from acmeflow.providers import CallbackProvider, ChallengeRecordProvider
from acmeflow.transport import AcmeTransport

__all__ = [
    "AcmeTransport",
    "CallbackProvider",
    "ChallengeRecordProvider",
    "ChallengeVerifier",
    "IssuanceObserver",
    "IssuanceOrchestrator",
    "IssueOptions",
    "Phase",
    "issue",
]
__version__ = "0.1.0"
