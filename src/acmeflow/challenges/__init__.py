"""Local ACME challenge verifiers."""

from acmeflow.challenges.base import BaseVerifier
from acmeflow.challenges.dns01 import Dns01Verifier
from acmeflow.challenges.http01 import Http01Verifier
from acmeflow.challenges.registry import ChallengeVerifier

__all__ = ["BaseVerifier", "ChallengeVerifier", "Dns01Verifier", "Http01Verifier"]
