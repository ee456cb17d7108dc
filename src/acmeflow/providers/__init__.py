"""Challenge record providers for ACME challenge provisioning."""

from acmeflow.providers.base import ChallengeRecordProvider
from acmeflow.providers.callbacks import CallbackProvider

__all__ = ["CallbackProvider", "ChallengeRecordProvider"]
