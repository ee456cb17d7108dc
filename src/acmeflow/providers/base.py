"""Abstract base class for challenge record providers."""

from abc import ABC, abstractmethod
from typing import Any

from acmeflow.models import Authorization, Challenge


class ChallengeRecordProvider(ABC):
    """Abstract interface for challenge record providers.

    Providers publish the key authorization where the ACME server will
    look for it (a DNS TXT record, a file served over HTTP) and remove it
    again afterwards. The issuance workflow guarantees that
    remove_record() is called exactly once for every successful
    create_record(), whatever the outcome of the attempt.
    """

    @abstractmethod
    async def create_record(
        self,
        authorization: Authorization,
        challenge: Challenge,
        key_authorization: str,
    ) -> Any:
        """Publish the key authorization for a challenge.

        Args:
            authorization: The authorization the challenge belongs to.
            challenge: The selected challenge.
            key_authorization: The value to publish.

        Returns:
            An opaque handle passed back to remove_record().

        Raises:
            Exception: If record creation fails.
        """
        ...

    @abstractmethod
    async def remove_record(
        self,
        authorization: Authorization,
        challenge: Challenge,
        key_authorization: str,
        record: Any,
    ) -> None:
        """Remove a record created by create_record().

        Args:
            authorization: The authorization the challenge belongs to.
            challenge: The selected challenge.
            key_authorization: The published value.
            record: The handle returned by create_record().

        Raises:
            Exception: If record removal fails. The workflow logs and
                suppresses it.
        """
        ...
