"""Provider backed by two plain async callables."""

from collections.abc import Awaitable, Callable
from typing import Any

from acmeflow.models import Authorization, Challenge
from acmeflow.providers.base import ChallengeRecordProvider

CreateRecordFn = Callable[[Authorization, Challenge, str], Awaitable[Any]]
RemoveRecordFn = Callable[[Authorization, Challenge, str, Any], Awaitable[None]]


class CallbackProvider(ChallengeRecordProvider):
    """Challenge record provider delegating to caller-supplied coroutines.

    Useful when the provisioning logic already exists as two functions
    and does not warrant a provider class of its own.

    Args:
        create_fn: Coroutine function called as
            ``create_fn(authorization, challenge, key_authorization)``.
        remove_fn: Coroutine function called as
            ``remove_fn(authorization, challenge, key_authorization, record)``.
    """

    def __init__(self, create_fn: CreateRecordFn, remove_fn: RemoveRecordFn):
        self.create_fn = create_fn
        self.remove_fn = remove_fn

    async def create_record(
        self,
        authorization: Authorization,
        challenge: Challenge,
        key_authorization: str,
    ) -> Any:
        return await self.create_fn(authorization, challenge, key_authorization)

    async def remove_record(
        self,
        authorization: Authorization,
        challenge: Challenge,
        key_authorization: str,
        record: Any,
    ) -> None:
        await self.remove_fn(authorization, challenge, key_authorization, record)
