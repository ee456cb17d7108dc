"""Logging utilities for the acmeflow library."""

import logging
import time
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_NAMESPACE = "acmeflow"

# Silent unless the application configures logging
_root = logging.getLogger(_NAMESPACE)
_root.addHandler(logging.NullHandler())

# Domain(s) the current task is working on; each asyncio task gets its own copy
_current_domains: ContextVar[tuple[str, ...]] = ContextVar("current_domains", default=())


@contextmanager
def domain_context(domains: Iterable[str]) -> Iterator[None]:
    """Attach domains to log records emitted inside a block.

    Contexts nest: the innermost block wins until it exits. Tasks created
    inside the block start from a copy, so a per-domain task can narrow
    the context without affecting its siblings.

    Args:
        domains: Domains being processed.
    """
    token = _current_domains.set(tuple(domains))
    try:
        yield
    finally:
        _current_domains.reset(token)


def get_domain_extra() -> dict[str, list[str] | str]:
    """Get domain info for log extra fields.

    Returns:
        Dict with 'domain' (single) or 'domains' (multiple), or empty dict.
    """
    domains = _current_domains.get()
    if not domains:
        return {}
    if len(domains) == 1:
        return {"domain": domains[0]}
    return {"domains": list(domains)}


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the acmeflow namespace.

    Names outside the namespace are nested under it, so every record the
    library emits reaches the ``acmeflow`` logger.

    Args:
        name: The module name (typically __name__).
    """
    if name != _NAMESPACE and not name.startswith(f"{_NAMESPACE}."):
        name = f"{_NAMESPACE}.{name}"
    return logging.getLogger(name)


class Timer:
    """Context manager measuring an issuance phase in milliseconds.

    Usage:
        with Timer() as t:
            await provision()
        observer.phase_finished(Phase.PROVISIONING, t.elapsed_ms)
    """

    def __init__(self) -> None:
        self.elapsed_ms: float = 0
        self._start: float = 0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *args: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000
