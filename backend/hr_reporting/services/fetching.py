"""
Concurrent upstream fetches for one report build.

Primary datasets must all succeed: the first failure aborts the build with
PrimaryFetchError. Secondary per-employee lookups are bounded in number and
settled individually: a failed lookup becomes None and is dropped, it never
fails the batch. Nothing here retries or times out on its own; timeouts
belong to the upstream client.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable, Iterable, Mapping
from typing import Any, TypeVar

from hr_reporting.core.errors import PrimaryFetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def fetch_primary(sources: Mapping[str, Awaitable[Any]]) -> dict[str, Any]:
    """Await every primary source concurrently and return results by name.

    All sources are allowed to finish before a failure is raised, so no
    request is left running behind the caller's back.
    """
    names = list(sources)
    results = await asyncio.gather(*sources.values(), return_exceptions=True)

    for name, result in zip(names, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, Exception):
            logger.error("Primary source '%s' failed: %s", name, result)
            raise PrimaryFetchError(name) from result

    return dict(zip(names, results))


async def _attempt(label: str, key: Hashable, call: Callable[[], Awaitable[T]]) -> T | None:
    try:
        return await call()
    except Exception as exc:
        logger.warning("Secondary lookup %s failed for %s: %s", label, key, exc)
        return None


async def settle(calls: Mapping[str, Awaitable[T]]) -> dict[str, T | None]:
    """Await optional lookups concurrently; failures map to None."""
    names = list(calls)
    results = await asyncio.gather(
        *(_attempt("optional", name, lambda call=call: call) for name, call in calls.items())
    )
    return dict(zip(names, results))


async def settle_bounded(
    ids: Iterable[Hashable],
    max_fan_out: int,
    fetch_one: Callable[[Hashable], Awaitable[T]],
    label: str = "lookup",
) -> list[T]:
    """Fetch one result per id for at most ``max_fan_out`` ids.

    Only the first ``max_fan_out`` ids are looked up. Failed lookups are
    dropped, so the result holds successes only, in id order.
    """
    selected = list(ids)[: max(max_fan_out, 0)]
    if not selected:
        return []

    results = await asyncio.gather(
        *(
            _attempt(label, entity_id, lambda entity_id=entity_id: fetch_one(entity_id))
            for entity_id in selected
        )
    )
    successes = [r for r in results if r is not None]
    if len(successes) < len(selected):
        logger.info(
            "%s: %d of %d lookups succeeded", label, len(successes), len(selected)
        )
    return successes
