"""
Leaderboards: top late employees, top earners, top leave requesters,
chronic absence.
"""

from collections.abc import Callable, Hashable, Iterable, Mapping
from typing import TypeVar

from hr_reporting.schemas.report import RankedEntry

R = TypeVar("R")


def top_n(
    metric_map: Mapping[Hashable, float],
    n: int | None,
    name_resolver: Callable[[Hashable], str] | None = None,
) -> list[RankedEntry]:
    """Entries sorted by value descending, truncated to ``n``.

    ``sorted`` is stable, so equal values keep the insertion order of
    ``metric_map``. ``n=None`` keeps every entry.
    """
    if n is not None and n <= 0:
        return []
    ranked = sorted(metric_map.items(), key=lambda item: item[1], reverse=True)
    if n is not None:
        ranked = ranked[:n]
    return [
        RankedEntry(
            key=key,
            value=value,
            display_name=name_resolver(key) if name_resolver else "",
        )
        for key, value in ranked
    ]


def name_resolver_from(
    records: Iterable[R],
    key_fn: Callable[[R], Hashable],
    name_fn: Callable[[R], str | None],
) -> Callable[[Hashable], str]:
    """Resolve a key to the name on the first record carrying that key.

    Unknown keys and records without a name resolve to an empty string.
    """
    names: dict[Hashable, str] = {}
    for rec in records:
        names.setdefault(key_fn(rec), name_fn(rec) or "")
    return lambda key: names.get(key, "")


def at_least(metric_map: Mapping[Hashable, float], threshold: float) -> dict[Hashable, float]:
    return {key: value for key, value in metric_map.items() if value >= threshold}
