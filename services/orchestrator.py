# services/orchestrator.py
"""
Fetch-with-fallback coordination shared by every dataset.

A dataset is described as an ordered list of providers plus a synthetic
fallback. The orchestrator never raises for upstream trouble: it returns a
FetchResult whose `quality` says whether the value is live or synthetic and
whose `fallback_reason` / `errors` say why. Rendering that into an HTTP
envelope is the router's job.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    Iterable,
    List,
    Optional,
    Sequence,
    TypeVar,
)

from utils.common_helpers import iso_now

logger = logging.getLogger(__name__)

T = TypeVar("T")
I = TypeVar("I")


class DataQuality(str, Enum):
    LIVE = "live"
    MIXED = "mixed"
    MOCK = "mock"


class FallbackReason(str, Enum):
    NO_CREDENTIALS = "no_credentials"
    UPSTREAM_FAILED = "upstream_failed"
    EMPTY_RESULT = "empty_result"
    UNEXPECTED_ERROR = "unexpected_error"


_REASON_TEXT = {
    FallbackReason.NO_CREDENTIALS: "API keys not configured - showing sample data",
    FallbackReason.UPSTREAM_FAILED: "Live data unavailable - showing sample data",
    FallbackReason.EMPTY_RESULT: "No live results returned - showing sample data",
    FallbackReason.UNEXPECTED_ERROR: "Unexpected error - showing sample data",
}


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    value: T
    quality: DataQuality
    source: Optional[str] = None
    fallback_reason: Optional[FallbackReason] = None
    errors: List[str] = field(default_factory=list)

    @property
    def is_live(self) -> bool:
        return self.quality is DataQuality.LIVE

    def error_message(self) -> Optional[str]:
        """Human-readable substitution note, or None for fully live data."""
        if self.fallback_reason is None:
            return None
        text = _REASON_TEXT[self.fallback_reason]
        if self.errors:
            text = f"{text} ({'; '.join(self.errors)})"
        return text

    @classmethod
    def live(cls, value: T, source: str, errors: Optional[List[str]] = None) -> "FetchResult[T]":
        return cls(value=value, quality=DataQuality.LIVE, source=source, errors=list(errors or []))

    @classmethod
    def mock(
        cls,
        value: T,
        reason: FallbackReason,
        errors: Optional[List[str]] = None,
    ) -> "FetchResult[T]":
        return cls(value=value, quality=DataQuality.MOCK, fallback_reason=reason, errors=list(errors or []))


@dataclass(frozen=True)
class Provider(Generic[T]):
    """One upstream source for a dataset. `fetch` is only awaited when `configured`."""

    name: str
    configured: bool
    fetch: Callable[[], Awaitable[T]]


def _tags(dataset: str, provider: Optional[str] = None, quality: Optional[DataQuality] = None) -> Dict[str, Any]:
    # picked up by the JSON log formatter
    return {
        "dataset": dataset,
        "provider": provider,
        "data_quality": quality.value if quality else None,
    }


def _describe(name: str, exc: BaseException) -> str:
    msg = str(exc) or type(exc).__name__
    return msg if msg.startswith(f"{name}:") else f"{name}: {msg}"


def _has_content(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, dict, tuple, str)):
        return len(value) > 0
    return True


async def first_successful(
    providers: Sequence[Provider[T]],
    fallback: Callable[[], T],
    *,
    dataset: str,
    accept: Callable[[T], bool] = _has_content,
) -> FetchResult[T]:
    """
    Try configured providers in priority order; first acceptable value wins.

    No configured provider -> fallback without touching the network.
    Every provider failing -> fallback with the collected error notes.
    """
    configured = [p for p in providers if p.configured]
    if not configured:
        logger.info(
            "%s: no provider credentials configured, using sample data",
            dataset,
            extra=_tags(dataset, quality=DataQuality.MOCK),
        )
        return FetchResult.mock(fallback(), FallbackReason.NO_CREDENTIALS)

    errors: List[str] = []
    for provider in configured:
        try:
            value = await provider.fetch()
        except Exception as e:
            logger.warning(
                "%s: provider %s failed: %s",
                dataset, provider.name, e,
                extra=_tags(dataset, provider.name),
            )
            errors.append(_describe(provider.name, e))
            continue
        if not accept(value):
            logger.warning(
                "%s: provider %s returned no usable data",
                dataset, provider.name,
                extra=_tags(dataset, provider.name),
            )
            errors.append(f"{provider.name}: empty response")
            continue
        return FetchResult.live(value, provider.name, errors)

    logger.warning(
        "%s: all providers failed, using sample data",
        dataset,
        extra=_tags(dataset, quality=DataQuality.MOCK),
    )
    return FetchResult.mock(fallback(), FallbackReason.UPSTREAM_FAILED, errors)


@dataclass(frozen=True)
class BatchProvider(Generic[T]):
    """Provider returning a list; `fetch(n)` asks for at most n more items."""

    name: str
    configured: bool
    fetch: Callable[[int], Awaitable[List[T]]]


async def collect_until(
    providers: Sequence[BatchProvider[T]],
    fallback: Callable[[], List[T]],
    *,
    dataset: str,
    want: int,
    finalize: Callable[[List[T]], List[T]] = lambda items: items,
) -> FetchResult[List[T]]:
    """
    Accumulate items from providers in order until `want` items are collected.

    Later providers supplement earlier ones; `finalize` dedupes/sorts/truncates
    the merged list. Nothing collected -> fallback.
    """
    configured = [p for p in providers if p.configured]
    if not configured:
        logger.info(
            "%s: no provider credentials configured, using sample data",
            dataset,
            extra=_tags(dataset, quality=DataQuality.MOCK),
        )
        return FetchResult.mock(fallback(), FallbackReason.NO_CREDENTIALS)

    items: List[T] = []
    sources: List[str] = []
    errors: List[str] = []
    for provider in configured:
        if len(items) >= want:
            break
        try:
            batch = await provider.fetch(want - len(items))
        except Exception as e:
            logger.warning(
                "%s: provider %s failed: %s",
                dataset, provider.name, e,
                extra=_tags(dataset, provider.name),
            )
            errors.append(_describe(provider.name, e))
            continue
        logger.info(
            "%s: fetched %d items from %s",
            dataset, len(batch), provider.name,
            extra=_tags(dataset, provider.name),
        )
        if batch:
            items.extend(batch)
            sources.append(provider.name)

    if not items:
        reason = FallbackReason.UPSTREAM_FAILED if errors else FallbackReason.EMPTY_RESULT
        logger.warning(
            "%s: no live items collected, using sample data",
            dataset,
            extra=_tags(dataset, quality=DataQuality.MOCK),
        )
        return FetchResult.mock(fallback(), reason, errors)

    return FetchResult.live(finalize(items), "+".join(sources), errors)


async def resolve_each(
    items: Iterable[I],
    resolve_one: Callable[[I], Awaitable[FetchResult[T]]],
    fallback_one: Callable[[I], T],
    *,
    dataset: str,
) -> List[FetchResult[T]]:
    """
    Resolve items concurrently with an all-settle join.

    An item whose resolver raises is replaced by its synthetic value; the
    other items keep their own results.
    """
    items = list(items)
    settled = await asyncio.gather(*(resolve_one(it) for it in items), return_exceptions=True)

    out: List[FetchResult[T]] = []
    for item, res in zip(items, settled):
        if isinstance(res, BaseException):
            if not isinstance(res, Exception):
                raise res
            logger.error("%s: resolving %r raised %s", dataset, item, res, exc_info=res)
            out.append(
                FetchResult.mock(fallback_one(item), FallbackReason.UNEXPECTED_ERROR, [str(res)])
            )
        else:
            out.append(res)
    return out


def combine_quality(results: Iterable[FetchResult[Any]]) -> DataQuality:
    qualities = [r.quality for r in results]
    if not qualities:
        return DataQuality.MOCK
    live = sum(1 for q in qualities if q is DataQuality.LIVE)
    if live == len(qualities):
        return DataQuality.LIVE
    if live == 0 and all(q is DataQuality.MOCK for q in qualities):
        return DataQuality.MOCK
    return DataQuality.MIXED


def quality_of(*flags: bool) -> DataQuality:
    """Quality of a payload assembled from several independent sub-results."""
    if flags and all(flags):
        return DataQuality.LIVE
    if any(flags):
        return DataQuality.MIXED
    return DataQuality.MOCK


def response_metadata(
    quality: DataQuality,
    *,
    error: Optional[str] = None,
    **extra: Any,
) -> dict:
    """`metadata` block shared by every endpoint; `error` only when something was substituted."""
    meta = {**extra, "timestamp": iso_now(), "dataQuality": quality.value}
    if error:
        meta["error"] = error
    return meta
