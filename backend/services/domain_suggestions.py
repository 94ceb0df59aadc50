"""
Domain Suggestions — keyword normalization, candidate generation and the
debounced availability resolver behind the funnel's domain search box.

Pipeline:
    raw input → normalize_keyword() → build_candidates() → one remote
    check-domain call per candidate (concurrent) → aggregate_outcomes()

Resolver lifecycle (one instance per search box / socket):
    IDLE → DEBOUNCING → CHECKING → SETTLED

    - Every update_query() cancels the pending debounce timer and bumps the
      cycle token. An empty keyword settles immediately with no network.
    - After the debounce interval the candidates are checked concurrently.
      The cycle publishes only once every check has settled (fan-in), and
      only if its token is still current and the resolver is open.
    - close() cancels the timer. In-flight checks run to completion but
      their results are dropped.

Failure policy:
    A failed candidate is excluded, never aborts its siblings. Only when
    every candidate fails is an error exposed (the first failure's message).
"""
import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence

from config import settings
from domain.constants import AVAILABILITY_STATUS
from domain.enums import DomainStatus, ResolverState
from models import DomainSuggestionItem, DomainSuggestionState

logger = logging.getLogger(__name__)

DomainChecker = Callable[[str], Awaitable[str]]
SettledListener = Callable[[DomainSuggestionState], Awaitable[None]]

DEFAULT_CHECK_ERROR = "Failed to check domain availability"

_PROTOCOL_PREFIX = re.compile(r"^https?://")
_WHITESPACE = re.compile(r"\s+")


# ════════════════════════════════════════════════════════════════════
# Normalizer / Candidate Generator
# ════════════════════════════════════════════════════════════════════


def normalize_keyword(raw: Optional[str]) -> str:
    """
    Reduce free-form input to a bare keyword.

    "HTTPS://Foo.COM/" → "foo", "my shop" → "myshop", "  " → "".
    """
    value = str(raw if raw is not None else "").strip().lower()
    value = _PROTOCOL_PREFIX.sub("", value)
    if value.endswith("/"):
        value = value[:-1]
    value = _WHITESPACE.sub("", value)
    if not value:
        return ""
    return value.split(".", 1)[0] if "." in value else value


def build_candidates(
    keyword: Optional[str],
    suffixes: Optional[Sequence[str]] = None,
    limit: Optional[int] = None,
) -> List[str]:
    """Keyword × suffix list, in suffix order, capped at `limit` (default 10)."""
    k = normalize_keyword(keyword)
    if not k:
        return []
    suffixes = settings.domain_suffix_list if suffixes is None else suffixes
    limit = settings.domain_max_candidates if limit is None else limit
    return [f"{k}{suffix}" for suffix in suffixes][:limit]


def status_from_availability(availability: str) -> DomainStatus:
    return DomainStatus(AVAILABILITY_STATUS.get(availability, DomainStatus.UNKNOWN.value))


# ════════════════════════════════════════════════════════════════════
# Fan-out / Fan-in
# ════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CheckOutcome:
    domain: str
    availability: Optional[str] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.availability is None


async def _check_candidate(checker: DomainChecker, domain: str) -> CheckOutcome:
    """Run one check; a failure is tagged, not raised."""
    try:
        availability = await checker(domain)
    except Exception as e:
        logger.debug(f"Domain check failed for {domain}: {e}")
        return CheckOutcome(domain=domain, error=str(e) or "Failed")
    return CheckOutcome(domain=domain, availability=str(availability or "").strip().lower())


def aggregate_outcomes(
    outcomes: Sequence[CheckOutcome],
    fallback_error: str = DEFAULT_CHECK_ERROR,
) -> DomainSuggestionState:
    """All failed → one representative error; otherwise the successes only."""
    if outcomes and all(o.failed for o in outcomes):
        first = next(o for o in outcomes if o.failed)
        return DomainSuggestionState(error=first.error or fallback_error, items=[])

    items = [
        DomainSuggestionItem(domain=o.domain, status=status_from_availability(o.availability))
        for o in outcomes
        if not o.failed
    ]
    return DomainSuggestionState(items=items)


async def check_domain_suggestions(
    checker: DomainChecker,
    raw: Optional[str],
    *,
    suffixes: Optional[Sequence[str]] = None,
    limit: Optional[int] = None,
    fallback_error: str = DEFAULT_CHECK_ERROR,
) -> DomainSuggestionState:
    """One-shot fan-out over every candidate for `raw`, without debounce."""
    candidates = build_candidates(raw, suffixes, limit)
    if not candidates:
        return DomainSuggestionState()

    outcomes = await asyncio.gather(*(_check_candidate(checker, d) for d in candidates))
    return aggregate_outcomes(outcomes, fallback_error)


# ════════════════════════════════════════════════════════════════════
# Remote Checker
# ════════════════════════════════════════════════════════════════════


class RemoteDomainChecker:
    """DomainChecker backed by the check-domain remote function."""

    def __init__(self, functions, function_name: Optional[str] = None):
        self._functions = functions
        self._function_name = function_name or settings.domain_check_function

    async def __call__(self, domain: str) -> str:
        data = await self._functions.invoke(self._function_name, {"domain": domain})
        if not isinstance(data, dict):
            return ""
        return str(data.get("availability") or "").lower()


# ════════════════════════════════════════════════════════════════════
# Debounced Resolver
# ════════════════════════════════════════════════════════════════════


class DomainSuggestionResolver:
    """
    Debounced, cancellable domain-suggestion resolver.

    Must be driven from inside a running event loop. Publishes each settled
    cycle to `snapshot`, wakes wait_settled(), and awaits `on_settled`.
    """

    def __init__(
        self,
        checker: DomainChecker,
        *,
        debounce_ms: Optional[int] = None,
        suffixes: Optional[Sequence[str]] = None,
        max_candidates: Optional[int] = None,
        on_settled: Optional[SettledListener] = None,
        fallback_error: str = DEFAULT_CHECK_ERROR,
    ):
        self._checker = checker
        self.debounce_ms = settings.domain_debounce_ms if debounce_ms is None else debounce_ms
        self._suffixes = suffixes
        self._max_candidates = max_candidates
        self._on_settled = on_settled
        self._fallback_error = fallback_error

        self._state = ResolverState.IDLE
        self._snapshot = DomainSuggestionState()
        self._cycle = 0
        self._closed = False
        self._timer: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()
        self._settled = asyncio.Event()

    # ── Public API ──────────────────────────────────────────────────

    @property
    def state(self) -> ResolverState:
        return self._state

    @property
    def snapshot(self) -> DomainSuggestionState:
        return self._snapshot

    @property
    def cycle(self) -> int:
        return self._cycle

    @property
    def closed(self) -> bool:
        return self._closed

    def update_query(self, raw: Optional[str]) -> None:
        """Start a new cycle for `raw`, superseding any pending one."""
        if self._closed:
            logger.debug("update_query() on a closed resolver ignored")
            return

        self._cancel_timer()
        self._cycle += 1
        cycle = self._cycle
        self._settled.clear()

        keyword = normalize_keyword(raw)
        if not keyword:
            self._settle(DomainSuggestionState())
            self._spawn(self._notify(self._snapshot))
            return

        self._state = ResolverState.DEBOUNCING
        self._timer = asyncio.get_running_loop().create_task(self._debounce(cycle, keyword))

    async def wait_settled(self, timeout: Optional[float] = None) -> DomainSuggestionState:
        """Wait for the current cycle to publish, then return the snapshot."""
        await asyncio.wait_for(self._settled.wait(), timeout)
        return self._snapshot

    def close(self) -> None:
        """Tear down: cancel the timer and drop any late results."""
        self._closed = True
        self._cancel_timer()

    # ── Internals ───────────────────────────────────────────────────

    def _is_current(self, cycle: int) -> bool:
        return not self._closed and cycle == self._cycle

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    def _settle(self, result: DomainSuggestionState) -> None:
        self._state = ResolverState.SETTLED
        self._snapshot = result
        self._settled.set()

    async def _debounce(self, cycle: int, keyword: str) -> None:
        await asyncio.sleep(self.debounce_ms / 1000)
        self._timer = None
        if not self._is_current(cycle):
            return

        self._state = ResolverState.CHECKING
        self._snapshot = DomainSuggestionState(loading=True, items=self._snapshot.items)
        # Detached from the timer so a later cancel cannot abort in-flight checks
        self._spawn(self._fan_out(cycle, keyword))

    async def _fan_out(self, cycle: int, keyword: str) -> None:
        result = await check_domain_suggestions(
            self._checker,
            keyword,
            suffixes=self._suffixes,
            limit=self._max_candidates,
            fallback_error=self._fallback_error,
        )
        if not self._is_current(cycle):
            logger.debug(f"Dropping stale domain suggestions for '{keyword}' (cycle {cycle})")
            return

        self._settle(result)
        logger.info(
            f"Domain suggestions settled for '{keyword}': "
            f"{len(result.items)} item(s){' (all checks failed)' if result.error else ''}"
        )
        await self._notify(result)

    async def _notify(self, result: DomainSuggestionState) -> None:
        if self._on_settled is None:
            return
        try:
            await self._on_settled(result)
        except Exception as e:
            logger.warning(f"Domain suggestion listener failed: {e}")
