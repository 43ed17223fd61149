"""Migration radar pipeline: fetch → normalize → filter → store → alert.

One tick fetches a bounded batch of the newest migrations and walks it
record by record. A bad record is logged and skipped, a failed fetch skips
the tick, and nothing short of process termination stops the loop.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.parsers.alerts import CoinAlertDispatcher, DeliveryError, DeliveryStatus
from src.parsers.normalizer import NormalizationError, normalize
from src.parsers.persistence import (
    StorageError,
    UpsertResult,
    count_coins_by_creator,
    upsert_coin_if_absent,
)
from src.parsers.policy import (
    PolicyConfig,
    PolicyDecision,
    RejectReason,
    evaluate,
    is_blacklisted,
)
from src.parsers.pumpfun.client import PumpfunClient
from src.parsers.pumpfun.exceptions import PumpfunFetchError
from src.parsers.pumpfun.models import MigratedCoin

SecurityCheck = Callable[[MigratedCoin], Awaitable[str | None]]
Analyzer = Callable[[MigratedCoin], Awaitable[None]]


class RecordOutcome(Enum):
    INVALID = "invalid"
    REJECTED = "rejected"
    STORED = "stored"
    DUPLICATE = "duplicate"
    STORAGE_FAILED = "storage_failed"


@dataclass
class TickStats:
    """Counters for one tick, logged as a single summary line."""

    fetched: int = 0
    invalid: int = 0
    rejected: int = 0
    stored: int = 0
    duplicates: int = 0
    storage_failed: int = 0
    alerts_sent: int = 0
    alerts_failed: int = 0
    errors: int = 0
    fetch_failed: bool = False
    last_stored: str | None = None

    def record(self, outcome: RecordOutcome) -> None:
        if outcome is RecordOutcome.INVALID:
            self.invalid += 1
        elif outcome is RecordOutcome.REJECTED:
            self.rejected += 1
        elif outcome is RecordOutcome.STORED:
            self.stored += 1
        elif outcome is RecordOutcome.DUPLICATE:
            self.duplicates += 1
        elif outcome is RecordOutcome.STORAGE_FAILED:
            self.storage_failed += 1

    def summary(self) -> str:
        if self.fetch_failed:
            return "fetch failed, tick skipped"
        return (
            f"fetched={self.fetched} stored={self.stored} dup={self.duplicates} "
            f"rejected={self.rejected} invalid={self.invalid} "
            f"store_err={self.storage_failed} alerts={self.alerts_sent} "
            f"alert_err={self.alerts_failed} errors={self.errors}"
        )


async def log_security_check(coin: MigratedCoin) -> str | None:
    """Default security hook: on-chain checks are plugged in externally."""
    logger.info(f"[SECURITY] Checking {coin.symbol} {coin.contract_address}")
    return None


async def log_analysis(coin: MigratedCoin) -> None:
    """Default analysis hook."""
    logger.info(f"[ANALYSIS] Analyzing {coin.symbol} ({coin.contract_address})")


class MigrationPipeline:
    """Owns one polling loop; every collaborator is passed in."""

    def __init__(
        self,
        *,
        client: PumpfunClient,
        session_factory: async_sessionmaker[AsyncSession],
        policy: PolicyConfig,
        dispatcher: CoinAlertDispatcher,
        batch_limit: int = 10,
        strict_numbers: bool = False,
        security_check: SecurityCheck | None = log_security_check,
        analyzer: Analyzer | None = log_analysis,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._session_factory = session_factory
        self._policy = policy
        self._dispatcher = dispatcher
        self._batch_limit = batch_limit
        self._strict_numbers = strict_numbers
        self._security_check = security_check
        self._analyzer = analyzer
        self._clock = clock or (lambda: datetime.now(UTC))

    async def run_forever(self, interval_sec: float) -> None:
        """Tick, sleep, repeat until cancelled."""
        logger.info(
            f"[RADAR] Polling every {interval_sec}s, batch={self._batch_limit}"
        )
        while True:
            try:
                stats = await self.run_tick()
                logger.info(f"[RADAR] Tick done: {stats.summary()}")
            except Exception as e:
                logger.exception(f"[RADAR] Unexpected tick error: {e}")
            await asyncio.sleep(interval_sec)

    async def run_tick(self) -> TickStats:
        stats = TickStats()

        try:
            records = await self._client.get_migrations(limit=self._batch_limit)
        except PumpfunFetchError as e:
            logger.error(f"[PUMPFUN] Fetch failed: {e}")
            stats.fetch_failed = True
            return stats

        stats.fetched = len(records)
        for raw in records:
            try:
                outcome = await self.process_record(raw, stats)
            except Exception as e:
                stats.errors += 1
                logger.exception(f"[RADAR] Record crashed: {e}")
                continue
            stats.record(outcome)

        return stats

    async def process_record(self, raw: dict, stats: TickStats | None = None) -> RecordOutcome:
        now = self._clock()
        try:
            coin = normalize(raw, now=now, strict_numbers=self._strict_numbers)
        except NormalizationError as e:
            logger.warning(f"[RADAR] Skipping malformed record: {e}")
            return RecordOutcome.INVALID

        try:
            decision = await self._decide(coin, now)
        except StorageError as e:
            logger.error(f"[STORE] {e}")
            return RecordOutcome.STORAGE_FAILED
        if not decision.accepted:
            _log_reject(coin, decision)
            return RecordOutcome.REJECTED

        try:
            async with self._session_factory() as session:
                result = await upsert_coin_if_absent(session, coin)
        except StorageError as e:
            logger.error(f"[STORE] {e}")
            return RecordOutcome.STORAGE_FAILED

        if result is UpsertResult.ALREADY_EXISTS:
            return RecordOutcome.DUPLICATE

        logger.info(
            f"[RADAR] New coin {coin.symbol} {coin.contract_address} "
            f"liq={coin.initial_liquidity:.2f} fee={coin.creator_fee:.2f} "
            f"holders={coin.holders}"
        )
        if stats is not None:
            stats.last_stored = coin.contract_address

        await self._run_analyzer(coin)
        await self._alert(coin, stats)
        return RecordOutcome.STORED

    async def _decide(self, coin: MigratedCoin, now: datetime) -> PolicyDecision:
        # Blacklisted coins never reach the security hook or the store
        blocked = is_blacklisted(coin, self._policy)
        if blocked is not None:
            return blocked

        problem = None
        if self._security_check is not None:
            try:
                problem = await self._security_check(coin)
            except Exception as e:
                problem = f"security check failed: {e}"

        creator_count = None
        if not problem and self._policy.enforce_creator_quota:
            async with self._session_factory() as session:
                creator_count = await count_coins_by_creator(session, coin.creator_wallet)

        return evaluate(
            coin,
            self._policy,
            now=now,
            creator_coin_count=creator_count,
            security_problem=problem,
        )

    async def _run_analyzer(self, coin: MigratedCoin) -> None:
        if self._analyzer is None:
            return
        try:
            await self._analyzer(coin)
        except Exception as e:
            logger.warning(f"[ANALYSIS] Failed for {coin.contract_address}: {e}")

    async def _alert(self, coin: MigratedCoin, stats: TickStats | None) -> None:
        try:
            status = await self._dispatcher.notify(coin)
        except DeliveryError as e:
            logger.error(f"[ALERT] {coin.symbol} {coin.contract_address}: {e}")
            if stats is not None:
                stats.alerts_failed += 1
            return
        if status is DeliveryStatus.DELIVERED and stats is not None:
            stats.alerts_sent += 1


def _log_reject(coin: MigratedCoin, decision: PolicyDecision) -> None:
    if decision.reason in (RejectReason.BLACKLISTED, RejectReason.SECURITY):
        logger.warning(f"[POLICY] {decision.reason}: {decision.detail}")
    else:
        logger.debug(
            f"[POLICY] Rejected {coin.symbol} {coin.short_address}: "
            f"{decision.reason} ({decision.detail})"
        )
