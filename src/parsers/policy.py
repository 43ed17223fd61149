"""Acceptance policy for migrated coins.

Rules run in a fixed order and the first failing rule decides the reject
reason, so logs always name the most fundamental problem:

1. blacklist (contract or creator)
2. security finding, when the security hook reported one
3. liquidity floor
4. creator fee ceiling
5. holder floor
6. minimum age since migration
7. per-creator quota (only when enabled and a count is supplied)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from src.parsers.normalizer import canonical_address
from src.parsers.pumpfun.models import MigratedCoin


class RejectReason(StrEnum):
    BLACKLISTED = "blacklisted"
    SECURITY = "security"
    LOW_LIQUIDITY = "low_liquidity"
    HIGH_CREATOR_FEE = "high_creator_fee"
    FEW_HOLDERS = "few_holders"
    TOO_NEW = "too_new"
    CREATOR_QUOTA = "creator_quota"


@dataclass(frozen=True)
class PolicyDecision:
    accepted: bool
    reason: RejectReason | None = None
    detail: str = ""

    @classmethod
    def reject(cls, reason: RejectReason, detail: str) -> PolicyDecision:
        return cls(accepted=False, reason=reason, detail=detail)


ACCEPT = PolicyDecision(accepted=True)


def parse_address_list(value: str) -> frozenset[str]:
    """Comma-separated blacklist → set of trimmed, canonical entries.

    Entries that are not hex addresses are kept verbatim (trimmed) so an
    operator typo never silently widens the blacklist.
    """
    entries: set[str] = set()
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        entries.add(canonical_address(item) or item)
    return frozenset(entries)


@dataclass(frozen=True)
class PolicyConfig:
    """Read-only thresholds and blacklists, built once at startup."""

    min_liquidity: float = 5.0
    max_creator_fee: float = 10.0
    min_holders: int = 25
    min_age_minutes: int = 10
    max_coins_per_creator: int = 3
    enforce_creator_quota: bool = False
    blocked_contracts: frozenset[str] = field(default_factory=frozenset)
    blocked_creators: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_settings(cls, settings) -> PolicyConfig:
        return cls(
            min_liquidity=settings.min_liquidity,
            max_creator_fee=settings.max_creator_fee,
            min_holders=settings.min_holders,
            min_age_minutes=settings.min_age_minutes,
            max_coins_per_creator=settings.max_coins_per_creator,
            enforce_creator_quota=settings.enforce_creator_quota,
            blocked_contracts=parse_address_list(settings.blocked_contract_addresses),
            blocked_creators=parse_address_list(settings.blocked_creator_addresses),
        )


def is_blacklisted(coin: MigratedCoin, config: PolicyConfig) -> PolicyDecision | None:
    """Return a BLACKLISTED rejection if contract or creator is blocked."""
    if coin.contract_address.strip() in config.blocked_contracts:
        return PolicyDecision.reject(
            RejectReason.BLACKLISTED, f"contract {coin.contract_address} is blacklisted"
        )
    if coin.creator_wallet.strip() in config.blocked_creators:
        return PolicyDecision.reject(
            RejectReason.BLACKLISTED, f"creator {coin.creator_wallet} is blacklisted"
        )
    return None


def check_filters(
    coin: MigratedCoin,
    config: PolicyConfig,
    *,
    now: datetime | None = None,
    creator_coin_count: int | None = None,
) -> PolicyDecision:
    """Quantitative rules 3-7, without the blacklist or security finding."""
    if coin.initial_liquidity < config.min_liquidity:
        return PolicyDecision.reject(
            RejectReason.LOW_LIQUIDITY,
            f"liquidity {coin.initial_liquidity:.2f} < {config.min_liquidity:.2f}",
        )
    if coin.creator_fee > config.max_creator_fee:
        return PolicyDecision.reject(
            RejectReason.HIGH_CREATOR_FEE,
            f"creator fee {coin.creator_fee:.2f} > {config.max_creator_fee:.2f}",
        )
    if coin.holders < config.min_holders:
        return PolicyDecision.reject(
            RejectReason.FEW_HOLDERS,
            f"holders {coin.holders} < {config.min_holders}",
        )

    now = now or datetime.now(UTC)
    threshold = now - timedelta(minutes=config.min_age_minutes)
    if coin.migration_time > threshold:
        age_min = (now - coin.migration_time).total_seconds() / 60
        return PolicyDecision.reject(
            RejectReason.TOO_NEW,
            f"migrated {age_min:.1f}m ago < {config.min_age_minutes}m",
        )

    if (
        config.enforce_creator_quota
        and creator_coin_count is not None
        and creator_coin_count >= config.max_coins_per_creator
    ):
        return PolicyDecision.reject(
            RejectReason.CREATOR_QUOTA,
            f"creator already has {creator_coin_count} coins "
            f"(max {config.max_coins_per_creator})",
        )

    return ACCEPT


def evaluate(
    coin: MigratedCoin,
    config: PolicyConfig,
    *,
    now: datetime | None = None,
    creator_coin_count: int | None = None,
    security_problem: str | None = None,
) -> PolicyDecision:
    """Full decision: blacklist, then security finding, then the quantitative filters.

    ``security_problem`` is whatever the security hook reported for this coin;
    a non-empty value rejects with SECURITY unless the coin is already blacklisted.
    """
    blocked = is_blacklisted(coin, config)
    if blocked is not None:
        return blocked
    if security_problem:
        return PolicyDecision.reject(RejectReason.SECURITY, security_problem)
    return check_filters(coin, config, now=now, creator_coin_count=creator_coin_count)
