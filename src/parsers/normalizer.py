"""Raw migration record → MigratedCoin.

Validates the loosely-typed feed record against PumpfunMigration, then
canonicalizes addresses, coerces numbers and parses the migration time.
Pure mapping: no I/O, no logging.
"""

import math
import re
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from src.parsers.pumpfun.models import MigratedCoin, PumpfunMigration

_ADDRESS_RE = re.compile(r"^(?:0[xX])?([0-9a-fA-F]{40})$")
_RFC3339_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[Zz]|[+-]\d{2}:\d{2})$"
)


class NormalizationError(Exception):
    pass


class MissingField(NormalizationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"missing field '{field}'")
        self.field = field


class InvalidAddress(NormalizationError):
    def __init__(self, field: str, value: Any) -> None:
        super().__init__(f"invalid address in '{field}': {value!r}")
        self.field = field
        self.value = value


class InvalidTimestamp(NormalizationError):
    def __init__(self, value: Any) -> None:
        super().__init__(f"invalid migrationTime: {value!r}")
        self.value = value


class InvalidNumber(NormalizationError):
    def __init__(self, field: str, value: Any) -> None:
        super().__init__(f"invalid number in '{field}': {value!r}")
        self.field = field
        self.value = value


def canonical_address(value: str) -> str | None:
    """Lower-case ``0x``-prefixed hex form, or None if not a 20-byte address."""
    match = _ADDRESS_RE.match(value.strip())
    if not match:
        return None
    return "0x" + match.group(1).lower()


def normalize(
    raw: dict,
    *,
    now: datetime | None = None,
    strict_numbers: bool = False,
) -> MigratedCoin:
    """Map one feed record to a MigratedCoin or raise NormalizationError."""
    try:
        record = PumpfunMigration.model_validate(raw)
    except ValidationError as e:
        loc = e.errors()[0]["loc"] if e.errors() else ()
        raise MissingField(".".join(str(p) for p in loc) or "record") from e

    contract = _require_address(record.contractAddress, "contractAddress")

    if record.token is None:
        raise MissingField("token")
    name = _require_text(record.token.name, "token.name")
    symbol = _require_text(record.token.symbol, "token.symbol")

    creator = _require_address(record.creator, "creator")

    return MigratedCoin(
        contract_address=contract,
        name=name,
        symbol=symbol,
        creator_wallet=creator,
        migration_time=_parse_migration_time(record.migrationTime, now),
        initial_liquidity=_coerce_float(
            record.initialLiquidity, "initialLiquidity", strict_numbers
        ),
        creator_fee=_coerce_float(record.feePercentage, "feePercentage", strict_numbers),
        holders=int(_coerce_float(record.holderCount, "holderCount", strict_numbers)),
    )


def _require_address(value: Any, field: str) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingField(field)
    if not isinstance(value, str):
        raise InvalidAddress(field, value)
    canonical = canonical_address(value)
    if canonical is None:
        raise InvalidAddress(field, value)
    return canonical


def _require_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise MissingField(field)
    return value.strip()


def _parse_migration_time(value: Any, now: datetime | None) -> datetime:
    if value is None:
        return now or datetime.now(UTC)
    if not isinstance(value, str) or not _RFC3339_RE.match(value.strip()):
        raise InvalidTimestamp(value)
    text = value.strip().upper().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        # Shape matched but the calendar did not (e.g. month 13)
        raise InvalidTimestamp(value) from e
    return parsed.astimezone(UTC)


def _coerce_float(value: Any, field: str, strict: bool) -> float:
    """Number or numeric string → non-negative float.

    Lenient mode turns anything unusable into 0.0; strict mode raises.
    Missing values are 0.0 in both modes.
    """
    if value is None:
        return 0.0
    number: float | None = None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            number = None

    if number is None or not math.isfinite(number) or number < 0:
        if strict:
            raise InvalidNumber(field, value)
        return 0.0
    return number
