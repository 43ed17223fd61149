"""Coin persistence: insert-once storage keyed by contract address."""

from datetime import UTC, datetime
from enum import Enum

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.coin import Coin
from src.parsers.pumpfun.models import MigratedCoin


class StorageError(Exception):
    pass


class UpsertResult(Enum):
    INSERTED = "inserted"
    ALREADY_EXISTS = "already_exists"


def _sanitize(val: str) -> str:
    """Strip null bytes and surrounding whitespace that PostgreSQL rejects."""
    return val.replace("\x00", "").strip()


def _fit(val: str, column: str) -> str:
    """Sanitize and cut to the column width so PostgreSQL never raises DataError."""
    return _sanitize(val)[: Coin.__table__.c[column].type.length]


def _naive_utc(value: datetime) -> datetime:
    """DB columns hold naive UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def _insert_for(session: AsyncSession):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise StorageError(f"unsupported database dialect: {dialect}")


async def upsert_coin_if_absent(session: AsyncSession, coin: MigratedCoin) -> UpsertResult:
    """Insert the coin unless its contract address is already stored.

    One ``INSERT ... ON CONFLICT DO NOTHING RETURNING id`` statement, so
    repeated or concurrent sightings can never create a second row.
    Any database failure is rolled back and raised as StorageError.
    """
    insert = _insert_for(session)
    stmt = (
        insert(Coin)
        .values(
            contract_address=coin.contract_address,
            name=_fit(coin.name, "name"),
            symbol=_fit(coin.symbol, "symbol"),
            creator_wallet=coin.creator_wallet,
            migration_time=_naive_utc(coin.migration_time),
            initial_liquidity=coin.initial_liquidity,
            creator_fee=coin.creator_fee,
            holders=coin.holders,
        )
        .on_conflict_do_nothing(index_elements=["contract_address"])
        .returning(Coin.id)
    )
    try:
        result = await session.execute(stmt)
        inserted_id = result.scalar_one_or_none()
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        raise StorageError(f"upsert failed for {coin.contract_address}: {e}") from e

    if inserted_id is None:
        logger.debug(f"[STORE] {coin.contract_address} already stored")
        return UpsertResult.ALREADY_EXISTS
    logger.debug(f"[STORE] Inserted {coin.symbol} {coin.contract_address} id={inserted_id}")
    return UpsertResult.INSERTED


async def get_coin_by_address(session: AsyncSession, address: str) -> Coin | None:
    result = await session.execute(select(Coin).where(Coin.contract_address == address))
    return result.scalar_one_or_none()


async def count_coins_by_creator(session: AsyncSession, creator_wallet: str) -> int:
    """Number of stored coins launched by a creator wallet."""
    try:
        result = await session.execute(
            select(func.count(Coin.id)).where(Coin.creator_wallet == creator_wallet)
        )
    except SQLAlchemyError as e:
        raise StorageError(f"creator count failed for {creator_wallet}: {e}") from e
    return int(result.scalar_one())
