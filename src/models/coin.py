from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base


class Coin(Base):
    """A migrated coin that passed every filter. Written once, never updated."""

    __tablename__ = "coins"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    contract_address: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255))
    symbol: Mapped[str] = mapped_column(String(50))
    creator_wallet: Mapped[str] = mapped_column(String(64))
    migration_time: Mapped[datetime] = mapped_column(DateTime)
    initial_liquidity: Mapped[float] = mapped_column(Float, default=0.0)
    creator_fee: Mapped[float] = mapped_column(Float, default=0.0)
    holders: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("contract_address", name="uq_coin_contract_address"),
        Index("idx_coins_creator_wallet", "creator_wallet"),
    )
