"""Telegram alerts for newly stored coins.

Best-effort delivery: a failed send raises DeliveryError for the caller to
log, it never undoes the stored row. No channel configured means SKIPPED.
"""

import asyncio
from enum import Enum

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError, TelegramRetryAfter
from loguru import logger

from src.parsers.pumpfun.models import MigratedCoin

MAX_RETRY_AFTER_SEC = 30


class DeliveryError(Exception):
    pass


class DeliveryStatus(Enum):
    DELIVERED = "delivered"
    SKIPPED = "skipped"


class CoinAlertDispatcher:
    """Sends one plain-text message per newly stored coin."""

    def __init__(self, bot: Bot | None = None, channel_id: int = 0) -> None:
        self._bot = bot
        self._channel_id = channel_id
        self._total_sent: int = 0

    @property
    def enabled(self) -> bool:
        return self._bot is not None and bool(self._channel_id)

    async def notify(self, coin: MigratedCoin) -> DeliveryStatus:
        if not self.enabled:
            logger.debug(f"[ALERT] Telegram not configured, skipping {coin.symbol}")
            return DeliveryStatus.SKIPPED

        text = format_coin_message(coin)
        try:
            await self._send(text)
        except TelegramRetryAfter as e:
            # Flood control: wait once, then give up
            delay = min(e.retry_after, MAX_RETRY_AFTER_SEC)
            logger.warning(f"[ALERT] Telegram FloodWait, sleeping {delay}s")
            await asyncio.sleep(delay)
            try:
                await self._send(text)
            except TelegramAPIError as retry_err:
                raise DeliveryError(f"send failed after FloodWait: {retry_err}") from retry_err
        except TelegramAPIError as e:
            raise DeliveryError(f"send failed: {e}") from e

        self._total_sent += 1
        logger.info(f"[ALERT] Sent {coin.symbol} {coin.contract_address}")
        return DeliveryStatus.DELIVERED

    async def _send(self, text: str) -> None:
        await self._bot.send_message(
            chat_id=self._channel_id,
            text=text,
            disable_web_page_preview=True,
        )

    @property
    def total_sent(self) -> int:
        return self._total_sent


def format_coin_message(coin: MigratedCoin) -> str:
    return (
        "New coin found:\n"
        f"Symbol: {coin.symbol}\n"
        f"Contract: {coin.contract_address}\n"
        f"Liquidity: {coin.initial_liquidity:.2f}\n"
    )
