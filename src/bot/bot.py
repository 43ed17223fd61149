"""Telegram bot construction, the send primitive for coin alerts.

Only built when telegram_bot_token is configured.
"""

from aiogram import Bot
from aiogram.utils.token import TokenValidationError
from loguru import logger


def create_bot(token: str) -> Bot | None:
    """Build an aiogram Bot, or None when no usable token is configured."""
    if not token:
        logger.info("[BOT] Telegram token not configured, alerts disabled")
        return None
    try:
        return Bot(token=token)
    except TokenValidationError as e:
        logger.warning(f"[BOT] Cannot create bot: {e}")
        return None


async def close_bot(bot: Bot | None) -> None:
    """Gracefully close the bot HTTP session."""
    if bot is not None:
        await bot.session.close()
