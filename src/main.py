"""Entry point for the Pump.fun migration radar."""

import asyncio
import signal
import sys

from loguru import logger

from config.settings import ConfigFileMissingError, ensure_env_file, settings
from src.bot.bot import close_bot, create_bot
from src.db.database import async_session_factory, engine, init_models
from src.parsers.alerts import CoinAlertDispatcher
from src.parsers.policy import PolicyConfig
from src.parsers.pumpfun.client import PumpfunClient
from src.parsers.worker import MigrationPipeline
from src.utils.logger import setup_logger


async def run() -> None:
    await init_models()

    policy = PolicyConfig.from_settings(settings)
    logger.info(
        f"Filters: liq>={policy.min_liquidity} fee<={policy.max_creator_fee} "
        f"holders>={policy.min_holders} age>={policy.min_age_minutes}m, "
        f"blacklist {len(policy.blocked_contracts)} coins / "
        f"{len(policy.blocked_creators)} creators"
    )

    client = PumpfunClient(
        api_key=settings.pumpfun_api_key, base_url=settings.pumpfun_base_url
    )
    bot = create_bot(settings.telegram_bot_token)
    dispatcher = CoinAlertDispatcher(bot=bot, channel_id=settings.telegram_channel_id)
    pipeline = MigrationPipeline(
        client=client,
        session_factory=async_session_factory,
        policy=policy,
        dispatcher=dispatcher,
        batch_limit=settings.poll_batch_limit,
        strict_numbers=settings.strict_numeric_coercion,
    )

    # Graceful shutdown on SIGINT/SIGTERM
    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received")
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    radar_task = asyncio.create_task(pipeline.run_forever(settings.poll_interval_sec))

    done, pending = await asyncio.wait(
        [radar_task, asyncio.create_task(shutdown_event.wait())],
        return_when=asyncio.FIRST_COMPLETED,
    )

    for task in pending:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    await client.close()
    await close_bot(bot)
    await engine.dispose()
    logger.info(f"Shutdown complete, {dispatcher.total_sent} alerts sent")
    await logger.complete()


def main() -> None:
    setup_logger(json_logs=settings.log_json, level="INFO")
    try:
        ensure_env_file(".env")
    except ConfigFileMissingError as e:
        logger.error(f"{e}. Fill it in and restart.")
        sys.exit(1)

    logger.info("Starting Pump.fun migration radar...")
    asyncio.run(run())


if __name__ == "__main__":
    main()
