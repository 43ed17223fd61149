import os
import sys
from pathlib import Path

from loguru import logger


def setup_logger(
    *, json_logs: bool = False, level: str = "INFO", log_dir: str | Path = "logs"
) -> None:
    """Configure loguru for the radar.

    Console level comes from LOG_LEVEL (default: INFO). The file sink keeps
    DEBUG so every rejected coin and its reason can be traced afterwards.
    """
    console_level = os.getenv("LOG_LEVEL", level).upper()
    logger.remove()

    if json_logs:
        logger.add(sys.stdout, serialize=True, level=console_level)
    else:
        logger.add(
            sys.stdout,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<level>{message}</level>"
            ),
            level=console_level,
            colorize=True,
        )

    logger.add(
        Path(log_dir) / "radar_{time:YYYY-MM-DD}.log",
        rotation="00:00",
        retention="14 days",
        compression="gz",
        level="DEBUG",
        serialize=json_logs,
        enqueue=True,
    )
