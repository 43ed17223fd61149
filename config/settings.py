from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

ENV_TEMPLATE = f"""\
# Pump.fun migrations feed
PUMPFUN_API_KEY=your_pumpfun_api_key_here
PUMPFUN_BASE_URL=https://api.pump.fun
POLL_INTERVAL_SEC=60
POLL_BATCH_LIMIT=10

# Filters
MIN_LIQUIDITY=5.0
MAX_CREATOR_FEE=10.0
MIN_HOLDERS=25
MIN_AGE_MINUTES=10
MAX_COINS_PER_CREATOR=3
ENFORCE_CREATOR_QUOTA=false
STRICT_NUMERIC_COERCION=false

# Blacklists (comma-separated)
BLOCKED_CONTRACT_ADDRESSES={ZERO_ADDRESS}
BLOCKED_CREATOR_ADDRESSES={ZERO_ADDRESS}

# Telegram
TELEGRAM_BOT_TOKEN=
TELEGRAM_CHANNEL_ID=0

# Logging
LOG_JSON=false

# Database
DATABASE_URL=sqlite+aiosqlite:///./pumpfun.db
"""


class ConfigFileMissingError(Exception):
    pass


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./pumpfun.db"

    # Pump.fun migrations feed
    pumpfun_api_key: str = ""
    pumpfun_base_url: str = "https://api.pump.fun"
    poll_interval_sec: int = 60
    poll_batch_limit: int = 10  # newest first

    # Filters
    min_liquidity: float = 5.0
    max_creator_fee: float = 10.0
    min_holders: int = 25
    min_age_minutes: int = 10  # skip coins younger than this
    max_coins_per_creator: int = 3
    enforce_creator_quota: bool = False
    strict_numeric_coercion: bool = False  # reject instead of zeroing bad numbers

    # Blacklists, comma-separated
    blocked_contract_addresses: str = ZERO_ADDRESS
    blocked_creator_addresses: str = ZERO_ADDRESS

    # Telegram channel for alerts
    telegram_bot_token: str = ""
    telegram_channel_id: int = 0

    # Logging
    log_json: bool = False  # serialize console and file sinks as JSON


def ensure_env_file(path: str | Path = ".env") -> Path:
    """Make sure the settings file exists.

    On first run writes a template to ``path`` and raises
    ConfigFileMissingError so the operator fills it in before the radar starts.
    """
    path = Path(path)
    if path.exists():
        return path
    path.write_text(ENV_TEMPLATE, encoding="utf-8")
    raise ConfigFileMissingError(
        f"Settings file not found, template written to {path.resolve()}"
    )


settings = Settings()
