"""Tests for raw migration record normalization."""

from datetime import UTC, datetime, timedelta

import pytest

from src.parsers.normalizer import (
    InvalidAddress,
    InvalidNumber,
    InvalidTimestamp,
    MissingField,
    canonical_address,
    normalize,
)

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=UTC)
CONTRACT = "0x52908400098527886E0F7030069857D2E4169EE7"
CREATOR = "0xDE709F2102306220921060314715629080E2FB77"


def _make_raw(**overrides) -> dict:
    raw = {
        "contractAddress": CONTRACT,
        "token": {"name": "Pepe Classic", "symbol": "PEPEC"},
        "creator": CREATOR,
        "migrationTime": "2026-10-18T11:45:00Z",
        "initialLiquidity": 10.0,
        "feePercentage": 2.0,
        "holderCount": 30,
    }
    raw.update(overrides)
    return raw


class TestCanonicalAddress:
    def test_lowercases_and_prefixes(self) -> None:
        assert canonical_address("52908400098527886E0F7030069857D2E4169EE7") == (
            "0x52908400098527886e0f7030069857d2e4169ee7"
        )

    def test_strips_whitespace(self) -> None:
        assert canonical_address(f"  {CONTRACT}\n") == CONTRACT.lower()

    def test_rejects_wrong_length(self) -> None:
        assert canonical_address("0x1234") is None

    def test_rejects_non_hex(self) -> None:
        assert canonical_address("0x" + "g" * 40) is None

    def test_rejects_solana_style(self) -> None:
        assert canonical_address("7GCihgDB8fe6KNjn2MYtkzZcRjQy3t9GHdC8uHYmW2hr") is None


class TestNormalize:
    def test_well_formed_record(self) -> None:
        coin = normalize(_make_raw(), now=NOW)
        assert coin.contract_address == CONTRACT.lower()
        assert coin.creator_wallet == CREATOR.lower()
        assert coin.name == "Pepe Classic"
        assert coin.symbol == "PEPEC"
        assert coin.migration_time == datetime(2026, 10, 18, 11, 45, tzinfo=UTC)
        assert coin.initial_liquidity == 10.0
        assert coin.creator_fee == 2.0
        assert coin.holders == 30

    def test_address_case_does_not_matter(self) -> None:
        upper = normalize(_make_raw(contractAddress=CONTRACT.upper().replace("0X", "0x")), now=NOW)
        lower = normalize(_make_raw(contractAddress=CONTRACT.lower()), now=NOW)
        assert upper.contract_address == lower.contract_address
        assert upper.creator_wallet == lower.creator_wallet

    def test_name_and_symbol_trimmed(self) -> None:
        coin = normalize(_make_raw(token={"name": "  Doge  ", "symbol": " DOGE "}), now=NOW)
        assert coin.name == "Doge"
        assert coin.symbol == "DOGE"

    def test_extra_fields_ignored(self) -> None:
        coin = normalize(_make_raw(poolAddress="abc", marketCap=123), now=NOW)
        assert coin.symbol == "PEPEC"

    def test_coin_is_immutable(self) -> None:
        coin = normalize(_make_raw(), now=NOW)
        with pytest.raises(AttributeError):
            coin.holders = 1  # type: ignore[misc]


class TestRequiredFields:
    def test_missing_contract(self) -> None:
        raw = _make_raw()
        del raw["contractAddress"]
        with pytest.raises(MissingField) as exc:
            normalize(raw, now=NOW)
        assert exc.value.field == "contractAddress"

    def test_blank_contract(self) -> None:
        with pytest.raises(MissingField):
            normalize(_make_raw(contractAddress="   "), now=NOW)

    def test_missing_token(self) -> None:
        raw = _make_raw()
        del raw["token"]
        with pytest.raises(MissingField) as exc:
            normalize(raw, now=NOW)
        assert exc.value.field == "token"

    def test_token_not_an_object(self) -> None:
        with pytest.raises(MissingField) as exc:
            normalize(_make_raw(token="PEPE"), now=NOW)
        assert exc.value.field.startswith("token")

    def test_missing_symbol(self) -> None:
        with pytest.raises(MissingField) as exc:
            normalize(_make_raw(token={"name": "Pepe"}), now=NOW)
        assert exc.value.field == "token.symbol"

    def test_empty_name(self) -> None:
        with pytest.raises(MissingField) as exc:
            normalize(_make_raw(token={"name": "", "symbol": "P"}), now=NOW)
        assert exc.value.field == "token.name"

    def test_missing_creator(self) -> None:
        raw = _make_raw()
        del raw["creator"]
        with pytest.raises(MissingField) as exc:
            normalize(raw, now=NOW)
        assert exc.value.field == "creator"

    def test_record_not_an_object(self) -> None:
        with pytest.raises(MissingField):
            normalize(["not", "a", "record"], now=NOW)  # type: ignore[arg-type]


class TestAddresses:
    def test_malformed_contract(self) -> None:
        with pytest.raises(InvalidAddress) as exc:
            normalize(_make_raw(contractAddress="0x1234"), now=NOW)
        assert exc.value.field == "contractAddress"

    def test_malformed_creator(self) -> None:
        with pytest.raises(InvalidAddress) as exc:
            normalize(_make_raw(creator="not-a-wallet"), now=NOW)
        assert exc.value.field == "creator"

    def test_numeric_address(self) -> None:
        with pytest.raises(InvalidAddress):
            normalize(_make_raw(contractAddress=12345), now=NOW)


class TestMigrationTime:
    def test_missing_defaults_to_now(self) -> None:
        raw = _make_raw()
        del raw["migrationTime"]
        assert normalize(raw, now=NOW).migration_time == NOW

    def test_null_defaults_to_now(self) -> None:
        assert normalize(_make_raw(migrationTime=None), now=NOW).migration_time == NOW

    def test_missing_without_now_uses_wall_clock(self) -> None:
        before = datetime.now(UTC)
        coin = normalize(_make_raw(migrationTime=None))
        assert before <= coin.migration_time <= datetime.now(UTC) + timedelta(seconds=1)

    def test_offset_converted_to_utc(self) -> None:
        coin = normalize(_make_raw(migrationTime="2026-10-18T13:45:00+02:00"), now=NOW)
        assert coin.migration_time == datetime(2026, 10, 18, 11, 45, tzinfo=UTC)

    def test_fractional_seconds(self) -> None:
        coin = normalize(_make_raw(migrationTime="2026-10-18T11:45:00.250Z"), now=NOW)
        assert coin.migration_time == datetime(2026, 10, 18, 11, 45, 0, 250000, tzinfo=UTC)

    @pytest.mark.parametrize(
        "value",
        [
            "2026/10/18 11:45",
            "2026-10-18",
            "2026-10-18T11:45:00",  # no offset
            "2026-13-18T11:45:00Z",
            "yesterday",
            1760787900,
        ],
    )
    def test_bad_timestamp(self, value) -> None:
        with pytest.raises(InvalidTimestamp):
            normalize(_make_raw(migrationTime=value), now=NOW)


class TestNumericCoercion:
    def test_numeric_strings(self) -> None:
        coin = normalize(
            _make_raw(initialLiquidity="12.5", feePercentage="1", holderCount="42"),
            now=NOW,
        )
        assert coin.initial_liquidity == 12.5
        assert coin.creator_fee == 1.0
        assert coin.holders == 42

    def test_holder_count_truncated(self) -> None:
        assert normalize(_make_raw(holderCount=30.9), now=NOW).holders == 30

    def test_missing_numbers_are_zero(self) -> None:
        raw = _make_raw()
        for key in ("initialLiquidity", "feePercentage", "holderCount"):
            del raw[key]
        coin = normalize(raw, now=NOW, strict_numbers=True)
        assert coin.initial_liquidity == 0.0
        assert coin.creator_fee == 0.0
        assert coin.holders == 0

    @pytest.mark.parametrize("value", ["abc", "", "nan", "inf", -3, True, [1]])
    def test_lenient_mode_zeroes_bad_values(self, value) -> None:
        coin = normalize(_make_raw(initialLiquidity=value), now=NOW)
        assert coin.initial_liquidity == 0.0

    @pytest.mark.parametrize("value", ["abc", "nan", -3, True])
    def test_strict_mode_rejects_bad_values(self, value) -> None:
        with pytest.raises(InvalidNumber) as exc:
            normalize(_make_raw(initialLiquidity=value), now=NOW, strict_numbers=True)
        assert exc.value.field == "initialLiquidity"

    def test_strict_mode_bad_holder_count(self) -> None:
        with pytest.raises(InvalidNumber) as exc:
            normalize(_make_raw(holderCount="lots"), now=NOW, strict_numbers=True)
        assert exc.value.field == "holderCount"
