"""
Financial record synthesis.

Asks the model for a JSON array of {symbol, price, volume} records scoped to
the data subject. Replies that fail to parse or validate, and failed model
calls, are replaced by synthetic records from a fixed symbol pool so a data
turn never fails because of the model.
"""

import math
import random
from typing import Any

import structlog

from ..core.config import Settings
from ..core.utils.json_utils import extract_first_json_value
from ..core.utils.symbol_utils import FALLBACK_SYMBOLS, known_symbols_in
from ..models.session import FinancialRecord
from .llm_client import TextGenerator
from .prompts import build_data_prompt

logger = structlog.get_logger()

MIN_RECORDS = 3
MAX_RECORDS = 10
FALLBACK_MIN_RECORDS = 3
FALLBACK_MAX_RECORDS = 5


class RecordValidationError(ValueError):
    """Parsed model output is not a usable list of financial records."""


class DataSynthesizer:
    """
    Produces 3-10 FinancialRecords for a data subject.

    Args:
        llm: Text generator for record generation
        settings: Supplies fallback price/volume bounds
        rng: Random source for fallback records (injectable for tests)
    """

    def __init__(
        self,
        llm: TextGenerator,
        settings: Settings,
        rng: random.Random | None = None,
    ):
        self.llm = llm
        self.settings = settings
        self.rng = rng or random.Random()

    async def synthesize(self, data_subject: str | None) -> list[FinancialRecord]:
        """
        Generate records for a subject (ticker, company, sector or metric).

        Args:
            data_subject: Resolved subject, or None for a generic multi-company set

        Returns:
            Between 3 and 10 validated records
        """
        prompt = build_data_prompt(data_subject)

        try:
            reply = await self.llm.generate(prompt)
        except Exception as e:
            logger.warning(
                "Data model call failed, using fallback records",
                error=str(e),
                error_type=type(e).__name__,
                data_subject=data_subject,
            )
            return self.fallback_records(data_subject)

        logger.debug("Data model raw reply", reply=reply)

        try:
            records = parse_records(reply)
        except RecordValidationError as e:
            logger.warning(
                "Data reply failed validation, using fallback records",
                error=str(e),
                data_subject=data_subject,
                reply_preview=reply[:120],
            )
            return self.fallback_records(data_subject)

        logger.info(
            "Financial records generated",
            data_subject=data_subject,
            record_count=len(records),
            symbols=sorted({r.symbol for r in records}),
        )
        return records

    def fallback_records(self, data_subject: str | None = None) -> list[FinancialRecord]:
        """
        Synthetic records from the fixed pool.

        When the subject names pool symbols (by ticker or company name) only
        those symbols are used.
        """
        pool = known_symbols_in(data_subject) or list(FALLBACK_SYMBOLS)
        count = self.rng.randint(FALLBACK_MIN_RECORDS, FALLBACK_MAX_RECORDS)

        records = [
            FinancialRecord(
                symbol=self.rng.choice(pool),
                price=round(
                    self.rng.uniform(
                        self.settings.fallback_min_price,
                        self.settings.fallback_max_price,
                    ),
                    2,
                ),
                volume=self.rng.randint(
                    self.settings.fallback_min_volume,
                    self.settings.fallback_max_volume,
                ),
            )
            for _ in range(count)
        ]
        logger.info(
            "Fallback records generated",
            data_subject=data_subject,
            record_count=len(records),
            pool_size=len(pool),
        )
        return records


def parse_records(reply: str) -> list[FinancialRecord]:
    """
    Extract and validate records from a model reply.

    Raises:
        RecordValidationError: No JSON list, a malformed item, or fewer than 3 records
    """
    payload = extract_first_json_value(reply)
    if not isinstance(payload, list):
        raise RecordValidationError("Reply does not contain a JSON array")

    records = [_to_record(item, index) for index, item in enumerate(payload)]

    if len(records) < MIN_RECORDS:
        raise RecordValidationError(
            f"Expected at least {MIN_RECORDS} records, got {len(records)}"
        )
    if len(records) > MAX_RECORDS:
        logger.info("Truncating generated records", received=len(records), kept=MAX_RECORDS)
        records = records[:MAX_RECORDS]
    return records


def _to_record(item: Any, index: int) -> FinancialRecord:
    if not isinstance(item, dict):
        raise RecordValidationError(f"Item {index} is not an object")

    symbol = item.get("symbol")
    price = item.get("price")
    volume = item.get("volume")

    if not isinstance(symbol, str) or not symbol.strip():
        raise RecordValidationError(f"Item {index} has no string symbol")
    price_value = _as_finite_float(price, "price", index)
    if price_value < 0:
        raise RecordValidationError(f"Item {index} has a negative price: {price_value}")
    _as_finite_float(volume, "volume", index)
    if isinstance(volume, float) and not volume.is_integer():
        raise RecordValidationError(f"Item {index} has a fractional volume: {volume!r}")
    if volume < 0:
        raise RecordValidationError(f"Item {index} has a negative volume: {volume!r}")

    return FinancialRecord(
        symbol=symbol.strip(), price=round(price_value, 2), volume=int(volume)
    )


def _as_finite_float(value: Any, field: str, index: int) -> float:
    """JSON number as a finite float; bools, strings and overflowing ints are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RecordValidationError(f"Item {index} has an invalid {field}: {value!r}")
    try:
        number = float(value)
    except OverflowError:
        raise RecordValidationError(f"Item {index} has an out-of-range {field}") from None
    if not math.isfinite(number):
        raise RecordValidationError(f"Item {index} has a non-finite {field}")
    return number
