"""Payload parsing helpers for the Binance Alpha REST API.

The API wraps every payload in an envelope ``{"code": "000000", "data": ...}``.
Anything else is treated as a malformed response.

All monetary values use Decimal. Never use float for prices or quantities.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from alpha_monitor.exceptions import MalformedResponseError
from alpha_monitor.models import TokenInfo, TradeRecord

SUCCESS_CODE = "000000"


def unwrap_envelope(payload: Any, pair: str | None = None) -> Any:
    """Return ``payload["data"]`` after checking the success code."""
    if not isinstance(payload, dict):
        raise MalformedResponseError("response is not a JSON object", pair)
    code = payload.get("code")
    if code != SUCCESS_CODE:
        raise MalformedResponseError(f"unexpected response code {code!r}", pair)
    if payload.get("data") is None:
        raise MalformedResponseError("response has no data", pair)
    return payload["data"]


def to_decimal(value: Any, field: str, pair: str | None = None) -> Decimal:
    """Convert an API number (usually a string) to Decimal."""
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise MalformedResponseError(f"invalid {field}: {value!r}", pair) from e


def to_positive_decimal(value: Any, field: str, pair: str | None = None) -> Decimal:
    """Convert a price or quantity, rejecting zero, negative and non-finite values."""
    number = to_decimal(value, field, pair)
    if not number.is_finite() or number <= 0:
        raise MalformedResponseError(f"{field} must be positive: {value!r}", pair)
    return number


def parse_agg_trade(row: Any, pair: str | None = None) -> TradeRecord:
    """Map an agg-trade row (``a``, ``T``, ``p``, ``q``) onto a TradeRecord."""
    if not isinstance(row, dict):
        raise MalformedResponseError("agg trade row is not an object", pair)
    try:
        return TradeRecord(
            id=int(row["a"]),
            timestamp=int(row["T"]),
            price=to_positive_decimal(row["p"], "price", pair),
            quantity=to_positive_decimal(row["q"], "quantity", pair),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise MalformedResponseError(f"invalid agg trade row: {row!r}", pair) from e


def parse_token(row: Any) -> TokenInfo | None:
    """Map a token-list row onto TokenInfo, or None when it lacks ids."""
    if not isinstance(row, dict):
        return None
    alpha_id = row.get("alphaId")
    symbol = row.get("symbol")
    if not alpha_id or not symbol:
        return None
    return TokenInfo(alpha_id=alpha_id, symbol=symbol, name=row.get("name") or "")
