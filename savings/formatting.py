"""Input and display formatting used by the dashboard.

The ledger works on plain integers; everything that turns user keystrokes
into amounts, or amounts and card details into display text, lives here.
"""

from __future__ import annotations

import re
from typing import Optional

from savings import config
from savings.functional import Either, Left, Right

_NON_DIGITS = re.compile(r"\D")
_CARD_GROUPS = re.compile(r"\d{1,4}")


def format_currency(amount: int, symbol: str = config.CURRENCY_SYMBOL) -> str:
    return f"{symbol}{amount:,}"


def mask_balance(amount: int, visible: bool = True) -> str:
    if visible:
        return format_currency(amount)
    return f"{config.CURRENCY_SYMBOL}••••••"


def parse_amount(text: Optional[str]) -> Optional[int]:
    """Parse a comma-grouped amount such as ``"5,000"``; ``None`` when empty."""
    digits = _NON_DIGITS.sub("", text or "")
    if not digits:
        return None
    return int(digits)


def format_amount_input(text: Optional[str]) -> str:
    amount = parse_amount(text)
    return "" if amount is None else f"{amount:,}"


def format_card_number(text: str, previous: str = "") -> str:
    """Group card digits in fours. Input that would exceed 19 chars keeps ``previous``."""
    cleaned = re.sub(r"\s", "", text or "")
    groups = _CARD_GROUPS.findall(cleaned)
    if not groups:
        return ""
    formatted = " ".join(groups)
    if len(formatted) > 19:
        return previous
    return formatted


def format_expiry(text: str) -> str:
    cleaned = _NON_DIGITS.sub("", text or "")
    if len(cleaned) >= 2:
        return cleaned[:2] + "/" + cleaned[2:4]
    return cleaned


def validate_card(number: str, expiry: str, cvv: str, name: str) -> Either[str, dict]:
    if not number or not expiry or not cvv or not name:
        return Left("Please fill in all card details")
    digits = re.sub(r"\s", "", number)
    if len(digits) != 16 or not digits.isdigit():
        return Left("Please enter a valid 16-digit card number")
    if len(cvv) != 3:
        return Left("Please enter a valid 3-digit CVV")
    return Right({
        "number": number,
        "expiry": expiry,
        "name": name,
        "last_four": digits[-4:],
    })
