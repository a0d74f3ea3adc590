import calendar
import math
import re
from datetime import date

# Characters that collide with the line-based file formats.
_ID_FORBIDDEN = re.compile(r"[,\[\]\r\n]")


def parse_ymd(value: str | date) -> date:
    if isinstance(value, date):
        return value
    if not value:
        raise ValueError("Date value is empty")
    if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value):
        raise ValueError("Invalid date format")
    year, month, day = map(int, value.split("-"))
    if not (1 <= month <= 12):
        raise ValueError("Invalid month")
    last_day = calendar.monthrange(year, month)[1]
    if not (1 <= day <= last_day):
        raise ValueError("Invalid day")
    return date(year, month, day)


def normalize_expense_id(value: int | str) -> int | str:
    """Return ``value`` as a positive int, or as a non-empty string id."""
    if isinstance(value, bool):
        raise ValueError("id must be an integer or a string")
    if isinstance(value, int):
        expense_id: int | str = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("id must not be empty")
        if _ID_FORBIDDEN.search(text):
            raise ValueError("id must not contain commas, brackets or line breaks")
        expense_id = int(text) if re.fullmatch(r"-?\d+", text) else text
    else:
        raise ValueError("id must be an integer or a string")
    if isinstance(expense_id, int) and expense_id <= 0:
        raise ValueError("id must be a positive integer")
    return expense_id


def parse_value(value) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid value: {value!r}") from exc
    if math.isnan(amount) or math.isinf(amount):
        raise ValueError("Value must be a finite number")
    return amount


def ensure_positive_value(value: float) -> None:
    if value <= 0:
        raise ValueError("Value must be positive")


def ensure_valid_merchant(merchant: str) -> None:
    if not isinstance(merchant, str):
        raise ValueError("Merchant must be a string")
    if "\n" in merchant or "\r" in merchant:
        raise ValueError("Merchant must be a single line")


def ensure_merchant_present(merchant: str) -> None:
    ensure_valid_merchant(merchant)
    if not merchant.strip():
        raise ValueError("Merchant is required")
