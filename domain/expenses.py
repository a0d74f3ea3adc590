from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date as dt_date

from .validation import ensure_valid_merchant, normalize_expense_id, parse_value, parse_ymd

CSV_HEADER = "id, date, value, merchant"

_TEXT_LINE = re.compile(
    r"^Expense \[id=(?P<id>[^,]*), date=(?P<date>[^,]*), "
    r"value=(?P<value>[^,]*), merchant=(?P<merchant>.*)\]$"
)


@dataclass(frozen=True)
class Expense:
    id: int | str
    date: dt_date | str
    value: float
    merchant: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", normalize_expense_id(self.id))
        if isinstance(self.date, dt_date):
            parsed = self.date
        else:
            parsed = parse_ymd((self.date or "").strip())
        object.__setattr__(self, "date", parsed)
        object.__setattr__(self, "value", parse_value(self.value))
        ensure_valid_merchant(self.merchant)

    def __str__(self) -> str:
        return (
            f"Expense [id={self.id}, date={self.date_text}, "
            f"value={self.value}, merchant={self.merchant}]"
        )

    @property
    def date_text(self) -> str:
        return self.date.isoformat() if isinstance(self.date, dt_date) else str(self.date)

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "date": self.date_text,
            "value": self.value,
            "merchant": self.merchant,
        }

    @classmethod
    def from_payload(cls, item: dict) -> "Expense":
        try:
            return cls(
                id=item["id"],
                date=str(item["date"]),
                value=item["value"],
                merchant=str(item.get("merchant", "") or ""),
            )
        except KeyError as exc:
            raise ValueError(f"Missing expense field: {exc.args[0]}") from exc

    def to_csv_row(self) -> str:
        return f"{self.id}, {self.date_text}, {self.value}, {self.merchant}"

    @classmethod
    def from_csv_row(cls, line: str) -> "Expense":
        # The merchant is the last column, so embedded commas survive.
        parts = line.split(",", 3)
        if len(parts) != 4:
            raise ValueError(f"Expected 4 columns, got {len(parts)}")
        expense_id, date_text, value = (part.strip() for part in parts[:3])
        merchant = parts[3]
        # Only the separator space is dropped; the merchant keeps its own padding.
        if merchant.startswith(" "):
            merchant = merchant[1:]
        return cls(id=expense_id, date=date_text, value=value, merchant=merchant)

    @classmethod
    def from_text_line(cls, line: str) -> "Expense":
        match = _TEXT_LINE.match(line.strip())
        if match is None:
            raise ValueError("Line is not a serialized expense")
        return cls(
            id=match.group("id"),
            date=match.group("date"),
            value=match.group("value"),
            merchant=match.group("merchant"),
        )
