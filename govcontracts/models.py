"""Pydantic models for Quiver government contract payloads."""
from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def sanitize_text(value: Any) -> str:
    """Make a free-text field safe to embed in a comma separated line."""

    if value is None:
        return ""
    text = str(value)
    return text.replace(",", ";").replace("\r\n", " ").replace("\r", " ").replace("\n", " ")


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class RawGovernmentContract(BaseModel):
    """One contract award as reported by ``govcontractsall``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    report_date: Optional[date] = Field(default=None, alias="Date")
    action_date: Optional[date] = Field(default=None, alias="action_date")
    ticker: str = Field(default="", alias="Ticker")
    description: Optional[str] = Field(default=None, alias="Description")
    agency: Optional[str] = Field(default=None, alias="Agency")
    amount: Decimal = Field(default=Decimal("0"), alias="Amount")

    @field_validator("report_date", "action_date", mode="before")
    @classmethod
    def _dates(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value

    @field_validator("ticker", mode="before")
    @classmethod
    def _ticker(cls, value: Any) -> str:
        return str(value or "").strip().upper()

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if value is None:
            return Decimal("0")
        if isinstance(value, float):
            return Decimal(str(value))
        return value

    def to_line(self, processing_date: date) -> str:
        """Render ``YYYYMMDD,description,agency,amount``.

        A missing action date falls back to ``processing_date``.
        """

        action = self.action_date or processing_date
        return ",".join(
            (
                action.strftime("%Y%m%d"),
                sanitize_text(self.description),
                sanitize_text(self.agency),
                format(self.amount, "f"),
            )
        )


_PAGE_ADAPTER = TypeAdapter(list[RawGovernmentContract])


def parse_page(body: str) -> list[RawGovernmentContract]:
    """Parse one JSON page, keeping amounts as exact decimals."""

    payload = json.loads(body, parse_float=Decimal)
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON array, got {type(payload).__name__}")
    return _PAGE_ADAPTER.validate_python(payload)


__all__ = ["RawGovernmentContract", "parse_page", "sanitize_text"]
