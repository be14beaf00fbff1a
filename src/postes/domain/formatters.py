from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from .constants import METODOS_PAGAMENTO, TIPOS_DESPESA, TIPOS_MOVIMENTO, TIPOS_VENDA
from .parsing import to_money


def format_currency(value: Any) -> str:
    """BRL formatting: R$ 1.234,56 (negative as -R$ 1.234,56)."""
    number = to_money(value)
    text = f"{abs(number):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"-R$ {text}" if number < 0 else f"R$ {text}"


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_date(value: Optional[str], include_time: bool = False) -> str:
    parsed = parse_datetime(value)
    if parsed is None:
        return "-"
    return parsed.strftime("%d/%m/%Y %H:%M" if include_time else "%d/%m/%Y")


def format_date_input(value: Optional[str]) -> str:
    parsed = parse_datetime(value)
    return parsed.date().isoformat() if parsed else ""


def current_date_input(today: date | None = None) -> str:
    return (today or date.today()).isoformat()


def first_of_month(today: date | None = None) -> date:
    return (today or date.today()).replace(day=1)


def metodo_pagamento_label(value: Optional[str]) -> str:
    if not value:
        return "Não informado"
    return METODOS_PAGAMENTO.get(value, value)


def tipo_venda_label(value: Optional[str]) -> str:
    return TIPOS_VENDA.get(value or "", value or "")


def tipo_despesa_label(value: Optional[str]) -> str:
    return TIPOS_DESPESA.get(value or "", value or "")


def tipo_movimento_label(value: Optional[str]) -> str:
    return TIPOS_MOVIMENTO.get(value or "", value or "")
