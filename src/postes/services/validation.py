from __future__ import annotations

from datetime import date, datetime
import math
from typing import Any, Optional

from postes.domain.errors import ValidationError


def parse_decimal(value: Any) -> Optional[float]:
    """Form input to float. Empty gives None; garbage raises ValueError."""
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        # accept Brazilian "1.234,56" as well as "1234.56"
        if "," in text:
            if text.rfind(",") < text.rfind("."):
                raise ValueError(f"ambiguous separators: {text!r}")
            text = text.replace(".", "").replace(",", ".")
        number = float(text)
    if math.isnan(number) or math.isinf(number):
        raise ValueError("not a finite number")
    return number


def parse_inteiro(value: Any) -> Optional[int]:
    number = parse_decimal(value)
    if number is None:
        return None
    if number != int(number):
        raise ValueError("not an integer")
    return int(number)


def parse_data(value: Any) -> Optional[date]:
    """date, datetime or ISO text ("2024-03-01", "2024-03-01T10:00") to a date.

    Empty gives None; anything else raises ValueError.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    return datetime.fromisoformat(text).date()


def iso_date(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(microsecond=0).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if text:
        datetime.fromisoformat(text)
    return text or None


def validar_periodo(data_inicio: Any = None, data_fim: Any = None) -> tuple[Optional[date], Optional[date]]:
    """Parses a date range; bad dates or a start after the end raise ValidationError."""
    erros = FieldErrors()
    datas: dict[str, Optional[date]] = {}
    for campo, value in (("data_inicio", data_inicio), ("data_fim", data_fim)):
        try:
            datas[campo] = parse_data(value)
        except (TypeError, ValueError):
            datas[campo] = None
            erros.add(campo, "Data inválida")
    erros.raise_if_any()

    inicio, fim = datas["data_inicio"], datas["data_fim"]
    if inicio and fim and inicio > fim:
        raise ValidationError(
            "Data início não pode ser maior que data fim.",
            {"data_inicio": "Maior que a data fim"},
        )
    return inicio, fim


def periodo_params(data_inicio: Any = None, data_fim: Any = None) -> dict[str, str]:
    validar_periodo(data_inicio, data_fim)
    params: dict[str, str] = {}
    inicio = iso_date(data_inicio)
    fim = iso_date(data_fim)
    if inicio:
        params["dataInicio"] = inicio
    if fim:
        params["dataFim"] = fim
    return params


class FieldErrors:
    """Collects per-field messages; `raise_if_any` raises one ValidationError."""

    def __init__(self) -> None:
        self.campos: dict[str, str] = {}

    def add(self, campo: str, mensagem: str) -> None:
        self.campos.setdefault(campo, mensagem)

    def number(self, dto: dict, campo: str, *, obrigatorio: str, inteiro: bool = False) -> Optional[float]:
        try:
            value = parse_inteiro(dto.get(campo)) if inteiro else parse_decimal(dto.get(campo))
        except (TypeError, ValueError):
            self.add(campo, "Número inválido")
            return None
        if value is None:
            self.add(campo, obrigatorio)
        return value

    def data(self, dto: dict, campo: str, *, obrigatorio: Optional[str] = None) -> Optional[str]:
        try:
            value = iso_date(dto.get(campo))
        except (TypeError, ValueError):
            self.add(campo, "Data inválida")
            return None
        if value is None and obrigatorio:
            self.add(campo, obrigatorio)
        return value

    def raise_if_any(self) -> None:
        if self.campos:
            raise ValidationError("Corrija os campos destacados.", self.campos)
