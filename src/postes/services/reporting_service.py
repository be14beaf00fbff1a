from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
import re
from typing import Any, Iterable, Mapping, Optional

from postes.domain.errors import ValidationError
from postes.domain.formatters import metodo_pagamento_label
from postes.domain.models import Despesa, TipoVenda, Venda
from postes.services.validation import validar_periodo

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class VendasPorPoste:
    codigo: str
    descricao: str
    quantidade: int
    total: float


@dataclass(frozen=True)
class ResumoRelatorio:
    vendas: list[Venda]
    total_v: float
    total_e: float
    total_l: float
    total_receita: float
    total_despesas: float
    lucro_liquido: float
    por_metodo: list[tuple[str, float]] = field(default_factory=list)
    por_poste: list[VendasPorPoste] = field(default_factory=list)


def valor_principal(venda: Venda) -> float:
    """The value that counts as revenue for each sale type."""
    if venda.tipo_venda == TipoVenda.NORMAL.value:
        return venda.valor_venda
    if venda.tipo_venda == TipoVenda.EXTRA.value:
        return venda.valor_extra
    if venda.tipo_venda == TipoVenda.LOJA.value:
        return venda.frete_eletrons
    return 0.0


def filtrar_vendas(
    vendas: Iterable[Venda],
    tipo: Optional[str] = None,
    metodo: Optional[str] = None,
    busca: str = "",
) -> list[Venda]:
    lista = list(vendas)
    if tipo:
        lista = [v for v in lista if v.tipo_venda == tipo]
    if metodo:
        lista = [v for v in lista if (v.metodo_pagamento or "") == metodo]
    q = (busca or "").strip().lower()
    if q:
        lista = [
            v for v in lista
            if q in (v.codigo_poste or "").lower() or q in (v.observacoes or "").lower()
        ]
    return lista


def filtrar_tabela(rows: Iterable[Mapping[str, Any]], busca: str) -> list[Mapping[str, Any]]:
    """Keeps rows where any value contains `busca` (case-insensitive)."""
    rows = list(rows)
    q = (busca or "").strip().lower()
    if not q:
        return rows
    return [r for r in rows if any(q in ("" if v is None else str(v)).lower() for v in r.values())]


_DATA_BR = re.compile(r"(\d{2})/(\d{2})/(\d{4})(?: (\d{2}):(\d{2}))?")


def _natural_key(value: Any) -> tuple:
    text = "" if value is None else str(value)
    m = _DATA_BR.fullmatch(text.strip())
    if m:
        # dd/mm/yyyy [HH:MM] sorts chronologically
        dia, mes, ano, hora, minuto = m.groups()
        return ((0, float(f"{ano}{mes}{dia}{hora or '00'}{minuto or '00'}"), ""),)
    parts = re.split(r"(\d+(?:\.\d+)?)", text.lower())
    key = []
    for part in parts:
        if not part:
            continue
        if part[0].isdigit():
            key.append((0, float(part), ""))
        else:
            key.append((1, 0.0, part))
    return tuple(key)


def ordenar_tabela(rows: Iterable[Mapping[str, Any]], chave: str, ascendente: bool = True) -> list[Mapping[str, Any]]:
    """Numeric-aware ordering; "poste 9" sorts before "poste 10", dd/mm/yyyy dates by day."""
    return sorted(rows, key=lambda r: _natural_key(r.get(chave)), reverse=not ascendente)


def resumir(
    vendas: Iterable[Venda],
    despesas: Iterable[Despesa],
    tipo: Optional[str] = None,
    metodo: Optional[str] = None,
    busca: str = "",
) -> ResumoRelatorio:
    filtradas = filtrar_vendas(vendas, tipo, metodo, busca)

    total_v = sum(v.valor_venda for v in filtradas if v.tipo_venda == TipoVenda.NORMAL.value)
    total_e = sum(v.valor_extra for v in filtradas if v.tipo_venda == TipoVenda.EXTRA.value)
    total_l = sum(v.frete_eletrons for v in filtradas if v.tipo_venda == TipoVenda.LOJA.value)
    total_receita = total_v + total_e + total_l
    total_despesas = sum(d.valor for d in despesas)

    por_metodo: dict[Optional[str], float] = {}
    for v in filtradas:
        key = v.metodo_pagamento or None
        por_metodo[key] = por_metodo.get(key, 0.0) + v.valor_venda + v.valor_extra + v.frete_eletrons

    por_poste: dict[str, VendasPorPoste] = {}
    for v in filtradas:
        if not v.codigo_poste:
            continue
        atual = por_poste.get(v.codigo_poste) or VendasPorPoste(v.codigo_poste, v.descricao_poste or "-", 0, 0.0)
        por_poste[v.codigo_poste] = VendasPorPoste(
            codigo=atual.codigo,
            descricao=atual.descricao,
            quantidade=atual.quantidade + (v.quantidade or 0),
            total=atual.total + v.valor_venda,
        )

    return ResumoRelatorio(
        vendas=filtradas,
        total_v=total_v,
        total_e=total_e,
        total_l=total_l,
        total_receita=total_receita,
        total_despesas=total_despesas,
        lucro_liquido=total_receita - total_despesas,
        por_metodo=sorted(
            ((metodo_pagamento_label(k), val) for k, val in por_metodo.items()),
            key=lambda item: item[1],
            reverse=True,
        ),
        por_poste=sorted(por_poste.values(), key=lambda p: p.total, reverse=True),
    )


class ReportingService:
    def __init__(self, vendas, despesas):
        self.vendas = vendas
        self.despesas = despesas

    def gerar(self, data_inicio, data_fim) -> tuple[list[Venda], list[Despesa]]:
        if not data_inicio or not data_fim:
            raise ValidationError(
                "Informe a data início e a data fim para gerar o relatório.",
                {"data_inicio": "Obrigatória", "data_fim": "Obrigatória"},
            )
        validar_periodo(data_inicio, data_fim)
        with ThreadPoolExecutor(max_workers=2) as pool:
            f_vendas = pool.submit(self.vendas.listar, data_inicio, data_fim)
            f_despesas = pool.submit(self.despesas.listar, data_inicio, data_fim)
            vendas = f_vendas.result()
            despesas = f_despesas.result()
        log.info("report_loaded start=%s end=%s vendas=%s despesas=%s", data_inicio, data_fim, len(vendas), len(despesas))
        return vendas, despesas

    def resumir(self, vendas, despesas, tipo=None, metodo=None, busca: str = "") -> ResumoRelatorio:
        return resumir(vendas, despesas, tipo, metodo, busca)
