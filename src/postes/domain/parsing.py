from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from .models import Despesa, EstoqueItem, Movimento, Poste, ResumoVendas, Venda


def to_money(value: Any) -> float:
    """Lenient float conversion; None, NaN and garbage all count as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_int(value: Any) -> int:
    return int(to_money(value))


def _opt_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return to_int(value)


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def poste_from_json(data: Mapping[str, Any]) -> Poste:
    return Poste(
        id=to_int(data.get("id")),
        codigo=str(data.get("codigo") or ""),
        descricao=str(data.get("descricao") or ""),
        preco=to_money(data.get("preco")),
        # the backend omits "ativo" on older rows; those are active
        ativo=data.get("ativo") is not False,
    )


def venda_from_json(data: Mapping[str, Any]) -> Venda:
    return Venda(
        id=to_int(data.get("id")),
        tipo_venda=str(data.get("tipoVenda") or ""),
        data_venda=_opt_str(data.get("dataVenda")),
        poste_id=_opt_int(data.get("posteId")),
        quantidade=_opt_int(data.get("quantidade")),
        valor_venda=to_money(data.get("valorVenda")),
        valor_extra=to_money(data.get("valorExtra")),
        frete_eletrons=to_money(data.get("freteEletrons")),
        metodo_pagamento=_opt_str(data.get("metodoPagamento")),
        vendedor=_opt_str(data.get("vendedor")),
        numero_nota=_opt_str(data.get("numeroNota")),
        observacoes=_opt_str(data.get("observacoes")),
        codigo_poste=_opt_str(data.get("codigoPoste")),
        descricao_poste=_opt_str(data.get("descricaoPoste")),
    )


def despesa_from_json(data: Mapping[str, Any]) -> Despesa:
    return Despesa(
        id=to_int(data.get("id")),
        data_despesa=_opt_str(data.get("dataDespesa")),
        descricao=str(data.get("descricao") or ""),
        valor=to_money(data.get("valor")),
        tipo=str(data.get("tipo") or ""),
    )


def estoque_from_json(data: Mapping[str, Any]) -> EstoqueItem:
    return EstoqueItem(
        poste_id=to_int(data.get("posteId")),
        codigo_poste=str(data.get("codigoPoste") or ""),
        descricao_poste=str(data.get("descricaoPoste") or ""),
        preco_poste=to_money(data.get("precoPoste")),
        quantidade_atual=to_int(data.get("quantidadeAtual")),
        data_atualizacao=_opt_str(data.get("dataAtualizacao")),
    )


def movimento_from_json(data: Mapping[str, Any]) -> Movimento:
    return Movimento(
        id=to_int(data.get("id")),
        poste_id=_opt_int(data.get("posteId")),
        codigo_poste=_opt_str(data.get("codigoPoste")),
        tipo_movimento=str(data.get("tipoMovimento") or ""),
        quantidade=to_int(data.get("quantidade")),
        data_movimento=_opt_str(data.get("dataMovimento")),
        observacao=_opt_str(data.get("observacao")),
    )


def resumo_from_json(data: Optional[Mapping[str, Any]]) -> ResumoVendas:
    data = data or {}
    return ResumoVendas(
        total_venda_postes=to_money(data.get("totalVendaPostes")),
        valor_total_vendas=to_money(data.get("valorTotalVendas")),
        total_frete_eletrons=to_money(data.get("totalFreteEletrons")),
        valor_total_extras=to_money(data.get("valorTotalExtras")),
        total_vendas_e=to_int(data.get("totalVendasE")),
        total_vendas_v=to_int(data.get("totalVendasV")),
        total_vendas_l=to_int(data.get("totalVendasL")),
    )


def as_list(payload: Any) -> list:
    """Backend list endpoints sometimes answer with an empty object."""
    return list(payload) if isinstance(payload, list) else []
