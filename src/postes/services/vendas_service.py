from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Mapping, Optional

from postes.domain.constants import METODOS_PAGAMENTO, TIPOS_VENDA
from postes.domain.errors import NotFoundError
from postes.domain.formatters import parse_datetime
from postes.domain.models import ResumoVendas, TipoVenda, Venda
from postes.domain.parsing import as_list, resumo_from_json, venda_from_json
from postes.services.validation import FieldErrors, periodo_params

log = logging.getLogger("postes.vendas")


def venda_payload(dto: Mapping[str, Any]) -> dict:
    """
    Builds the request body for a sale. Each sale type only carries its own
    primary value: V -> valorVenda, L -> freteEletrons, E -> valorExtra.
    """
    dto = dict(dto)
    erros = FieldErrors()

    tipo = str(dto.get("tipo_venda") or TipoVenda.NORMAL.value).strip().upper()
    if tipo not in TIPOS_VENDA:
        erros.add("tipo_venda", "Tipo de venda inválido")

    data_venda = erros.data(dto, "data_venda", obrigatorio="Data obrigatória")

    metodo = (str(dto.get("metodo_pagamento") or "").strip() or None)
    if metodo is not None and metodo not in METODOS_PAGAMENTO:
        erros.add("metodo_pagamento", "Método de pagamento inválido")

    payload: dict[str, Any] = {
        "dataVenda": data_venda,
        "tipoVenda": tipo,
        "observacoes": (str(dto.get("observacoes") or "").strip() or None),
        "metodoPagamento": metodo,
    }
    for campo, chave in (("vendedor", "vendedor"), ("numero_nota", "numeroNota")):
        valor = str(dto.get(campo) or "").strip()
        if valor:
            payload[chave] = valor

    if tipo in (TipoVenda.NORMAL.value, TipoVenda.LOJA.value):
        poste_id = erros.number(dto, "poste_id", obrigatorio="Selecione um poste", inteiro=True)
        quantidade = erros.number(dto, "quantidade", obrigatorio="Quantidade obrigatória", inteiro=True)
        if poste_id is not None and poste_id <= 0:
            erros.add("poste_id", "Selecione um poste")
        if quantidade is not None and quantidade < 1:
            erros.add("quantidade", "Mínimo 1")
        payload["posteId"] = poste_id
        payload["quantidade"] = quantidade

    if tipo == TipoVenda.NORMAL.value:
        valor = erros.number(dto, "valor_venda", obrigatorio="Valor obrigatório")
        if valor is not None and valor <= 0:
            erros.add("valor_venda", "Deve ser maior que 0")
        payload["valorVenda"] = valor
    elif tipo == TipoVenda.LOJA.value:
        frete = erros.number(dto, "frete_eletrons", obrigatorio="Frete obrigatório")
        if frete is not None and frete < 0:
            erros.add("frete_eletrons", "Deve ser maior ou igual a 0")
        payload["freteEletrons"] = frete
    elif tipo == TipoVenda.EXTRA.value:
        extra = erros.number(dto, "valor_extra", obrigatorio="Valor obrigatório")
        if extra is not None and extra <= 0:
            erros.add("valor_extra", "Deve ser maior que 0")
        payload["valorExtra"] = extra

    erros.raise_if_any()
    return payload


def _sort_key(venda: Venda) -> datetime:
    parsed = parse_datetime(venda.data_venda)
    if parsed is None:
        return datetime.min
    return parsed.replace(tzinfo=None)


class VendaService:
    def __init__(self, client):
        self.client = client

    def listar(self, data_inicio=None, data_fim=None) -> list[Venda]:
        """Sales in the period, newest first."""
        rows = as_list(self.client.get("/vendas", params=periodo_params(data_inicio, data_fim)))
        vendas = [venda_from_json(v) for v in rows]
        vendas.sort(key=_sort_key, reverse=True)
        return vendas

    def buscar(self, venda_id: int) -> Venda:
        data = self.client.get(f"/vendas/{int(venda_id)}")
        if not isinstance(data, dict) or not data:
            raise NotFoundError("Venda não encontrada.")
        return venda_from_json(data)

    def resumo(self, data_inicio=None, data_fim=None) -> ResumoVendas:
        data = self.client.get("/vendas/resumo", params=periodo_params(data_inicio, data_fim))
        return resumo_from_json(data if isinstance(data, dict) else None)

    def criar(self, dto: Mapping[str, Any]) -> Optional[Venda]:
        payload = venda_payload(dto)
        data = self.client.post("/vendas", payload)
        log.info("venda_created tipo=%s data=%s", payload["tipoVenda"], payload["dataVenda"])
        return venda_from_json(data) if isinstance(data, dict) and data else None

    def atualizar(self, venda_id: int, dto: Mapping[str, Any]) -> Optional[Venda]:
        payload = venda_payload(dto)
        data = self.client.put(f"/vendas/{int(venda_id)}", payload)
        log.info("venda_updated id=%s tipo=%s", venda_id, payload["tipoVenda"])
        return venda_from_json(data) if isinstance(data, dict) and data else None

    def deletar(self, venda_id: int) -> None:
        self.client.delete(f"/vendas/{int(venda_id)}")
        log.info("venda_deleted id=%s", venda_id)
