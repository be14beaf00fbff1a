from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from postes.domain.constants import TIPOS_DESPESA
from postes.domain.errors import NotFoundError
from postes.domain.models import Despesa
from postes.domain.parsing import as_list, despesa_from_json
from postes.services.validation import FieldErrors, periodo_params

log = logging.getLogger(__name__)


def despesa_payload(dto: Mapping[str, Any]) -> dict:
    dto = dict(dto)
    erros = FieldErrors()

    descricao = str(dto.get("descricao") or "").strip()
    if not descricao:
        erros.add("descricao", "Descrição obrigatória")

    valor = erros.number(dto, "valor", obrigatorio="Valor obrigatório")
    if valor is not None and valor <= 0:
        erros.add("valor", "Deve ser maior que 0")

    tipo = str(dto.get("tipo") or "").strip().upper()
    if tipo not in TIPOS_DESPESA:
        erros.add("tipo", "Tipo obrigatório")

    data_despesa = erros.data(dto, "data_despesa", obrigatorio="Data obrigatória")

    erros.raise_if_any()
    return {"dataDespesa": data_despesa, "descricao": descricao, "valor": float(valor), "tipo": tipo}


class DespesaService:
    def __init__(self, client):
        self.client = client

    def listar(self, data_inicio=None, data_fim=None) -> list[Despesa]:
        rows = as_list(self.client.get("/despesas", params=periodo_params(data_inicio, data_fim)))
        return [despesa_from_json(d) for d in rows]

    def buscar(self, despesa_id: int) -> Despesa:
        data = self.client.get(f"/despesas/{int(despesa_id)}")
        if not isinstance(data, dict) or not data:
            raise NotFoundError("Despesa não encontrada.")
        return despesa_from_json(data)

    def criar(self, dto: Mapping[str, Any]) -> Optional[Despesa]:
        payload = despesa_payload(dto)
        data = self.client.post("/despesas", payload)
        log.info("despesa_created tipo=%s valor=%.2f", payload["tipo"], payload["valor"])
        return despesa_from_json(data) if isinstance(data, dict) and data else None

    def atualizar(self, despesa_id: int, dto: Mapping[str, Any]) -> Optional[Despesa]:
        data = self.client.put(f"/despesas/{int(despesa_id)}", despesa_payload(dto))
        return despesa_from_json(data) if isinstance(data, dict) and data else None

    def deletar(self, despesa_id: int) -> None:
        self.client.delete(f"/despesas/{int(despesa_id)}")
        log.info("despesa_deleted id=%s", despesa_id)
