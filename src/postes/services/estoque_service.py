from __future__ import annotations

from datetime import date
import logging
from typing import Any, Mapping, Optional

from postes.domain.models import EstoqueItem
from postes.domain.parsing import as_list, estoque_from_json
from postes.services.validation import FieldErrors

log = logging.getLogger(__name__)


def movimento_estoque_payload(dto: Mapping[str, Any]) -> dict:
    dto = dict(dto)
    erros = FieldErrors()
    poste_id = erros.number(dto, "poste_id", obrigatorio="Selecione um poste", inteiro=True)
    if poste_id is not None and poste_id <= 0:
        erros.add("poste_id", "Selecione um poste")
    quantidade = erros.number(dto, "quantidade", obrigatorio="Quantidade obrigatória", inteiro=True)
    if quantidade is not None and quantidade < 1:
        erros.add("quantidade", "Mínimo 1")
    data_estoque = erros.data(dto, "data_estoque")
    erros.raise_if_any()

    return {
        "posteId": poste_id,
        "quantidade": quantidade,
        "dataEstoque": data_estoque or date.today().isoformat(),
        "observacao": (str(dto.get("observacao") or "").strip() or None),
    }


class EstoqueService:
    def __init__(self, client):
        self.client = client

    def listar(self, tenant=None) -> list[EstoqueItem]:
        return [estoque_from_json(e) for e in as_list(self.client.get("/estoque", tenant=tenant))]

    def listar_com_quantidade(self, tenant=None) -> list[EstoqueItem]:
        rows = as_list(self.client.get("/estoque/com-quantidade", tenant=tenant))
        return [estoque_from_json(e) for e in rows]

    def consolidado(self) -> Optional[dict]:
        data = self.client.get("/estoque/consolidado")
        return data if isinstance(data, dict) else None

    def adicionar(self, dto: Mapping[str, Any]) -> Any:
        payload = movimento_estoque_payload(dto)
        result = self.client.post("/estoque/adicionar", payload)
        log.info("estoque_added poste_id=%s qty=%s", payload["posteId"], payload["quantidade"])
        return result

    def remover(self, dto: Mapping[str, Any]) -> Any:
        # overselling is allowed, the backend lets the quantity go negative
        payload = movimento_estoque_payload(dto)
        result = self.client.post("/estoque/remover", payload)
        log.info("estoque_removed poste_id=%s qty=%s", payload["posteId"], payload["quantidade"])
        return result
