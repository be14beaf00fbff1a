from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from postes.domain.constants import TIPOS_MOVIMENTO
from postes.domain.models import Movimento
from postes.domain.parsing import as_list, movimento_from_json
from postes.services.validation import FieldErrors, periodo_params

log = logging.getLogger(__name__)


class MovimentoService:
    def __init__(self, client):
        self.client = client

    def listar(self, data_inicio=None, data_fim=None, poste_id: int | None = None, tipo_movimento: str | None = None) -> list[Movimento]:
        params: dict[str, Any] = periodo_params(data_inicio, data_fim)
        if poste_id:
            params["posteId"] = int(poste_id)
        if tipo_movimento:
            params["tipoMovimento"] = tipo_movimento
        return [movimento_from_json(m) for m in as_list(self.client.get("/movimento-estoque", params=params))]

    def listar_por_poste(self, poste_id: int) -> list[Movimento]:
        return [movimento_from_json(m) for m in as_list(self.client.get(f"/movimento-estoque/poste/{int(poste_id)}"))]

    def consolidado(self, data_inicio=None, data_fim=None, limite: int | None = None) -> list[Movimento]:
        params: dict[str, Any] = periodo_params(data_inicio, data_fim)
        if limite:
            params["limite"] = int(limite)
        rows = as_list(self.client.get("/movimento-estoque/consolidado", params=params))
        return [movimento_from_json(m) for m in rows]

    def estatisticas(self, data_inicio=None, data_fim=None) -> Optional[dict]:
        data = self.client.get("/movimento-estoque/estatisticas", params=periodo_params(data_inicio, data_fim))
        return data if isinstance(data, dict) else None

    def registrar_manual(self, dto: Mapping[str, Any]) -> Any:
        dto = dict(dto)
        erros = FieldErrors()
        poste_id = erros.number(dto, "poste_id", obrigatorio="Selecione um poste", inteiro=True)
        quantidade = erros.number(dto, "quantidade", obrigatorio="Quantidade obrigatória", inteiro=True)
        if quantidade is not None and quantidade == 0:
            erros.add("quantidade", "Quantidade não pode ser zero")
        tipo = str(dto.get("tipo_movimento") or "").strip().upper()
        if tipo not in TIPOS_MOVIMENTO:
            erros.add("tipo_movimento", "Tipo de movimento inválido")
        erros.raise_if_any()

        payload = {
            "posteId": poste_id,
            "quantidade": quantidade,
            "tipoMovimento": tipo,
            "observacao": (str(dto.get("observacao") or "").strip() or None),
        }
        result = self.client.post("/movimento-estoque/manual", payload)
        log.info("movimento_manual poste_id=%s tipo=%s qty=%s", poste_id, tipo, quantidade)
        return result
