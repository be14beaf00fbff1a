from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from postes.domain.errors import NotFoundError
from postes.domain.models import Poste
from postes.domain.parsing import as_list, poste_from_json
from postes.services.validation import FieldErrors

log = logging.getLogger(__name__)


def poste_payload(dto: Mapping[str, Any]) -> dict:
    erros = FieldErrors()
    codigo = str(dto.get("codigo") or "").strip()
    descricao = str(dto.get("descricao") or "").strip()
    if not codigo:
        erros.add("codigo", "Código obrigatório")
    if not descricao:
        erros.add("descricao", "Descrição obrigatória")
    preco = erros.number(dict(dto), "preco", obrigatorio="Preço obrigatório")
    if preco is not None and preco < 0:
        erros.add("preco", "Preço deve ser maior ou igual a 0")
    erros.raise_if_any()

    return {
        "codigo": codigo,
        "descricao": descricao,
        "preco": float(preco),
        "ativo": dto.get("ativo") is not False,
    }


class PosteService:
    def __init__(self, client):
        self.client = client

    def listar(self) -> list[Poste]:
        return [poste_from_json(p) for p in as_list(self.client.get("/postes"))]

    def listar_ativos(self) -> list[Poste]:
        return [poste_from_json(p) for p in as_list(self.client.get("/postes/ativos"))]

    def buscar(self, poste_id: int) -> Poste:
        data = self.client.get(f"/postes/{int(poste_id)}")
        if not isinstance(data, dict) or not data:
            raise NotFoundError("Poste não encontrado.")
        return poste_from_json(data)

    def criar(self, dto: Mapping[str, Any]) -> Optional[Poste]:
        data = self.client.post("/postes", poste_payload(dto))
        log.info("poste_created codigo=%s", dto.get("codigo"))
        return poste_from_json(data) if isinstance(data, dict) and data else None

    def atualizar(self, poste_id: int, dto: Mapping[str, Any]) -> Optional[Poste]:
        data = self.client.put(f"/postes/{int(poste_id)}", poste_payload(dto))
        return poste_from_json(data) if isinstance(data, dict) and data else None

    def desativar(self, poste_id: int) -> Optional[Poste]:
        # poles referenced by sales are deactivated, not deleted
        atual = self.buscar(poste_id)
        return self.atualizar(poste_id, {
            "codigo": atual.codigo,
            "descricao": atual.descricao,
            "preco": atual.preco,
            "ativo": False,
        })

    def deletar(self, poste_id: int) -> None:
        self.client.delete(f"/postes/{int(poste_id)}")
        log.info("poste_deleted id=%s", poste_id)
