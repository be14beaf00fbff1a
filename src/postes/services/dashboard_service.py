from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
import logging
from typing import Callable, Optional

from postes.domain.constants import ESTOQUE_BAIXO_LIMITE
from postes.domain.errors import ApiError
from postes.domain.formatters import first_of_month
from postes.domain.models import DistribuicaoLucro, EstoqueItem, Tenant
from postes.domain.profit import calcular_distribuicao
from postes.services.validation import validar_periodo

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PainelLucro:
    data_inicio: date
    data_fim: date
    distribuicao: DistribuicaoLucro
    postes_ativos: int
    ticket_medio: float
    margem_lucro: float
    total_despesas: float


@dataclass(frozen=True)
class PainelEstoque:
    total_itens: int
    positivo: int
    baixo: int
    zero: int
    negativo: int
    valor_total: float
    alertas_negativos: list[EstoqueItem] = field(default_factory=list)
    alertas_baixos: list[EstoqueItem] = field(default_factory=list)
    estatisticas: Optional[dict] = None


def periodo_padrao(today: date | None = None) -> tuple[date, date]:
    today = today or date.today()
    return first_of_month(today), today


def resumir_estoque(itens: list[EstoqueItem], estatisticas: Optional[dict] = None) -> PainelEstoque:
    negativos = [e for e in itens if e.quantidade_atual < 0]
    baixos = [e for e in itens if 0 < e.quantidade_atual <= ESTOQUE_BAIXO_LIMITE]
    return PainelEstoque(
        total_itens=len(itens),
        positivo=sum(1 for e in itens if e.quantidade_atual > ESTOQUE_BAIXO_LIMITE),
        baixo=len(baixos),
        zero=sum(1 for e in itens if e.quantidade_atual == 0),
        negativo=len(negativos),
        valor_total=sum(e.preco_poste * e.quantidade_atual for e in itens),
        alertas_negativos=negativos,
        alertas_baixos=baixos,
        estatisticas=estatisticas,
    )


class DashboardService:
    def __init__(self, vendas, despesas, postes, estoque=None, movimentos=None, today: Callable[[], date] = date.today):
        self.vendas = vendas
        self.despesas = despesas
        self.postes = postes
        self.estoque = estoque
        self.movimentos = movimentos
        self._today = today

    def carregar(self, tenant: Tenant | str, data_inicio: date | str | None = None, data_fim: date | str | None = None) -> PainelLucro:
        """Fetches summary, expenses and poles in parallel, then runs the profit split."""
        padrao_inicio, padrao_fim = periodo_padrao(self._today())
        inicio, fim = validar_periodo(data_inicio or padrao_inicio, data_fim or padrao_fim)

        with ThreadPoolExecutor(max_workers=3) as pool:
            f_resumo = pool.submit(self.vendas.resumo, inicio, fim)
            f_despesas = pool.submit(self.despesas.listar, inicio, fim)
            f_postes = pool.submit(self.postes.listar)
            resumo = f_resumo.result()
            despesas = f_despesas.result()
            postes = f_postes.result()

        dist = calcular_distribuicao(tenant, resumo, despesas)
        ticket = dist.valor_total_vendas / dist.total_vendas_v if dist.total_vendas_v > 0 else 0.0
        margem = dist.lucro_total / dist.valor_total_vendas * 100 if dist.valor_total_vendas > 0 else 0.0

        log.info("dashboard_loaded tenant=%s start=%s end=%s lucro=%.2f", dist.tenant.value, inicio, fim, dist.lucro_total)
        return PainelLucro(
            data_inicio=inicio,
            data_fim=fim,
            distribuicao=dist,
            postes_ativos=sum(1 for p in postes if p.ativo),
            ticket_medio=ticket,
            margem_lucro=margem,
            total_despesas=dist.despesas_funcionario + dist.outras_despesas,
        )

    def painel_estoque(self, tenant=None) -> PainelEstoque:
        if self.estoque is None:
            raise RuntimeError("Estoque service not configured.")
        itens = self.estoque.listar(tenant=tenant)

        estatisticas = None
        if self.movimentos is not None:
            try:
                estatisticas = self.movimentos.estatisticas()
            except ApiError as e:
                # movement stats are optional on the manager panel
                log.warning("movimento_stats_unavailable error=%s", e)
        return resumir_estoque(itens, estatisticas)
