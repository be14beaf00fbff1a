from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Union

from .errors import ValidationError
from .models import Despesa, DistribuicaoLucro, ResumoVendas, Tenant, TipoDespesa
from .parsing import resumo_from_json, to_money

ResumoLike = Union[ResumoVendas, Mapping[str, Any], None]
DespesaLike = Union[Despesa, Mapping[str, Any]]


def _resumo(resumo: ResumoLike) -> ResumoVendas:
    if isinstance(resumo, ResumoVendas):
        return resumo
    return resumo_from_json(resumo)


def _tipo_valor(despesa: DespesaLike) -> tuple[str, float]:
    if isinstance(despesa, Despesa):
        return despesa.tipo, to_money(despesa.valor)
    return str(despesa.get("tipo") or ""), to_money(despesa.get("valor"))


def somar_despesas(despesas: Optional[Iterable[DespesaLike]]) -> tuple[float, float]:
    """Returns (funcionario, outras). Unknown expense types are ignored."""
    funcionario = 0.0
    outras = 0.0
    for despesa in despesas or ():
        tipo, valor = _tipo_valor(despesa)
        if tipo == TipoDespesa.FUNCIONARIO.value:
            funcionario += valor
        elif tipo == TipoDespesa.OUTRAS.value:
            outras += valor
    return funcionario, outras


def calcular_distribuicao(
    tenant: Tenant | str,
    resumo: ResumoLike,
    despesas: Optional[Iterable[DespesaLike]],
) -> DistribuicaoLucro:
    """
    Splits the period profit among the partners of a truck.

    vermelho: Cícero takes half of the profit; Gilberto and Jefferson share the
    other half after employee expenses come out of it.
    branco: Gilberto and Jefferson take half each; employee expenses come out
    of Jefferson's half only.

    Losses are split the same way, nothing is clamped at zero.
    """
    try:
        tenant = Tenant(tenant)
    except ValueError:
        raise ValidationError(f"Tenant desconhecido: {tenant}") from None

    r = _resumo(resumo)
    despesas_funcionario, outras_despesas = somar_despesas(despesas)

    contribuicoes_extras = r.valor_total_extras + r.total_frete_eletrons
    lucro_vendas_normais = r.valor_total_vendas - r.total_venda_postes

    if tenant is Tenant.VERMELHO:
        lucro_total = lucro_vendas_normais + contribuicoes_extras - outras_despesas
        parte_cicero: Optional[float] = lucro_total / 2
        parte_outros_liquida = lucro_total / 2 - despesas_funcionario
        parte_gilberto = parte_outros_liquida / 2
        parte_jefferson = parte_outros_liquida / 2
        socios = (
            ("Cícero", parte_cicero),
            ("Gilberto", parte_gilberto),
            ("Jefferson", parte_jefferson),
        )
    elif tenant is Tenant.BRANCO:
        lucro_total = (
            r.valor_total_vendas
            + r.valor_total_extras
            + r.total_frete_eletrons
            - outras_despesas
            - r.total_venda_postes
        )
        parte_cicero = None
        parte_gilberto = lucro_total / 2
        parte_jefferson = lucro_total / 2 - despesas_funcionario
        socios = (
            ("Gilberto", parte_gilberto),
            ("Jefferson", parte_jefferson),
        )
    else:
        raise ValidationError("O painel do gerente não tem regra de divisão de lucro.")

    return DistribuicaoLucro(
        tenant=tenant,
        total_venda_postes=r.total_venda_postes,
        valor_total_vendas=r.valor_total_vendas,
        valor_total_extras=r.valor_total_extras,
        total_frete_eletrons=r.total_frete_eletrons,
        total_contribuicoes_extras=contribuicoes_extras,
        despesas_funcionario=despesas_funcionario,
        outras_despesas=outras_despesas,
        lucro_vendas_normais=lucro_vendas_normais,
        lucro_total=lucro_total,
        parte_cicero=parte_cicero,
        parte_gilberto=parte_gilberto,
        parte_jefferson=parte_jefferson,
        total_vendas_e=r.total_vendas_e,
        total_vendas_v=r.total_vendas_v,
        total_vendas_l=r.total_vendas_l,
        socios=socios,
    )
