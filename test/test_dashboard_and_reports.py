from datetime import date

import pytest

from conftest import RecordingClient

from postes.domain.errors import ApiConnectionError, ValidationError
from postes.domain.models import Despesa, EstoqueItem, Venda
from postes.services.dashboard_service import DashboardService, periodo_padrao, resumir_estoque
from postes.services.despesas_service import DespesaService
from postes.services.estoque_service import EstoqueService
from postes.services.movimentos_service import MovimentoService
from postes.services.postes_service import PosteService
from postes.services.reporting_service import ReportingService, filtrar_tabela, ordenar_tabela, resumir
from postes.services.vendas_service import VendaService


def _venda(id, tipo, valor=0.0, extra=0.0, frete=0.0, metodo=None, codigo=None, qtd=None, obs=None):
    return Venda(
        id=id, tipo_venda=tipo, data_venda="2024-03-01T10:00:00", quantidade=qtd,
        valor_venda=valor, valor_extra=extra, frete_eletrons=frete,
        metodo_pagamento=metodo, codigo_poste=codigo, descricao_poste=f"Poste {codigo}" if codigo else None,
        observacoes=obs,
    )


def _dashboard(routes):
    client = RecordingClient(routes)
    return DashboardService(
        VendaService(client),
        DespesaService(client),
        PosteService(client),
        estoque=EstoqueService(client),
        movimentos=MovimentoService(client),
        today=lambda: date(2024, 3, 15),
    ), client


def test_default_period_is_month_to_date():
    assert periodo_padrao(date(2024, 3, 15)) == (date(2024, 3, 1), date(2024, 3, 15))


def test_dashboard_runs_calculator_and_stats():
    service, client = _dashboard({
        ("GET", "/vendas/resumo"): {
            "totalVendaPostes": 1000, "valorTotalVendas": 1500, "totalFreteEletrons": 100,
            "valorTotalExtras": 50, "totalVendasV": 3,
        },
        ("GET", "/despesas"): [{"tipo": "OUTRAS", "valor": 200}, {"tipo": "FUNCIONARIO", "valor": 100}],
        ("GET", "/postes"): [{"id": 1, "ativo": True}, {"id": 2, "ativo": False}, {"id": 3}],
    })

    painel = service.carregar("vermelho")

    assert painel.data_inicio == date(2024, 3, 1)
    assert painel.distribuicao.lucro_total == 450
    assert painel.distribuicao.parte_gilberto == 62.5
    assert painel.postes_ativos == 2
    assert painel.ticket_medio == 500
    assert painel.margem_lucro == pytest.approx(30.0)
    assert painel.total_despesas == 300

    resumo_call = next(c for c in client.calls if c[1] == "/vendas/resumo")
    assert resumo_call[2]["params"] == {"dataInicio": "2024-03-01", "dataFim": "2024-03-15"}


def test_dashboard_without_sales_has_zero_ratios():
    service, _client = _dashboard({("GET", "/vendas/resumo"): {}, ("GET", "/despesas"): [], ("GET", "/postes"): []})
    painel = service.carregar("branco", date(2024, 1, 1), date(2024, 1, 31))
    assert painel.ticket_medio == 0
    assert painel.margem_lucro == 0
    assert painel.distribuicao.lucro_total == 0


def test_dashboard_fetch_failure_propagates():
    service, _client = _dashboard({("GET", "/vendas/resumo"): ApiConnectionError("down")})
    with pytest.raises(ApiConnectionError):
        service.carregar("vermelho")


def test_stock_panel_counts_and_alerts():
    itens = [
        EstoqueItem(1, "P1", "a", 100.0, 10),
        EstoqueItem(2, "P2", "b", 50.0, 3),
        EstoqueItem(3, "P3", "c", 20.0, 0),
        EstoqueItem(4, "P4", "d", 10.0, -2),
    ]
    painel = resumir_estoque(itens)

    assert (painel.positivo, painel.baixo, painel.zero, painel.negativo) == (1, 1, 1, 1)
    assert painel.valor_total == 1000 + 150 + 0 - 20
    assert [e.codigo_poste for e in painel.alertas_negativos] == ["P4"]
    assert [e.codigo_poste for e in painel.alertas_baixos] == ["P2"]


def test_stock_panel_tolerates_missing_movement_stats():
    service, _client = _dashboard({
        ("GET", "/estoque"): [{"posteId": 1, "codigoPoste": "P1", "quantidadeAtual": 4, "precoPoste": 10}],
        ("GET", "/movimento-estoque/estatisticas"): ApiConnectionError("down"),
    })
    painel = service.painel_estoque()
    assert painel.total_itens == 1
    assert painel.estatisticas is None


def test_report_requires_both_dates():
    client = RecordingClient()
    reporting = ReportingService(VendaService(client), DespesaService(client))
    with pytest.raises(ValidationError):
        reporting.gerar("2024-01-01", "")
    assert client.calls == []


def test_report_fetches_sales_and_expenses():
    client = RecordingClient({
        ("GET", "/vendas"): [{"id": 1, "tipoVenda": "V", "valorVenda": 100}],
        ("GET", "/despesas"): [{"id": 9, "valor": 40, "tipo": "OUTRAS"}],
    })
    vendas, despesas = ReportingService(VendaService(client), DespesaService(client)).gerar("2024-01-01", "2024-01-31")
    assert [v.id for v in vendas] == [1]
    assert [d.id for d in despesas] == [9]


def test_report_summary_totals_and_breakdowns():
    vendas = [
        _venda(1, "V", valor=1000, metodo="PIX_JEFF", codigo="P9", qtd=2),
        _venda(2, "V", valor=500, metodo="DINHEIRO", codigo="P7", qtd=1),
        _venda(3, "E", extra=80, metodo="PIX_JEFF"),
        _venda(4, "L", frete=30, codigo="P9", qtd=1),
    ]
    despesas = [Despesa(1, "2024-03-01", "Diesel", 200.0, "OUTRAS"), Despesa(2, "2024-03-01", "Ajudante", 100.0, "FUNCIONARIO")]

    r = resumir(vendas, despesas)

    assert (r.total_v, r.total_e, r.total_l) == (1500, 80, 30)
    assert r.total_receita == 1610
    assert r.total_despesas == 300
    assert r.lucro_liquido == 1310
    assert r.por_metodo == [("Pix do Jeff", 1080), ("Dinheiro", 500), ("Não informado", 30)]
    assert [(p.codigo, p.quantidade, p.total) for p in r.por_poste] == [("P9", 3, 1000), ("P7", 1, 500)]


def test_report_filters():
    vendas = [
        _venda(1, "V", valor=10, metodo="PIX_JEFF", codigo="P9"),
        _venda(2, "E", extra=5, metodo="DINHEIRO", obs="frete da obra"),
        _venda(3, "V", valor=7, metodo="DINHEIRO", codigo="P10"),
    ]
    assert [v.id for v in resumir(vendas, [], tipo="V").vendas] == [1, 3]
    assert [v.id for v in resumir(vendas, [], metodo="DINHEIRO").vendas] == [2, 3]
    assert [v.id for v in resumir(vendas, [], busca="OBRA").vendas] == [2]
    assert [v.id for v in resumir(vendas, [], busca="p1").vendas] == [3]


def test_table_search_and_natural_sort():
    rows = [
        {"Poste": "P10", "Qtd": 2, "Obs": "Entrega"},
        {"Poste": "P9", "Qtd": 10, "Obs": None},
        {"Poste": "P100", "Qtd": 1, "Obs": "retirada"},
    ]
    assert [r["Poste"] for r in filtrar_tabela(rows, "ENTREGA")] == ["P10"]
    assert filtrar_tabela(rows, "  ") == rows
    assert [r["Poste"] for r in ordenar_tabela(rows, "Poste")] == ["P9", "P10", "P100"]
    assert [r["Qtd"] for r in ordenar_tabela(rows, "Qtd", ascendente=False)] == [10, 2, 1]
    assert [r["Obs"] for r in ordenar_tabela(rows, "Obs")] == [None, "Entrega", "retirada"]


def test_report_rejects_bad_or_reversed_dates_before_fetching():
    client = RecordingClient()
    reporting = ReportingService(VendaService(client), DespesaService(client))

    with pytest.raises(ValidationError) as info:
        reporting.gerar("2024-03-31", "2024-03-01")
    assert "data_inicio" in info.value.campos

    with pytest.raises(ValidationError) as info:
        reporting.gerar("abc", "xyz")
    assert set(info.value.campos) == {"data_inicio", "data_fim"}
    assert client.calls == []


def test_dashboard_rejects_reversed_period_before_fetching():
    service, client = _dashboard({})
    with pytest.raises(ValidationError):
        service.carregar("vermelho", "2024-03-10", "2024-03-01")
    with pytest.raises(ValidationError):
        service.carregar("vermelho", "10/03/2024")
    assert client.calls == []


def test_dashboard_accepts_typed_dates():
    service, client = _dashboard({("GET", "/vendas/resumo"): {}, ("GET", "/despesas"): [], ("GET", "/postes"): []})
    painel = service.carregar("branco", "2024-02-01", "2024-02-29")
    assert (painel.data_inicio, painel.data_fim) == (date(2024, 2, 1), date(2024, 2, 29))
    resumo_call = next(c for c in client.calls if c[1] == "/vendas/resumo")
    assert resumo_call[2]["params"] == {"dataInicio": "2024-02-01", "dataFim": "2024-02-29"}


def test_date_column_sorts_chronologically_across_years():
    rows = [
        {"Data": "02/01/2025 10:00"},
        {"Data": "15/12/2024 10:00"},
        {"Data": "15/12/2024 08:30"},
    ]
    assert [r["Data"] for r in ordenar_tabela(rows, "Data")] == [
        "15/12/2024 08:30", "15/12/2024 10:00", "02/01/2025 10:00",
    ]
    assert ordenar_tabela(rows, "Data", ascendente=False)[0]["Data"] == "02/01/2025 10:00"
