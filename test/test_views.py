from postes.domain.errors import ApiConnectionError, ValidationError
from postes.ui.views.dashboard_view import DashboardView
from postes.ui.views.reports_view import ReportsView
from postes.ui.views.vendas_view import VendasView
import postes.ui.views.vendas_view as vendas_view_module


class FakeEntry:
    def __init__(self, value=""):
        self.value = value

    def get(self):
        return self.value


class FakeTree:
    def __init__(self, selected=()):
        self.selected = tuple(selected)

    def selection(self):
        return self.selected


class RecordingApp:
    def __init__(self):
        self.errors = []
        self.toasts = []

    def handle_error(self, title, err, toast_text):
        self.errors.append((title, err, toast_text))

    def toast(self, msg, kind="info", ms=2500):
        self.toasts.append((msg, kind))


def test_reports_export_without_report_is_rejected():
    app = RecordingApp()
    view = ReportsView.__new__(ReportsView)
    view.app = app
    view.linhas = []
    view.resumo = None

    view.export_csv()
    view.export_excel()

    assert [e[0] for e in app.errors] == ["Exportar CSV", "Exportar Excel"]
    assert all(isinstance(e[1], ValidationError) for e in app.errors)


def test_failed_dashboard_refresh_keeps_previous_data():
    class Dashboard:
        def carregar(self, *_args):
            raise ApiConnectionError("Sem conexão com o servidor.")

    app = RecordingApp()
    app.dashboard = Dashboard()
    app.tenant = "vermelho"
    view = DashboardView.__new__(DashboardView)
    view.app = app
    view.inicio_e = FakeEntry("2024-03-01")
    view.fim_e = FakeEntry("")
    previous = object()
    view.painel = previous

    view.refresh()

    assert view.painel is previous
    assert app.errors and app.errors[0][0] == "Dashboard"


def test_sale_delete_asks_before_sending(monkeypatch):
    deleted = []

    class Vendas:
        def deletar(self, venda_id):
            deleted.append(venda_id)

    app = RecordingApp()
    app.vendas = Vendas()
    view = VendasView.__new__(VendasView)
    view.app = app
    view.frame = None
    view.tree = FakeTree(["7"])

    monkeypatch.setattr(vendas_view_module.messagebox, "askyesno", lambda *a, **k: False)
    view.on_delete()
    assert deleted == []

    view.refresh = lambda: None
    monkeypatch.setattr(vendas_view_module.messagebox, "askyesno", lambda *a, **k: True)
    view.on_delete()
    assert deleted == [7]


def test_sale_form_maps_value_to_sale_type():
    view = VendasView.__new__(VendasView)
    view.tipo_map = {"V - Venda Normal": "V", "E - Extra": "E", "L - Venda Loja": "L"}
    view.metodo_map = {"": None, "Dinheiro": "DINHEIRO"}
    view.poste_map = {"P9 — Poste 9m": 4}
    view.tipo_cb = FakeEntry("L - Venda Loja")
    view.data_e = FakeEntry("2024-03-01")
    view.poste_cb = FakeEntry("P9 — Poste 9m")
    view.qtd_e = FakeEntry("1")
    view.valor_e = FakeEntry("35")
    view.metodo_cb = FakeEntry("Dinheiro")
    view.vendedor_e = FakeEntry("")
    view.nota_e = FakeEntry("")
    view.obs_e = FakeEntry("")

    dto = view.form_dto()

    assert dto["frete_eletrons"] == "35"
    assert "valor_venda" not in dto
    assert dto["poste_id"] == 4
    assert dto["metodo_pagamento"] == "DINHEIRO"


def test_sale_type_label_falls_back_for_unknown_types():
    view = VendasView.__new__(VendasView)
    view.tipo_map = {"V - Venda Normal": "V", "E - Extra": "E", "L - Venda Loja": "L"}

    assert view.tipo_label("L") == "L - Venda Loja"
    assert view.tipo_label("") == "V - Venda Normal"
    assert view.tipo_label(None) == "V - Venda Normal"
