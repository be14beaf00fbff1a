from __future__ import annotations

from dataclasses import dataclass

from postes.api.client import ApiClient, ClientPolicy
from postes.config import ApiSettings, AppPaths
from postes.repositories.session_store import JsonSessionStore
from postes.services.auth_service import AuthService
from postes.services.dashboard_service import DashboardService
from postes.services.despesas_service import DespesaService
from postes.services.estoque_service import EstoqueService
from postes.services.export_service import ExportService
from postes.services.movimentos_service import MovimentoService
from postes.services.postes_service import PosteService
from postes.services.reporting_service import ReportingService
from postes.services.vendas_service import VendaService


@dataclass(frozen=True)
class AppContainer:
    client: ApiClient
    store: JsonSessionStore
    auth: AuthService
    postes: PosteService
    vendas: VendaService
    despesas: DespesaService
    estoque: EstoqueService
    movimentos: MovimentoService
    dashboard: DashboardService
    reporting: ReportingService
    export: ExportService


def build_container(settings: ApiSettings, paths: AppPaths, session=None) -> AppContainer:
    store = JsonSessionStore(paths.session_path)
    policy = ClientPolicy.legacy() if settings.legacy_mode else ClientPolicy()
    client = ApiClient(settings, tenant_provider=store.tenant, policy=policy, session=session)

    auth = AuthService(client, store)
    postes = PosteService(client)
    vendas = VendaService(client)
    despesas = DespesaService(client)
    estoque = EstoqueService(client)
    movimentos = MovimentoService(client)
    dashboard = DashboardService(vendas, despesas, postes, estoque=estoque, movimentos=movimentos)
    reporting = ReportingService(vendas, despesas)
    export = ExportService()

    return AppContainer(
        client=client,
        store=store,
        auth=auth,
        postes=postes,
        vendas=vendas,
        despesas=despesas,
        estoque=estoque,
        movimentos=movimentos,
        dashboard=dashboard,
        reporting=reporting,
        export=export,
    )
