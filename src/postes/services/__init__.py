from .auth_service import AuthService
from .postes_service import PosteService
from .vendas_service import VendaService
from .despesas_service import DespesaService
from .estoque_service import EstoqueService
from .movimentos_service import MovimentoService
from .dashboard_service import DashboardService
from .reporting_service import ReportingService
from .export_service import ExportService

__all__ = [
    "AuthService",
    "PosteService",
    "VendaService",
    "DespesaService",
    "EstoqueService",
    "MovimentoService",
    "DashboardService",
    "ReportingService",
    "ExportService",
]
