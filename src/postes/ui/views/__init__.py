from .login_view import LoginView
from .dashboard_view import DashboardView
from .vendas_view import VendasView
from .despesas_view import DespesasView
from .postes_view import PostesView
from .estoque_view import EstoqueDashboardView, EstoqueView
from .reports_view import ReportsView

__all__ = [
    "LoginView",
    "DashboardView",
    "VendasView",
    "DespesasView",
    "PostesView",
    "EstoqueDashboardView",
    "EstoqueView",
    "ReportsView",
]
