from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
import logging

from postes.domain.constants import TENANT_COLORS, TENANT_LABELS
from postes.domain.errors import AppError, AuthorizationError, HttpError, SessionExpiredError, ValidationError
from postes.domain.models import Tenant
from postes.services.auth_service import LOGIN_ROUTE, PAGINAS, resolver_rota, rota_dashboard
from postes.ui.lifecycle import PageRouter, TimerRegistry
from postes.ui.views.dashboard_view import DashboardView
from postes.ui.views.despesas_view import DespesasView
from postes.ui.views.estoque_view import EstoqueDashboardView, EstoqueView
from postes.ui.views.login_view import LoginView
from postes.ui.views.postes_view import PostesView
from postes.ui.views.reports_view import ReportsView
from postes.ui.views.vendas_view import VendasView

log = logging.getLogger(__name__)

SESSION_CHECK_MS = 60 * 1000

PAGE_LABELS = {
    "dashboard": "📊 Dashboard",
    "vendas": "🧾 Vendas",
    "despesas": "💸 Despesas",
    "postes": "🪵 Postes",
    "relatorios": "📈 Relatórios",
    "estoque-consolidado": "📦 Estoque consolidado",
    "estoque-vermelho": "🚚 Estoque vermelho",
    "estoque-branco": "🚚 Estoque branco",
}


class App(tk.Tk):
    def __init__(self, container, logs_dir: str):
        super().__init__()
        self.title("Sistema de Postes")
        self.geometry("1280x720")
        self.minsize(1120, 640)

        self.container = container
        self.auth = container.auth
        self.postes = container.postes
        self.vendas = container.vendas
        self.despesas = container.despesas
        self.estoque = container.estoque
        self.movimentos = container.movimentos
        self.dashboard = container.dashboard
        self.reporting = container.reporting
        self.export = container.export
        self.logs_dir = logs_dir

        self.identidade = None
        self.router: PageRouter | None = None
        self.views: dict = {}
        self.shell = None
        self.nb = None

        self.status_var = tk.StringVar(value="")
        self.user_var = tk.StringVar(value="")
        self._toast_after_id = None
        self.timers = TimerRegistry(self)

        self._build_styles()
        self._build_topbar()

        self.body = ttk.Frame(self)
        self.body.pack(fill="both", expand=True, padx=12, pady=(0, 8))
        self.login_view = LoginView(self.body, self)

        self._build_status_bar()
        self.protocol("WM_DELETE_WINDOW", self.on_close)

        identidade = self.auth.sessao_atual()
        if identidade is None:
            self._show_login()
        else:
            self._open_shell(identidade)

    def _build_styles(self):
        style = ttk.Style(self)
        style.layout("Side.TNotebook.Tab", [])
        style.configure("Side.TNotebook", tabmargins=0)

        try:
            style.configure("Big.TButton", padding=(14, 10))
            style.configure("Title.TLabel", font=("Segoe UI", 12, "bold"))
            style.configure("KPI.TLabel", font=("Segoe UI", 10))
            style.configure("KPIValue.TLabel", font=("Segoe UI", 11, "bold"))
        except tk.TclError as e:
            log.exception("UI style setup failed: %s", e)

    def _build_topbar(self):
        top = ttk.Frame(self)
        top.pack(fill="x", padx=12, pady=10)
        ttk.Label(top, textvariable=self.user_var, style="Title.TLabel").pack(side="left")
        self.logout_btn = ttk.Button(top, text="Sair", command=self.logout)

    def _build_status_bar(self):
        bar = ttk.Frame(self)
        bar.pack(fill="x", padx=12, pady=(0, 10))
        ttk.Label(bar, textvariable=self.status_var).pack(side="left")
        ttk.Label(bar, text=f"Logs: {self.logs_dir}").pack(side="right")

    # ---------- Session ----------
    @property
    def tenant(self) -> Tenant:
        if self.identidade is None:
            return self.auth.tenant_atual()
        return self.identidade.tenant

    @property
    def tenant_color(self) -> str:
        return TENANT_COLORS.get(self.tenant, "#2b78c2")

    def login(self, tenant: Tenant, senha: str):
        identidade = self.auth.login(tenant, senha)
        self._open_shell(identidade)
        self.toast(f"Bem-vindo, {identidade.display_name}.", kind="success")

    def logout(self):
        self.auth.logout()
        self._close_shell()
        self._show_login()

    def _end_session(self, msg: str):
        log.info("session_ended tenant=%s", getattr(self.tenant, "value", self.tenant))
        self.auth.logout()
        self._close_shell()
        self._show_login()
        self.toast(msg, kind="warn", ms=4000)

    def _check_session(self):
        if self.identidade is None:
            return
        try:
            self.auth.exigir_sessao()
        except AuthorizationError as e:
            self._end_session(str(e))
            return
        self.timers.schedule(SESSION_CHECK_MS, self._check_session)

    def _show_login(self):
        self.user_var.set("")
        self.logout_btn.pack_forget()
        self.login_view.frame.pack(fill="both", expand=True)
        self.login_view.focus()

    # ---------- Shell ----------
    def _open_shell(self, identidade):
        self._close_shell()
        self.identidade = identidade
        self.login_view.frame.pack_forget()
        self.user_var.set(f"{TENANT_LABELS[identidade.tenant]} · {identidade.display_name}")
        self.logout_btn.pack(side="right")

        self.shell = ttk.Frame(self.body)
        self.shell.pack(fill="both", expand=True)
        sidebar = ttk.Frame(self.shell)
        sidebar.pack(side="left", fill="y", padx=(0, 10))
        content = ttk.Frame(self.shell)
        content.pack(side="right", fill="both", expand=True)

        self.nb = ttk.Notebook(content, style="Side.TNotebook")
        self.nb.pack(fill="both", expand=True)

        self.views = self._build_views(identidade.tenant)
        self.router = PageRouter(sleep=self._wait)
        for pagina, view in self.views.items():
            self.router.register(
                pagina,
                init=lambda p=pagina: self._init_page(p),
                cleanup=getattr(view, "cleanup", None),
                timers=getattr(view, "timers", None),
            )

        box = ttk.LabelFrame(sidebar, text="Menu")
        box.pack(fill="x")
        for pagina in PAGINAS[identidade.tenant]:
            rota = f"/{identidade.tenant.value}/{pagina}"
            ttk.Button(
                box, text=PAGE_LABELS.get(pagina, pagina), style="Big.TButton",
                command=lambda r=rota: self.goto(r),
            ).pack(fill="x", padx=10, pady=4)
        ttk.Button(box, text="🔄 Atualizar", style="Big.TButton", command=self.refresh_current)\
            .pack(fill="x", padx=10, pady=(4, 10))

        self.timers.schedule(SESSION_CHECK_MS, self._check_session)
        self.goto(rota_dashboard(identidade.tenant))

    def _build_views(self, tenant: Tenant) -> dict:
        if tenant is Tenant.JEFFERSON:
            return {
                "dashboard": EstoqueDashboardView(self.nb, self),
                "estoque-consolidado": EstoqueView(self.nb, self, "Estoque consolidado"),
                "estoque-vermelho": EstoqueView(self.nb, self, "Estoque caminhão vermelho", tenant_alvo=Tenant.VERMELHO),
                "estoque-branco": EstoqueView(self.nb, self, "Estoque caminhão branco", tenant_alvo=Tenant.BRANCO),
            }
        return {
            "dashboard": DashboardView(self.nb, self),
            "vendas": VendasView(self.nb, self),
            "despesas": DespesasView(self.nb, self),
            "postes": PostesView(self.nb, self),
            "relatorios": ReportsView(self.nb, self),
        }

    def _close_shell(self):
        self.timers.cancel_all()
        for view in self.views.values():
            if hasattr(view, "cleanup"):
                view.cleanup()
        self.views = {}
        self.router = None
        self.identidade = None
        if self.shell is not None:
            self.shell.destroy()
            self.shell = None
            self.nb = None

    # ---------- Navigation ----------
    def _wait(self, seconds: float):
        # keep the window painted between init attempts
        self.update_idletasks()
        self.after(int(seconds * 1000))

    def _init_page(self, pagina: str):
        if self.router.precisa_recarregar(pagina):
            self.views[pagina].load()

    def goto(self, rota: str):
        destino = resolver_rota(rota, self.auth.sessao_atual())
        if destino == LOGIN_ROUTE:
            if self.identidade is not None:
                self._end_session("Sessão expirada. Faça login novamente.")
            else:
                self._show_login()
            return
        self.show_page(destino.rsplit("/", 1)[1])

    def show_page(self, pagina: str):
        if self.router is None or pagina not in self.views:
            return
        try:
            ok = self.router.navegar(pagina)
        except AppError as e:
            self.handle_error("Carregar página", e, "Falha ao carregar a página.")
            return
        if ok:
            self.nb.select(self.views[pagina].frame)

    def mark_updated(self, pagina: str):
        if self.router is not None and pagina in self.views:
            self.router.marcar_atualizado(pagina)

    def refresh_current(self):
        if self.router is not None and self.router.current:
            self.views[self.router.current].refresh()

    # ---------- Feedback ----------
    def toast(self, msg: str, kind: str = "info", ms: int = 2500):
        prefix = {"info": "ℹ ", "success": "✅ ", "warn": "⚠ ", "error": "❌ "}.get(kind, "")
        self.status_var.set(prefix + msg)
        if self._toast_after_id is not None:
            try:
                self.after_cancel(self._toast_after_id)
            except tk.TclError:
                pass
        self._toast_after_id = self.after(ms, lambda: self.status_var.set(""))

    def handle_error(self, title: str, err: Exception, toast_text: str):
        if isinstance(err, SessionExpiredError) or (isinstance(err, HttpError) and err.status == 401):
            self._end_session(str(err) if isinstance(err, SessionExpiredError) else "Sessão expirada. Faça login novamente.")
            return
        if isinstance(err, ValidationError):
            detalhes = "\n".join(f"• {campo}: {msg}" for campo, msg in err.campos.items())
            messagebox.showwarning(title, f"{err}\n\n{detalhes}" if detalhes else str(err), parent=self)
            return
        if isinstance(err, AppError):
            log.warning("ui_error title=%s error=%s", title, err)
            self.toast(str(err) or toast_text, kind="error", ms=4000)
            return
        log.error("ui_unexpected_error title=%s", title, exc_info=err)
        self.toast(toast_text, kind="error", ms=4000)

    def on_close(self):
        self.timers.cancel_all()
        for view in self.views.values():
            if hasattr(view, "cleanup"):
                view.cleanup()
        self.destroy()
