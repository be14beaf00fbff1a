from __future__ import annotations

import tkinter as tk
from tkinter import ttk
import logging

from postes.domain.constants import ESTOQUE_BAIXO_LIMITE, TIPOS_MOVIMENTO
from postes.domain.errors import AppError
from postes.domain.formatters import format_currency, format_date, tipo_movimento_label
from postes.ui.lifecycle import TimerRegistry

log = logging.getLogger(__name__)

AUTO_REFRESH_MS = 5 * 60 * 1000


def _fill_estoque_tree(tree: ttk.Treeview, itens) -> None:
    for item in tree.get_children():
        tree.delete(item)
    for e in itens:
        if e.quantidade_atual < 0:
            tag = "negativo"
        elif e.quantidade_atual == 0:
            tag = "zero"
        elif e.quantidade_atual <= ESTOQUE_BAIXO_LIMITE:
            tag = "baixo"
        else:
            tag = ""
        tree.insert("", "end", values=(
            e.codigo_poste,
            e.descricao_poste,
            e.quantidade_atual,
            format_currency(e.preco_poste),
            format_currency(e.preco_poste * e.quantidade_atual),
        ), tags=(tag,) if tag else ())


def _estoque_tree(parent) -> ttk.Treeview:
    cols = ("codigo", "descricao", "qtd", "preco", "total")
    tree = ttk.Treeview(parent, columns=cols, show="headings", height=14)
    heads = {"codigo": "Código", "descricao": "Descrição", "qtd": "Quantidade", "preco": "Preço", "total": "Valor"}
    widths = {"codigo": 100, "descricao": 300, "qtd": 90, "preco": 110, "total": 120}
    for c in cols:
        tree.heading(c, text=heads[c])
        tree.column(c, width=widths[c], anchor="w")
    tree.tag_configure("negativo", background="#fee2e2")
    tree.tag_configure("zero", background="#f1f5f9")
    tree.tag_configure("baixo", background="#fef9c3")
    return tree


class EstoqueDashboardView:
    """Manager panel: consolidated stock counts, alerts and movement stats."""

    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Dashboard")

        self.timers = TimerRegistry(app)
        self.painel = None

        tab = self.frame
        top = ttk.Frame(tab)
        top.pack(fill="x", padx=10, pady=10)
        ttk.Label(top, text="Estoque consolidado", style="Title.TLabel").pack(side="left")
        ttk.Button(top, text="Atualizar", command=self.refresh).pack(side="right")

        kpi = ttk.LabelFrame(tab, text="Situação do estoque")
        kpi.pack(fill="x", padx=10, pady=(0, 10))
        self.kpis: dict[str, ttk.Label] = {}
        campos = [
            ("total_itens", "Itens"),
            ("positivo", "Estoque ok"),
            ("baixo", f"Baixo (≤ {ESTOQUE_BAIXO_LIMITE})"),
            ("zero", "Zerado"),
            ("negativo", "Negativo"),
            ("valor_total", "Valor em estoque"),
        ]
        for i, (key, label) in enumerate(campos):
            ttk.Label(kpi, text=label, style="KPI.TLabel").grid(row=0, column=i, padx=12, pady=(8, 0))
            w = ttk.Label(kpi, text="-", style="KPIValue.TLabel")
            w.grid(row=1, column=i, padx=12, pady=(0, 8))
            self.kpis[key] = w

        alertas = ttk.LabelFrame(tab, text="Alertas")
        alertas.pack(fill="both", expand=True, padx=10, pady=(0, 10))
        self.alert_tree = _estoque_tree(alertas)
        self.alert_tree.pack(fill="both", expand=True, padx=6, pady=6)

        self.stats_var = tk.StringVar(value="")
        ttk.Label(tab, textvariable=self.stats_var).pack(anchor="w", padx=10, pady=(0, 10))

    def load(self):
        painel = self.app.dashboard.painel_estoque()
        self.painel = painel
        for key, label in self.kpis.items():
            value = getattr(painel, key)
            label.config(text=format_currency(value) if key == "valor_total" else str(value))
        _fill_estoque_tree(self.alert_tree, painel.alertas_negativos + painel.alertas_baixos)

        stats = painel.estatisticas or {}
        self.stats_var.set("  |  ".join(f"{k}: {v}" for k, v in stats.items()) or "Sem estatísticas de movimentação.")
        self.timers.cancel_all()
        self.timers.schedule(AUTO_REFRESH_MS, self.refresh)

    def refresh(self):
        try:
            self.load()
            self.app.mark_updated("dashboard")
        except AppError as e:
            self.app.handle_error("Estoque", e, "Falha ao atualizar o estoque.")

    def cleanup(self):
        self.timers.cancel_all()


class EstoqueView:
    """Stock listing of one truck (or the consolidated one when `tenant_alvo` is None)."""

    def __init__(self, notebook: ttk.Notebook, app, titulo: str, tenant_alvo=None):
        self.app = app
        self.tenant_alvo = tenant_alvo
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text=titulo)

        self.itens = []
        self.movimentos = []
        self.tipo_map = {v: k for k, v in TIPOS_MOVIMENTO.items()}
        self.poste_map: dict[str, int] = {}

        tab = self.frame
        top = ttk.Frame(tab)
        top.pack(fill="x", padx=10, pady=10)
        ttk.Label(top, text=titulo, style="Title.TLabel").pack(side="left")
        ttk.Button(top, text="Atualizar", command=self.refresh).pack(side="right")

        box = ttk.LabelFrame(tab, text="Estoque")
        box.pack(fill="both", expand=True, padx=10, pady=(0, 10))
        self.tree = _estoque_tree(box)
        self.tree.pack(fill="both", expand=True, padx=6, pady=6)

        self.mov_tree = None
        if tenant_alvo is None:
            self._build_movimentos(tab)

    def _build_movimentos(self, tab):
        form = ttk.LabelFrame(tab, text="Ajuste manual")
        form.pack(fill="x", padx=10, pady=(0, 10))
        ttk.Label(form, text="Poste").pack(side="left", padx=(8, 4), pady=8)
        self.poste_cb = ttk.Combobox(form, values=[], state="readonly", width=28)
        self.poste_cb.pack(side="left", padx=4)
        ttk.Label(form, text="Tipo").pack(side="left", padx=(8, 4))
        self.tipo_cb = ttk.Combobox(form, values=list(self.tipo_map), state="readonly", width=14)
        self.tipo_cb.set(TIPOS_MOVIMENTO["AJUSTE"])
        self.tipo_cb.pack(side="left", padx=4)
        ttk.Label(form, text="Qtd").pack(side="left", padx=(8, 4))
        self.qtd_e = ttk.Entry(form, width=8)
        self.qtd_e.pack(side="left", padx=4)
        ttk.Label(form, text="Obs").pack(side="left", padx=(8, 4))
        self.obs_e = ttk.Entry(form, width=24)
        self.obs_e.pack(side="left", padx=4)
        ttk.Button(form, text="Registrar", command=self.on_registrar).pack(side="left", padx=8)

        hist = ttk.LabelFrame(tab, text="Últimas movimentações")
        hist.pack(fill="both", expand=True, padx=10, pady=(0, 10))
        cols = ("data", "poste", "tipo", "qtd", "obs")
        self.mov_tree = ttk.Treeview(hist, columns=cols, show="headings", height=8)
        heads = {"data": "Data", "poste": "Poste", "tipo": "Tipo", "qtd": "Qtd", "obs": "Observação"}
        for c in cols:
            self.mov_tree.heading(c, text=heads[c])
            self.mov_tree.column(c, width=120 if c != "obs" else 300, anchor="w")
        self.mov_tree.pack(fill="both", expand=True, padx=6, pady=6)

    def load(self):
        self.itens = self.app.estoque.listar(tenant=self.tenant_alvo)
        _fill_estoque_tree(self.tree, self.itens)

        if self.mov_tree is not None:
            self.poste_map = {f"{e.codigo_poste} — {e.descricao_poste}": e.poste_id for e in self.itens}
            self.poste_cb["values"] = list(self.poste_map)
            self.movimentos = self.app.movimentos.consolidado(limite=100)
            for item in self.mov_tree.get_children():
                self.mov_tree.delete(item)
            for m in self.movimentos:
                self.mov_tree.insert("", "end", values=(
                    format_date(m.data_movimento, include_time=True),
                    m.codigo_poste or "-",
                    tipo_movimento_label(m.tipo_movimento),
                    m.quantidade,
                    m.observacao or "",
                ))

    def refresh(self):
        try:
            self.load()
        except AppError as e:
            self.app.handle_error("Estoque", e, "Falha ao carregar o estoque.")

    def on_registrar(self):
        try:
            self.app.movimentos.registrar_manual({
                "poste_id": self.poste_map.get(self.poste_cb.get()),
                "tipo_movimento": self.tipo_map.get(self.tipo_cb.get()),
                "quantidade": self.qtd_e.get().strip(),
                "observacao": self.obs_e.get().strip(),
            })
            self.app.toast("Movimentação registrada.", kind="success")
            self.qtd_e.delete(0, tk.END)
            self.obs_e.delete(0, tk.END)
            self.refresh()
        except AppError as e:
            self.app.handle_error("Ajuste de estoque", e, "Falha ao registrar a movimentação.")
