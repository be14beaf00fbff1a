from __future__ import annotations

import tkinter as tk
from tkinter import ttk
import logging

from postes.domain.errors import AppError
from postes.domain.formatters import format_currency, format_date_input
from postes.ui.lifecycle import TimerRegistry

log = logging.getLogger(__name__)

AUTO_REFRESH_MS = 5 * 60 * 1000


class DashboardView:
    """Profit panel for a truck: period totals, partner shares and a bar chart."""

    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Dashboard")

        self.timers = TimerRegistry(app)
        self.painel = None
        self._build()

    def _build(self):
        tab = self.frame

        top = ttk.Frame(tab)
        top.pack(fill="x", padx=10, pady=10)
        ttk.Label(top, text="Data início").pack(side="left")
        self.inicio_e = ttk.Entry(top, width=12)
        self.inicio_e.pack(side="left", padx=(6, 12))
        ttk.Label(top, text="Data fim").pack(side="left")
        self.fim_e = ttk.Entry(top, width=12)
        self.fim_e.pack(side="left", padx=(6, 12))
        ttk.Button(top, text="Atualizar", command=self.refresh).pack(side="left")

        kpi = ttk.LabelFrame(tab, text="Resumo do período")
        kpi.pack(fill="x", padx=10, pady=(0, 10))

        self.kpis: dict[str, ttk.Label] = {}
        campos = [
            ("valor_total_vendas", "Vendas"),
            ("total_venda_postes", "Custo dos postes"),
            ("total_contribuicoes_extras", "Extras + frete"),
            ("despesas_funcionario", "Despesas funcionário"),
            ("outras_despesas", "Outras despesas"),
            ("lucro_total", "Lucro total"),
            ("ticket_medio", "Ticket médio"),
            ("margem_lucro", "Margem"),
            ("postes_ativos", "Postes ativos"),
        ]
        for i, (key, label) in enumerate(campos):
            r, c = divmod(i, 3)
            ttk.Label(kpi, text=label, style="KPI.TLabel").grid(row=r, column=c * 2, sticky="w", padx=10, pady=4)
            w = ttk.Label(kpi, text="-", style="KPIValue.TLabel")
            w.grid(row=r, column=c * 2 + 1, sticky="e", padx=10, pady=4)
            self.kpis[key] = w
        for c in range(6):
            kpi.columnconfigure(c, weight=1)

        self.socios_box = ttk.LabelFrame(tab, text="Divisão do lucro")
        self.socios_box.pack(fill="x", padx=10, pady=(0, 10))

        self.chart = tk.Canvas(tab, height=220, bg="#f8fafc", highlightthickness=1, highlightbackground="#cbd5e1")
        self.chart.pack(fill="both", expand=True, padx=10, pady=(0, 10))

    # ---------- Data ----------
    def load(self):
        inicio = self.inicio_e.get().strip() or None
        fim = self.fim_e.get().strip() or None
        painel = self.app.dashboard.carregar(self.app.tenant, inicio, fim)
        self.painel = painel
        self._render(painel)
        self.timers.cancel_all()
        self.timers.schedule(AUTO_REFRESH_MS, self.refresh)

    def refresh(self):
        try:
            self.load()
            self.app.mark_updated("dashboard")
        except AppError as e:
            # previous numbers stay on screen
            self.app.handle_error("Dashboard", e, "Falha ao atualizar o painel.")

    def cleanup(self):
        self.timers.cancel_all()

    # ---------- Render ----------
    def _render(self, painel):
        d = painel.distribuicao
        self._set_entry(self.inicio_e, format_date_input(str(painel.data_inicio)))
        self._set_entry(self.fim_e, format_date_input(str(painel.data_fim)))

        valores = {
            "valor_total_vendas": format_currency(d.valor_total_vendas),
            "total_venda_postes": format_currency(d.total_venda_postes),
            "total_contribuicoes_extras": format_currency(d.total_contribuicoes_extras),
            "despesas_funcionario": format_currency(d.despesas_funcionario),
            "outras_despesas": format_currency(d.outras_despesas),
            "lucro_total": format_currency(d.lucro_total),
            "ticket_medio": format_currency(painel.ticket_medio),
            "margem_lucro": f"{painel.margem_lucro:.1f}%",
            "postes_ativos": str(painel.postes_ativos),
        }
        for key, text in valores.items():
            self.kpis[key].config(text=text)

        for child in self.socios_box.winfo_children():
            child.destroy()
        for i, (nome, parte) in enumerate(d.socios):
            ttk.Label(self.socios_box, text=nome, style="KPI.TLabel").grid(row=0, column=i, padx=16, pady=(8, 0))
            ttk.Label(self.socios_box, text=format_currency(parte), style="KPIValue.TLabel").grid(
                row=1, column=i, padx=16, pady=(0, 8)
            )

        data = [
            ("Vendas", d.valor_total_vendas),
            ("Postes", d.total_venda_postes),
            ("Extras", d.total_contribuicoes_extras),
            ("Despesas", d.despesas_funcionario + d.outras_despesas),
            ("Lucro", d.lucro_total),
        ] + list(d.socios)
        self._draw_bar_chart(self.chart, "Resultado do período (R$)", data, color=self.app.tenant_color)

    @staticmethod
    def _set_entry(entry, text: str):
        entry.delete(0, tk.END)
        entry.insert(0, text)

    def _draw_bar_chart(self, canvas: tk.Canvas, title: str, data: list[tuple[str, float]], color: str = "#2b78c2"):
        canvas.delete("all")
        w, h = int(canvas.winfo_width() or 560), int(canvas.winfo_height() or 220)
        canvas.create_text(12, 16, text=title, anchor="w", font=("Segoe UI", 10, "bold"), fill="#0f172a")
        if not data:
            canvas.create_text(w // 2, h // 2, text="Sem dados", fill="#64748b")
            return
        maxv = max(abs(v) for _, v in data) or 1
        bw = max(24, (w - 40) // len(data))
        for i, (label, val) in enumerate(data):
            x0 = 24 + i * bw
            x1 = x0 + bw - 8
            y1 = h - 30
            y0 = y1 - int((abs(val) / maxv) * (h - 70))
            # losses are drawn with the same height, in red
            canvas.create_rectangle(x0, y0, x1, y1, fill=color if val >= 0 else "#dc2626", outline="")
            canvas.create_text((x0 + x1) // 2, y1 + 12, text=label[:10], font=("Segoe UI", 8), fill="#475569")
            canvas.create_text((x0 + x1) // 2, y0 - 8, text=f"{val:,.0f}", font=("Segoe UI", 8), fill="#0f172a")
