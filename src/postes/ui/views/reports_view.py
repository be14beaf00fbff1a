from __future__ import annotations

import tkinter as tk
from tkinter import ttk, filedialog
from datetime import date

from postes.domain.constants import METODOS_PAGAMENTO, TIPOS_VENDA
from postes.domain.errors import AppError, ValidationError
from postes.domain.formatters import first_of_month, format_currency
from postes.services.export_service import RELATORIO_COLUNAS, linhas_relatorio
from postes.services.reporting_service import filtrar_tabela, ordenar_tabela

MONEY_COLUMNS = ("Valor Venda", "Valor Extra", "Frete")


class ReportsView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Relatórios")

        self.vendas = []
        self.despesas = []
        self.resumo = None
        self.linhas: list[dict] = []
        self.sort_key = None
        self.sort_asc = True

        self.tipo_map = {"Todos": None, **{v: k for k, v in TIPOS_VENDA.items()}}
        self.metodo_map = {"Todos": None, **{v: k for k, v in METODOS_PAGAMENTO.items()}}
        self._build()

    def _build(self):
        tab = self.frame

        filtros = ttk.LabelFrame(tab, text="Filtros")
        filtros.pack(fill="x", padx=10, pady=10)

        ttk.Label(filtros, text="Início").grid(row=0, column=0, padx=8, pady=6, sticky="w")
        self.inicio_e = ttk.Entry(filtros, width=12)
        self.inicio_e.insert(0, first_of_month().isoformat())
        self.inicio_e.grid(row=0, column=1, padx=4, pady=6)
        ttk.Label(filtros, text="Fim").grid(row=0, column=2, padx=8, pady=6, sticky="w")
        self.fim_e = ttk.Entry(filtros, width=12)
        self.fim_e.insert(0, date.today().isoformat())
        self.fim_e.grid(row=0, column=3, padx=4, pady=6)

        ttk.Label(filtros, text="Tipo").grid(row=0, column=4, padx=8, pady=6, sticky="w")
        self.tipo_cb = ttk.Combobox(filtros, values=list(self.tipo_map), state="readonly", width=14)
        self.tipo_cb.current(0)
        self.tipo_cb.grid(row=0, column=5, padx=4, pady=6)
        self.tipo_cb.bind("<<ComboboxSelected>>", lambda _e: self.apply_filters())

        ttk.Label(filtros, text="Pagamento").grid(row=0, column=6, padx=8, pady=6, sticky="w")
        self.metodo_cb = ttk.Combobox(filtros, values=list(self.metodo_map), state="readonly", width=14)
        self.metodo_cb.current(0)
        self.metodo_cb.grid(row=0, column=7, padx=4, pady=6)
        self.metodo_cb.bind("<<ComboboxSelected>>", lambda _e: self.apply_filters())

        ttk.Label(filtros, text="Poste/obs").grid(row=1, column=0, padx=8, pady=6, sticky="w")
        self.busca_e = ttk.Entry(filtros, width=24)
        self.busca_e.grid(row=1, column=1, columnspan=3, sticky="ew", padx=4, pady=6)
        self.busca_e.bind("<Return>", lambda _e: self.apply_filters())

        ttk.Button(filtros, text="Gerar relatório", style="Big.TButton", command=self.gerar).grid(
            row=1, column=5, columnspan=3, sticky="e", padx=8, pady=6
        )

        resumo = ttk.LabelFrame(tab, text="Resumo")
        resumo.pack(fill="x", padx=10, pady=(0, 10))
        self.kpis: dict[str, ttk.Label] = {}
        campos = [
            ("total_v", "Vendas (V)"),
            ("total_e", "Extras (E)"),
            ("total_l", "Frete (L)"),
            ("total_receita", "Receita"),
            ("total_despesas", "Despesas"),
            ("lucro_liquido", "Lucro líquido"),
        ]
        for i, (key, label) in enumerate(campos):
            ttk.Label(resumo, text=label, style="KPI.TLabel").grid(row=0, column=i, padx=12, pady=(8, 0))
            w = ttk.Label(resumo, text="-", style="KPIValue.TLabel")
            w.grid(row=1, column=i, padx=12, pady=(0, 8))
            self.kpis[key] = w
        self.metodos_var = tk.StringVar(value="")
        ttk.Label(resumo, textvariable=self.metodos_var).grid(row=2, column=0, columnspan=6, sticky="w", padx=12, pady=(0, 8))

        tabela = ttk.LabelFrame(tab, text="Vendas")
        tabela.pack(fill="both", expand=True, padx=10, pady=(0, 10))

        barra = ttk.Frame(tabela)
        barra.pack(fill="x", padx=6, pady=6)
        ttk.Label(barra, text="Buscar na tabela").pack(side="left")
        self.tabela_busca_e = ttk.Entry(barra, width=28)
        self.tabela_busca_e.pack(side="left", padx=6)
        self.tabela_busca_e.bind("<KeyRelease>", lambda _e: self._fill_tree())
        ttk.Button(barra, text="Exportar Excel", command=self.export_excel).pack(side="right", padx=(6, 0))
        ttk.Button(barra, text="Exportar CSV", command=self.export_csv).pack(side="right")

        self.tree = ttk.Treeview(tabela, columns=RELATORIO_COLUNAS, show="headings", height=14)
        for c in RELATORIO_COLUNAS:
            self.tree.heading(c, text=c, command=lambda col=c: self.sort_by(col))
            self.tree.column(c, width=90 if c != "Obs" else 220, anchor="w")
        self.tree.pack(fill="both", expand=True, padx=6, pady=(0, 6))

    # ---------- Data ----------
    def gerar(self):
        try:
            self.vendas, self.despesas = self.app.reporting.gerar(
                self.inicio_e.get().strip(), self.fim_e.get().strip()
            )
            self.apply_filters()
            self.app.toast(f"Relatório gerado: {len(self.vendas)} vendas.", kind="success")
        except AppError as e:
            self.app.handle_error("Relatório", e, "Falha ao gerar o relatório.")

    def load(self):
        # the page opens empty; the report only runs on demand
        return None

    def refresh(self):
        self.gerar()

    def apply_filters(self):
        self.resumo = self.app.reporting.resumir(
            self.vendas,
            self.despesas,
            tipo=self.tipo_map.get(self.tipo_cb.get()),
            metodo=self.metodo_map.get(self.metodo_cb.get()),
            busca=self.busca_e.get(),
        )
        self.linhas = linhas_relatorio(self.resumo.vendas)
        for key, label in self.kpis.items():
            label.config(text=format_currency(getattr(self.resumo, key)))
        self.metodos_var.set(
            "  |  ".join(f"{nome}: {format_currency(valor)}" for nome, valor in self.resumo.por_metodo)
        )
        self._fill_tree()

    def visible_rows(self) -> list[dict]:
        rows = filtrar_tabela(self.linhas, self.tabela_busca_e.get())
        if self.sort_key:
            rows = ordenar_tabela(rows, self.sort_key, self.sort_asc)
        return list(rows)

    def sort_by(self, coluna: str):
        if self.sort_key == coluna:
            self.sort_asc = not self.sort_asc
        else:
            self.sort_key, self.sort_asc = coluna, True
        self._fill_tree()

    def _fill_tree(self):
        for item in self.tree.get_children():
            self.tree.delete(item)
        for row in self.visible_rows():
            self.tree.insert("", "end", values=[
                format_currency(row[c]) if c in MONEY_COLUMNS else row[c] for c in RELATORIO_COLUNAS
            ])

    # ---------- Export ----------
    def _periodo_label(self) -> str:
        return f"{self.inicio_e.get().strip()} a {self.fim_e.get().strip()}"

    def export_csv(self):
        try:
            if not self.linhas:
                raise ValidationError("Gere o relatório antes de exportar.")
            path = filedialog.asksaveasfilename(
                title="Salvar CSV",
                defaultextension=".csv",
                filetypes=[("CSV", "*.csv")],
                initialfile=f"relatorio_{date.today().isoformat()}.csv",
            )
            if not path:
                return
            self.app.export.exportar_csv(self.visible_rows(), path)
            self.app.toast("CSV exportado.", kind="success")
        except (AppError, OSError) as e:
            self.app.handle_error("Exportar CSV", e, "Falha ao exportar CSV.")

    def export_excel(self):
        try:
            if self.resumo is None or not self.linhas:
                raise ValidationError("Gere o relatório antes de exportar.")
            path = filedialog.asksaveasfilename(
                title="Salvar Excel",
                defaultextension=".xlsx",
                filetypes=[("Excel files", "*.xlsx")],
                initialfile=f"relatorio_{date.today().isoformat()}.xlsx",
            )
            if not path:
                return
            self.app.export.exportar_excel(path, self.resumo, self.visible_rows(), periodo=self._periodo_label())
            self.app.toast("Excel exportado.", kind="success")
        except (AppError, OSError) as e:
            self.app.handle_error("Exportar Excel", e, "Falha ao exportar Excel.")
