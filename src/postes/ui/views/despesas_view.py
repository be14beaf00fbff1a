from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox

from postes.domain.constants import TIPOS_DESPESA
from postes.domain.errors import AppError
from postes.domain.formatters import current_date_input, format_currency, format_date, tipo_despesa_label


class DespesasView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Despesas")

        self.despesas = []
        self.tipo_map = {v: k for k, v in TIPOS_DESPESA.items()}
        self.total_var = tk.StringVar(value="Total: -")

        tab = self.frame
        left = ttk.LabelFrame(tab, text="Nova despesa", width=270)
        left.pack(side="left", fill="y", padx=(0, 6), pady=8)
        left.pack_propagate(False)

        right = ttk.LabelFrame(tab, text="Despesas do período")
        right.pack(side="right", fill="both", expand=True, pady=8)

        self.data_e = self._entry(left, "Data", 0)
        self.data_e.insert(0, current_date_input())
        self.desc_e = self._entry(left, "Descrição", 1)
        self.valor_e = self._entry(left, "Valor", 2)
        ttk.Label(left, text="Tipo").grid(row=3, column=0, sticky="w", padx=8, pady=4)
        self.tipo_cb = ttk.Combobox(left, values=list(self.tipo_map), state="readonly", width=16)
        self.tipo_cb.current(1)
        self.tipo_cb.grid(row=3, column=1, sticky="ew", padx=8, pady=4)

        btns = ttk.Frame(left)
        btns.grid(row=4, column=0, columnspan=2, sticky="ew", padx=8, pady=(6, 8))
        btns.columnconfigure(0, weight=1)
        btns.columnconfigure(1, weight=1)
        ttk.Button(btns, text="Adicionar", command=self.on_add).grid(row=0, column=0, sticky="ew", padx=(0, 6))
        ttk.Button(btns, text="Excluir", command=self.on_delete).grid(row=0, column=1, sticky="ew", padx=(6, 0))
        self.valor_e.bind("<Return>", lambda _e: self.on_add())

        filtro = ttk.Frame(right)
        filtro.pack(fill="x", padx=6, pady=6)
        ttk.Label(filtro, text="Início").pack(side="left")
        self.f_inicio = ttk.Entry(filtro, width=12)
        self.f_inicio.pack(side="left", padx=6)
        ttk.Label(filtro, text="Fim").pack(side="left")
        self.f_fim = ttk.Entry(filtro, width=12)
        self.f_fim.pack(side="left", padx=6)
        ttk.Button(filtro, text="Atualizar", command=self.refresh).pack(side="left", padx=6)
        ttk.Label(filtro, textvariable=self.total_var, style="KPIValue.TLabel").pack(side="right", padx=6)

        cols = ("id", "data", "descricao", "tipo", "valor")
        self.tree = ttk.Treeview(right, columns=cols, show="headings", height=20)
        heads = {"id": "ID", "data": "Data", "descricao": "Descrição", "tipo": "Tipo", "valor": "Valor"}
        widths = {"id": 50, "data": 100, "descricao": 320, "tipo": 110, "valor": 110}
        for c in cols:
            self.tree.heading(c, text=heads[c])
            self.tree.column(c, width=widths[c], anchor="w")
        self.tree.pack(fill="both", expand=True, padx=6, pady=(0, 6))

    def _entry(self, parent, label, row):
        ttk.Label(parent, text=label).grid(row=row, column=0, sticky="w", padx=8, pady=4)
        e = ttk.Entry(parent, width=16)
        e.grid(row=row, column=1, sticky="ew", padx=8, pady=4)
        parent.columnconfigure(1, weight=1)
        return e

    def load(self):
        inicio = self.f_inicio.get().strip() or None
        fim = self.f_fim.get().strip() or None
        self.despesas = self.app.despesas.listar(inicio, fim)

        for item in self.tree.get_children():
            self.tree.delete(item)
        for d in self.despesas:
            self.tree.insert("", "end", iid=str(d.id), values=(
                d.id, format_date(d.data_despesa), d.descricao, tipo_despesa_label(d.tipo), format_currency(d.valor),
            ))
        self.total_var.set(f"Total: {format_currency(sum(d.valor for d in self.despesas))}")

    def refresh(self):
        try:
            self.load()
        except AppError as e:
            self.app.handle_error("Despesas", e, "Falha ao carregar despesas.")

    def on_add(self):
        try:
            self.app.despesas.criar({
                "data_despesa": self.data_e.get().strip(),
                "descricao": self.desc_e.get().strip(),
                "valor": self.valor_e.get().strip(),
                "tipo": self.tipo_map.get(self.tipo_cb.get()),
            })
            self.app.toast("Despesa registrada.", kind="success")
            self.desc_e.delete(0, tk.END)
            self.valor_e.delete(0, tk.END)
            self.refresh()
        except AppError as e:
            self.app.handle_error("Nova despesa", e, "Falha ao registrar a despesa.")

    def on_delete(self):
        try:
            sel = self.tree.selection()
            if not sel:
                self.app.toast("Selecione uma despesa.", kind="warn")
                return
            despesa_id = int(sel[0])
            if not messagebox.askyesno("Excluir despesa", f"Excluir a despesa {despesa_id}?", parent=self.frame):
                return
            self.app.despesas.deletar(despesa_id)
            self.app.toast("Despesa excluída.", kind="success")
            self.refresh()
        except AppError as e:
            self.app.handle_error("Excluir despesa", e, "Falha ao excluir a despesa.")
