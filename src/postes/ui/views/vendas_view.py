from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
import logging

from postes.domain.constants import METODOS_PAGAMENTO, TIPOS_VENDA
from postes.domain.errors import AppError
from postes.domain.formatters import (
    current_date_input,
    format_currency,
    format_date,
    format_date_input,
    metodo_pagamento_label,
    tipo_venda_label,
)
from postes.services.reporting_service import valor_principal

log = logging.getLogger(__name__)

# the single value entry maps to the field each sale type uses
CAMPO_VALOR = {"V": "valor_venda", "E": "valor_extra", "L": "frete_eletrons"}


class VendasView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Vendas")

        self.vendas = []
        self.editing_id = None
        self.poste_map: dict[str, int] = {}
        self.tipo_map = {f"{k} - {v}": k for k, v in TIPOS_VENDA.items()}
        self.metodo_map = {"": None, **{v: k for k, v in METODOS_PAGAMENTO.items()}}

        self._build()

    def _build(self):
        tab = self.frame

        left = ttk.LabelFrame(tab, text="Nova venda", width=290)
        left.pack(side="left", fill="y", padx=(0, 6), pady=8)
        left.pack_propagate(False)

        right = ttk.LabelFrame(tab, text="Vendas do período")
        right.pack(side="right", fill="both", expand=True, pady=8)

        ttk.Label(left, text="Tipo").grid(row=0, column=0, sticky="w", padx=8, pady=4)
        self.tipo_cb = ttk.Combobox(left, values=list(self.tipo_map), state="readonly", width=20)
        self.tipo_cb.current(0)
        self.tipo_cb.grid(row=0, column=1, sticky="ew", padx=8, pady=4)
        self.tipo_cb.bind("<<ComboboxSelected>>", lambda _e: self._on_tipo_changed())

        self.data_e = self._entry(left, "Data", 1)
        self.data_e.insert(0, current_date_input())

        ttk.Label(left, text="Poste").grid(row=2, column=0, sticky="w", padx=8, pady=4)
        self.poste_cb = ttk.Combobox(left, values=[], state="readonly", width=20)
        self.poste_cb.grid(row=2, column=1, sticky="ew", padx=8, pady=4)

        self.qtd_e = self._entry(left, "Quantidade", 3)
        self.valor_label = ttk.Label(left, text="Valor venda")
        self.valor_label.grid(row=4, column=0, sticky="w", padx=8, pady=4)
        self.valor_e = ttk.Entry(left, width=16)
        self.valor_e.grid(row=4, column=1, sticky="ew", padx=8, pady=4)

        ttk.Label(left, text="Pagamento").grid(row=5, column=0, sticky="w", padx=8, pady=4)
        self.metodo_cb = ttk.Combobox(left, values=list(self.metodo_map), state="readonly", width=20)
        self.metodo_cb.grid(row=5, column=1, sticky="ew", padx=8, pady=4)

        self.vendedor_e = self._entry(left, "Vendedor", 6)
        self.nota_e = self._entry(left, "Nº nota", 7)
        self.obs_e = self._entry(left, "Observações", 8)

        btns = ttk.Frame(left)
        btns.grid(row=9, column=0, columnspan=2, sticky="ew", padx=8, pady=(6, 8))
        for c in range(3):
            btns.columnconfigure(c, weight=1)
        ttk.Button(btns, text="Salvar", command=self.on_save).grid(row=0, column=0, sticky="ew", padx=(0, 6))
        ttk.Button(btns, text="Excluir", command=self.on_delete).grid(row=0, column=1, sticky="ew", padx=6)
        ttk.Button(btns, text="Limpar", command=self.clear_form).grid(row=0, column=2, sticky="ew", padx=(6, 0))

        filtro = ttk.Frame(right)
        filtro.pack(fill="x", padx=6, pady=6)
        ttk.Label(filtro, text="Início").pack(side="left")
        self.f_inicio = ttk.Entry(filtro, width=12)
        self.f_inicio.pack(side="left", padx=6)
        ttk.Label(filtro, text="Fim").pack(side="left")
        self.f_fim = ttk.Entry(filtro, width=12)
        self.f_fim.pack(side="left", padx=6)
        ttk.Button(filtro, text="Atualizar", command=self.refresh).pack(side="left", padx=6)

        cols = ("id", "data", "tipo", "poste", "qtd", "valor", "pagamento", "obs")
        self.tree = ttk.Treeview(right, columns=cols, show="headings", height=20)
        heads = {
            "id": "ID", "data": "Data", "tipo": "Tipo", "poste": "Poste", "qtd": "Qtd",
            "valor": "Valor", "pagamento": "Pagamento", "obs": "Observações",
        }
        widths = {"id": 50, "data": 120, "tipo": 110, "poste": 90, "qtd": 50, "valor": 110, "pagamento": 110, "obs": 240}
        for c in cols:
            self.tree.heading(c, text=heads[c])
            self.tree.column(c, width=widths[c], anchor="w")
        self.tree.pack(fill="both", expand=True, padx=6, pady=(0, 6))
        self.tree.bind("<Double-1>", self.on_edit)

    def _entry(self, parent, label, row):
        ttk.Label(parent, text=label).grid(row=row, column=0, sticky="w", padx=8, pady=4)
        e = ttk.Entry(parent, width=16)
        e.grid(row=row, column=1, sticky="ew", padx=8, pady=4)
        parent.columnconfigure(1, weight=1)
        return e

    def _tipo(self) -> str:
        return self.tipo_map.get(self.tipo_cb.get(), "V")

    def _on_tipo_changed(self):
        labels = {"V": "Valor venda", "E": "Valor extra", "L": "Frete Eletrons"}
        self.valor_label.config(text=labels[self._tipo()])

    # ---------- Data ----------
    def load(self):
        postes = self.app.postes.listar_ativos()
        self.poste_map = {f"{p.codigo} — {p.descricao}": p.id for p in postes}
        self.poste_cb["values"] = list(self.poste_map)

        inicio = self.f_inicio.get().strip() or None
        fim = self.f_fim.get().strip() or None
        self.vendas = self.app.vendas.listar(inicio, fim)
        self._fill_tree()

    def refresh(self):
        try:
            self.load()
        except AppError as e:
            self.app.handle_error("Vendas", e, "Falha ao carregar vendas.")

    def _fill_tree(self):
        for item in self.tree.get_children():
            self.tree.delete(item)
        for v in self.vendas:
            self.tree.insert("", "end", iid=str(v.id), values=(
                v.id,
                format_date(v.data_venda, include_time=True),
                tipo_venda_label(v.tipo_venda),
                v.codigo_poste or "-",
                v.quantidade or "-",
                format_currency(valor_principal(v)),
                metodo_pagamento_label(v.metodo_pagamento),
                v.observacoes or "",
            ))

    # ---------- Form ----------
    def form_dto(self) -> dict:
        tipo = self._tipo()
        dto = {
            "tipo_venda": tipo,
            "data_venda": self.data_e.get().strip(),
            "poste_id": self.poste_map.get(self.poste_cb.get()),
            "quantidade": self.qtd_e.get().strip(),
            "metodo_pagamento": self.metodo_map.get(self.metodo_cb.get()),
            "vendedor": self.vendedor_e.get().strip(),
            "numero_nota": self.nota_e.get().strip(),
            "observacoes": self.obs_e.get().strip(),
        }
        dto[CAMPO_VALOR[tipo]] = self.valor_e.get().strip()
        return dto

    def on_save(self):
        try:
            dto = self.form_dto()
            if self.editing_id is None:
                self.app.vendas.criar(dto)
                self.app.toast("Venda registrada.", kind="success")
            else:
                self.app.vendas.atualizar(self.editing_id, dto)
                self.app.toast("Venda atualizada.", kind="success")
            self.clear_form()
            self.refresh()
        except AppError as e:
            self.app.handle_error("Salvar venda", e, "Falha ao salvar a venda.")

    def tipo_label(self, tipo: str | None) -> str:
        # unknown types from the backend fall back to the first option
        return next((k for k, v in self.tipo_map.items() if v == tipo), next(iter(self.tipo_map)))

    def on_edit(self, _evt=None):
        sel = self.tree.selection()
        if not sel:
            return
        venda = next((v for v in self.vendas if str(v.id) == str(sel[0])), None)
        if venda is None:
            return
        self.clear_form()
        self.editing_id = venda.id
        self.tipo_cb.set(self.tipo_label(venda.tipo_venda))
        self._on_tipo_changed()
        self.data_e.delete(0, tk.END)
        self.data_e.insert(0, format_date_input(venda.data_venda))
        poste_label = next((k for k, pid in self.poste_map.items() if pid == venda.poste_id), "")
        self.poste_cb.set(poste_label)
        if venda.quantidade:
            self.qtd_e.insert(0, str(venda.quantidade))
        self.valor_e.insert(0, f"{valor_principal(venda):.2f}")
        self.metodo_cb.set(METODOS_PAGAMENTO.get(venda.metodo_pagamento or "", ""))
        self.vendedor_e.insert(0, venda.vendedor or "")
        self.nota_e.insert(0, venda.numero_nota or "")
        self.obs_e.insert(0, venda.observacoes or "")

    def on_delete(self):
        try:
            sel = self.tree.selection()
            if not sel:
                self.app.toast("Selecione uma venda.", kind="warn")
                return
            venda_id = int(sel[0])
            confirmed = messagebox.askyesno(
                "Excluir venda",
                f"Excluir a venda {venda_id}? Esta ação não pode ser desfeita.",
                parent=self.frame,
            )
            if not confirmed:
                return
            self.app.vendas.deletar(venda_id)
            self.app.toast("Venda excluída.", kind="success")
            self.refresh()
        except AppError as e:
            self.app.handle_error("Excluir venda", e, "Falha ao excluir a venda.")

    def clear_form(self):
        self.editing_id = None
        for e in (self.qtd_e, self.valor_e, self.vendedor_e, self.nota_e, self.obs_e):
            e.delete(0, tk.END)
        self.poste_cb.set("")
        self.metodo_cb.set("")
