from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
import logging

from postes.domain.errors import AppError, HttpError
from postes.domain.formatters import format_currency

log = logging.getLogger(__name__)


class PostesView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Postes")

        self.postes = []
        self.editing_id = None

        tab = self.frame
        left = ttk.LabelFrame(tab, text="Cadastro de poste", width=255)
        left.pack(side="left", fill="y", padx=(0, 6), pady=8)
        left.pack_propagate(False)

        right = ttk.LabelFrame(tab, text="Postes")
        right.pack(side="right", fill="both", expand=True, pady=8)

        self.codigo_e = self._entry(left, "Código", 0)
        self.desc_e = self._entry(left, "Descrição", 1)
        self.preco_e = self._entry(left, "Preço", 2)

        btns = ttk.Frame(left)
        btns.grid(row=3, column=0, columnspan=2, sticky="ew", padx=8, pady=(6, 8))
        for c in range(3):
            btns.columnconfigure(c, weight=1)
        ttk.Button(btns, text="Salvar", command=self.on_save).grid(row=0, column=0, sticky="ew", padx=(0, 6))
        ttk.Button(btns, text="Desativar", command=self.on_deactivate).grid(row=0, column=1, sticky="ew", padx=6)
        ttk.Button(btns, text="Limpar", command=self.clear_form).grid(row=0, column=2, sticky="ew", padx=(6, 0))
        ttk.Button(left, text="Excluir", command=self.on_delete).grid(
            row=4, column=0, columnspan=2, sticky="ew", padx=8, pady=(0, 8)
        )

        cols = ("id", "codigo", "descricao", "preco", "ativo")
        self.tree = ttk.Treeview(right, columns=cols, show="headings", height=20)
        heads = {"id": "ID", "codigo": "Código", "descricao": "Descrição", "preco": "Preço", "ativo": "Ativo"}
        widths = {"id": 50, "codigo": 100, "descricao": 320, "preco": 110, "ativo": 70}
        for c in cols:
            self.tree.heading(c, text=heads[c])
            self.tree.column(c, width=widths[c], anchor="w")
        self.tree.tag_configure("inativo", foreground="#94a3b8")
        self.tree.pack(fill="both", expand=True, padx=6, pady=6)
        self.tree.bind("<Double-1>", self.on_edit)

    def _entry(self, parent, label, row):
        ttk.Label(parent, text=label).grid(row=row, column=0, sticky="w", padx=8, pady=4)
        e = ttk.Entry(parent, width=16)
        e.grid(row=row, column=1, sticky="ew", padx=8, pady=4)
        parent.columnconfigure(1, weight=1)
        return e

    def load(self):
        self.postes = self.app.postes.listar()
        for item in self.tree.get_children():
            self.tree.delete(item)
        for p in self.postes:
            self.tree.insert(
                "", "end", iid=str(p.id),
                values=(p.id, p.codigo, p.descricao, format_currency(p.preco), "Sim" if p.ativo else "Não"),
                tags=() if p.ativo else ("inativo",),
            )

    def refresh(self):
        try:
            self.load()
        except AppError as e:
            self.app.handle_error("Postes", e, "Falha ao carregar postes.")

    def _selected_id(self):
        sel = self.tree.selection()
        return int(sel[0]) if sel else None

    def on_edit(self, _evt=None):
        poste_id = self._selected_id()
        poste = next((p for p in self.postes if p.id == poste_id), None)
        if poste is None:
            return
        self.clear_form()
        self.editing_id = poste.id
        self.codigo_e.insert(0, poste.codigo)
        self.desc_e.insert(0, poste.descricao)
        self.preco_e.insert(0, f"{poste.preco:.2f}")

    def on_save(self):
        dto = {"codigo": self.codigo_e.get(), "descricao": self.desc_e.get(), "preco": self.preco_e.get()}
        try:
            if self.editing_id is None:
                self.app.postes.criar(dto)
                self.app.toast("Poste cadastrado.", kind="success")
            else:
                self.app.postes.atualizar(self.editing_id, dto)
                self.app.toast("Poste atualizado.", kind="success")
            self.clear_form()
            self.refresh()
        except AppError as e:
            self.app.handle_error("Salvar poste", e, "Falha ao salvar o poste.")

    def on_deactivate(self):
        poste_id = self._selected_id()
        if poste_id is None:
            self.app.toast("Selecione um poste.", kind="warn")
            return
        try:
            self.app.postes.desativar(poste_id)
            self.app.toast("Poste desativado.", kind="success")
            self.refresh()
        except AppError as e:
            self.app.handle_error("Desativar poste", e, "Falha ao desativar o poste.")

    def on_delete(self):
        poste_id = self._selected_id()
        if poste_id is None:
            self.app.toast("Selecione um poste.", kind="warn")
            return
        if not messagebox.askyesno("Excluir poste", f"Excluir o poste {poste_id}?", parent=self.frame):
            return
        try:
            self.app.postes.deletar(poste_id)
            self.app.toast("Poste excluído.", kind="success")
            self.refresh()
        except HttpError as e:
            if e.status == 409:
                # referenced by sales
                self.app.toast("Poste possui vendas. Use Desativar.", kind="warn")
                return
            self.app.handle_error("Excluir poste", e, "Falha ao excluir o poste.")
        except AppError as e:
            self.app.handle_error("Excluir poste", e, "Falha ao excluir o poste.")

    def clear_form(self):
        self.editing_id = None
        for e in (self.codigo_e, self.desc_e, self.preco_e):
            e.delete(0, tk.END)
        self.codigo_e.focus_set()
