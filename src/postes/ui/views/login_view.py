from __future__ import annotations

import tkinter as tk
from tkinter import ttk
import logging

from postes.domain.constants import TENANT_LABELS
from postes.domain.models import Tenant

log = logging.getLogger(__name__)


class LoginView:
    def __init__(self, parent, app):
        self.app = app
        self.frame = ttk.Frame(parent)

        self._labels = {TENANT_LABELS[t]: t for t in Tenant}
        self.tenant_var = tk.StringVar(value=TENANT_LABELS[Tenant.VERMELHO])
        self.senha_var = tk.StringVar()
        self.erro_var = tk.StringVar(value="")

        box = ttk.LabelFrame(self.frame, text="Entrar")
        box.place(relx=0.5, rely=0.4, anchor="center")

        ttk.Label(box, text="Sistema de Postes", style="Title.TLabel").grid(
            row=0, column=0, columnspan=2, padx=16, pady=(14, 10)
        )
        ttk.Label(box, text="Caminhão").grid(row=1, column=0, sticky="w", padx=16, pady=4)
        ttk.Combobox(
            box, textvariable=self.tenant_var, values=list(self._labels), state="readonly", width=26
        ).grid(row=1, column=1, sticky="ew", padx=16, pady=4)

        ttk.Label(box, text="Senha").grid(row=2, column=0, sticky="w", padx=16, pady=4)
        self.senha_e = ttk.Entry(box, textvariable=self.senha_var, show="•", width=28)
        self.senha_e.grid(row=2, column=1, sticky="ew", padx=16, pady=4)
        self.senha_e.bind("<Return>", lambda _e: self.on_submit())

        ttk.Label(box, textvariable=self.erro_var, foreground="#dc2626").grid(
            row=3, column=0, columnspan=2, padx=16, pady=(4, 0)
        )
        ttk.Button(box, text="Entrar", style="Big.TButton", command=self.on_submit).grid(
            row=4, column=0, columnspan=2, sticky="ew", padx=16, pady=(8, 14)
        )

    def selected_tenant(self) -> Tenant:
        return self._labels.get(self.tenant_var.get(), Tenant.VERMELHO)

    def on_submit(self):
        self.erro_var.set("")
        try:
            self.app.login(self.selected_tenant(), self.senha_var.get())
        except Exception as e:
            self.erro_var.set(str(e) or "Erro ao fazer login.")
            log.warning("login_failed error=%s", e)
            return
        self.senha_var.set("")

    def focus(self):
        self.senha_e.focus_set()
