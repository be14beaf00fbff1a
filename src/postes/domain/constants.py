from __future__ import annotations

from .models import Tenant

METODOS_PAGAMENTO: dict[str, str] = {
    "PIX_JEFF": "Pix do Jeff",
    "PIX_ELETRONS": "Pix Eletrons",
    "DINHEIRO": "Dinheiro",
    "CARTAO": "Cartão",
    "CHEQUE": "Cheque",
    "BOLETO": "Boleto",
}

TIPOS_VENDA: dict[str, str] = {
    "V": "Venda Normal",
    "E": "Extra",
    "L": "Venda Loja",
}

TIPOS_DESPESA: dict[str, str] = {
    "FUNCIONARIO": "Funcionário",
    "OUTRAS": "Outras",
}

TIPOS_MOVIMENTO: dict[str, str] = {
    "ENTRADA": "Entrada",
    "SAIDA": "Saída",
    "VENDA": "Venda",
    "AJUSTE": "Ajuste",
    "TRANSFERENCIA": "Transferência",
}

TENANT_LABELS: dict[Tenant, str] = {
    Tenant.VERMELHO: "Caminhão Vermelho",
    Tenant.BRANCO: "Caminhão Branco",
    Tenant.JEFFERSON: "Jefferson (Gerente)",
}

TENANT_COLORS: dict[Tenant, str] = {
    Tenant.VERMELHO: "#dc2626",
    Tenant.BRANCO: "#1d4ed8",
    Tenant.JEFFERSON: "#059669",
}

# stock at or below this is flagged as low on the manager dashboard
ESTOQUE_BAIXO_LIMITE = 5
