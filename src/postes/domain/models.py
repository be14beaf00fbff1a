from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Tenant(str, Enum):
    VERMELHO = "vermelho"
    BRANCO = "branco"
    JEFFERSON = "jefferson"


class TipoVenda(str, Enum):
    NORMAL = "V"
    EXTRA = "E"
    LOJA = "L"


class TipoDespesa(str, Enum):
    FUNCIONARIO = "FUNCIONARIO"
    OUTRAS = "OUTRAS"


@dataclass(frozen=True)
class Poste:
    id: int
    codigo: str
    descricao: str
    preco: float
    ativo: bool = True


@dataclass(frozen=True)
class Venda:
    id: int
    tipo_venda: str
    data_venda: Optional[str]
    poste_id: Optional[int] = None
    quantidade: Optional[int] = None
    valor_venda: float = 0.0
    valor_extra: float = 0.0
    frete_eletrons: float = 0.0
    metodo_pagamento: Optional[str] = None
    vendedor: Optional[str] = None
    numero_nota: Optional[str] = None
    observacoes: Optional[str] = None
    codigo_poste: Optional[str] = None
    descricao_poste: Optional[str] = None


@dataclass(frozen=True)
class Despesa:
    id: int
    data_despesa: Optional[str]
    descricao: str
    valor: float
    tipo: str


@dataclass(frozen=True)
class EstoqueItem:
    poste_id: int
    codigo_poste: str
    descricao_poste: str
    preco_poste: float
    quantidade_atual: int
    data_atualizacao: Optional[str] = None


@dataclass(frozen=True)
class Movimento:
    id: int
    poste_id: Optional[int]
    codigo_poste: Optional[str]
    tipo_movimento: str
    quantidade: int
    data_movimento: Optional[str]
    observacao: Optional[str] = None


@dataclass(frozen=True)
class ResumoVendas:
    total_venda_postes: float = 0.0
    valor_total_vendas: float = 0.0
    total_frete_eletrons: float = 0.0
    valor_total_extras: float = 0.0
    total_vendas_e: int = 0
    total_vendas_v: int = 0
    total_vendas_l: int = 0


@dataclass(frozen=True)
class Identidade:
    tenant: Tenant
    display_name: str
    login_em: datetime


@dataclass(frozen=True)
class DistribuicaoLucro:
    tenant: Tenant
    total_venda_postes: float
    valor_total_vendas: float
    valor_total_extras: float
    total_frete_eletrons: float
    total_contribuicoes_extras: float
    despesas_funcionario: float
    outras_despesas: float
    lucro_vendas_normais: float
    lucro_total: float
    parte_cicero: Optional[float]
    parte_gilberto: float
    parte_jefferson: float
    total_vendas_e: int = 0
    total_vendas_v: int = 0
    total_vendas_l: int = 0
    socios: tuple[tuple[str, float], ...] = ()
