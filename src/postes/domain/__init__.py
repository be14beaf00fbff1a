from .models import (
    Despesa,
    DistribuicaoLucro,
    EstoqueItem,
    Identidade,
    Movimento,
    Poste,
    ResumoVendas,
    Tenant,
    TipoDespesa,
    TipoVenda,
    Venda,
)
from .errors import (
    ApiConnectionError,
    ApiError,
    ApiTimeoutError,
    AppError,
    AuthorizationError,
    HttpError,
    NotFoundError,
    SessionExpiredError,
    ValidationError,
)
from .profit import calcular_distribuicao

__all__ = [
    "Despesa",
    "DistribuicaoLucro",
    "EstoqueItem",
    "Identidade",
    "Movimento",
    "Poste",
    "ResumoVendas",
    "Tenant",
    "TipoDespesa",
    "TipoVenda",
    "Venda",
    "ApiConnectionError",
    "ApiError",
    "ApiTimeoutError",
    "AppError",
    "AuthorizationError",
    "HttpError",
    "NotFoundError",
    "SessionExpiredError",
    "ValidationError",
    "calcular_distribuicao",
]
