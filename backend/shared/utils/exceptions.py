"""
HTTP errors raised by services and dependencies.

Each error logs itself when constructed and reaches the client as
`{"detail": "<mensagem em português>"}` with its status code. Clients tell
failures apart by status only.

    raise NotFoundError("Produto", product_id, establishment_id=est.id)
    raise ConflictError("Slug já em uso")
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """Base error. Subclasses set `status_code` and `log_level`."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    log_level = "warning"
    headers: dict[str, str] | None = None

    def __init__(self, detail: str, **log_context: Any):
        getattr(logger, self.log_level)(detail, status_code=self.status_code, **log_context)
        super().__init__(status_code=self.status_code, detail=detail, headers=self.headers)


# 404

class NotFoundError(AppException):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        label = entity if entity_id is None else f"{entity} {entity_id}"
        super().__init__(f"{label} não encontrado(a)", entity=entity, entity_id=entity_id, **log_context)


class TenantNotFoundError(AppException):
    """No establishment matches the slug of the request. Common, logged at INFO."""

    status_code = status.HTTP_404_NOT_FOUND
    log_level = "info"

    def __init__(self, slug: str, **log_context: Any):
        super().__init__("Estabelecimento não encontrado", slug=slug, **log_context)


# 400

class ValidationError(AppException):
    status_code = status.HTTP_400_BAD_REQUEST


class TenantHeaderMissingError(ValidationError):
    def __init__(self, path: str, **log_context: Any):
        super().__init__("Identificador do estabelecimento obrigatório", path=path, **log_context)


class PlanLimitError(ValidationError):
    """The establishment's plan does not allow more of something."""

    def __init__(self, limit_name: str, limit: int, **log_context: Any):
        super().__init__(
            f"Limite do plano atingido: {limit_name} (máximo {limit})",
            limit_name=limit_name,
            limit=limit,
            **log_context,
        )


# 401 / 403

class UnauthorizedError(AppException):
    """Missing, invalid or expired credentials, or a suspended establishment."""

    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}

    def __init__(self, detail: str = "Não autenticado", **log_context: Any):
        super().__init__(detail, **log_context)


class ForbiddenError(AppException):
    """
    Authenticated but not allowed, e.g. a token of another establishment:

        raise ForbiddenError("acessar outro estabelecimento")
    """

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, action: str | None = None, **log_context: Any):
        detail = f"Não autorizado a {action}" if action else "Acesso negado"
        super().__init__(detail, action=action, **log_context)


# 409

class ConflictError(AppException):
    """Uniqueness violations: slugs, plan codes, e-mails."""

    status_code = status.HTTP_409_CONFLICT


# 500

class DatabaseError(AppException):
    log_level = "error"

    def __init__(self, operation: str, **log_context: Any):
        super().__init__(
            f"Erro de banco de dados ao {operation}. Tente novamente.",
            operation=operation,
            **log_context,
        )
