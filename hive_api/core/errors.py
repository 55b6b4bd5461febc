# hive_api/core/errors.py
from __future__ import annotations

from typing import Any, Iterable, Optional


class DomainError(Exception):
    """Erro de negócio traduzido para resposta HTTP estruturada."""

    kind = "DomainError"
    status_code = 400

    def __init__(self, message: str, errors: Optional[list[dict[str, str]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": False, "kind": self.kind, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(DomainError):
    kind = "ValidationError"
    status_code = 422


class Unauthorized(DomainError):
    kind = "Unauthorized"
    status_code = 401


class Forbidden(DomainError):
    kind = "Forbidden"
    status_code = 403


class NotFound(DomainError):
    kind = "NotFound"
    status_code = 404


class PolicyViolation(DomainError):
    kind = "PolicyViolation"
    status_code = 409


class InvalidState(DomainError):
    kind = "InvalidState"
    status_code = 409


class Conflict(DomainError):
    kind = "Conflict"
    status_code = 409


class ExternalServiceError(DomainError):
    kind = "ExternalServiceError"
    status_code = 502


def field_error(field: str, message: str) -> dict[str, str]:
    return {"field": field, "message": message}


def errors_from_pydantic(errors: Iterable[dict[str, Any]]) -> list[dict[str, str]]:
    """Converte a lista de erros do pydantic/FastAPI em [{field, message}].

    O prefixo de localização ("body", "query", ...) é descartado.
    """
    out: list[dict[str, str]] = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        out.append(field_error(".".join(loc) or "__root__", err.get("msg", "inválido")))
    return out
