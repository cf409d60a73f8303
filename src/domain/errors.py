"""
Domain Error Constructors

Every expected failure carries a stable code; the API layer owns the
code -> HTTP status mapping (src/api/error.py).
"""

from typing import Any, Dict, List, Optional

from src.libs.result import Error

FieldError = Dict[str, str]


def not_found(entity: str) -> Error:
    return Error(f"{entity.upper()}_NOT_FOUND", f"{entity.capitalize()} not found")


def forbidden(message: str) -> Error:
    return Error("FORBIDDEN", message)


def validation_failed(errors: List[FieldError]) -> Error:
    summary = "; ".join(e["message"] for e in errors) or "Validation failed"
    return Error("VALIDATION_FAILED", summary, details=errors)


def invalid_transition(
    from_status: Any, to_status: Any, message: Optional[str] = None
) -> Error:
    from_value = getattr(from_status, "value", from_status)
    to_value = getattr(to_status, "value", to_status)
    return Error(
        "INVALID_TRANSITION",
        message or f"Invalid status transition from {from_value} to {to_value}",
        details={"from": from_value, "to": to_value},
    )


def conflict(entity: str) -> Error:
    return Error(
        "CONFLICT",
        f"{entity.capitalize()} was modified concurrently, reload and retry",
    )


def field_error(field: str, message: str) -> FieldError:
    return {"field": field, "message": message}
