"""Pydantic request/response schemas."""

from clima.schemas.auth import (
    ActualizarPerfilRequest,
    AuthCheckResponse,
    CambiarContrasenaRequest,
    LoginRequest,
    LoginResponse,
    MensajeResponse,
    PerfilResponse,
    RegistroRequest,
    UsuarioPublico,
    UsuariosListResponse,
)
from clima.schemas.health import HealthResponse

__all__ = [
    "ActualizarPerfilRequest",
    "AuthCheckResponse",
    "CambiarContrasenaRequest",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MensajeResponse",
    "PerfilResponse",
    "RegistroRequest",
    "UsuarioPublico",
    "UsuariosListResponse",
]
