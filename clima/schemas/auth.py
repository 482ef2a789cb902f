"""Request/response schemas for auth and account endpoints."""

from datetime import date, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

from clima.core.security import CORREO_MAX_LEN, PASSWORD_MAX_LEN


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


# Whitespace-only names count as empty.
NombreCompleto = Annotated[str, BeforeValidator(_strip), Field(min_length=1, max_length=255)]


class LoginRequest(BaseModel):
    """Credentials for login. Password rules are not applied here."""

    correo: str = Field(..., max_length=CORREO_MAX_LEN, description="Correo electrónico")
    contrasena: str = Field(..., max_length=PASSWORD_MAX_LEN, description="Contraseña")


class RegistroRequest(BaseModel):
    """Self-service account creation."""

    nombre_completo: NombreCompleto
    correo: str = Field(..., max_length=CORREO_MAX_LEN)
    fecha_nacimiento: str = Field(..., description="AAAA-MM-DD")
    tipo_documento_id: int
    numero_documento: str = Field(..., max_length=20)
    area_trabajo_id: int
    telefono: str | None = Field(default=None, max_length=20)
    contrasena: str = Field(..., max_length=PASSWORD_MAX_LEN)


class ActualizarPerfilRequest(BaseModel):
    """Editable profile fields (identity, document and role are not editable)."""

    nombre_completo: NombreCompleto
    fecha_nacimiento: str = Field(..., description="AAAA-MM-DD")
    area_trabajo_id: int
    telefono: str | None = Field(default=None, max_length=20)


class CambiarContrasenaRequest(BaseModel):
    contrasena_actual: str = Field(..., max_length=PASSWORD_MAX_LEN)
    contrasena_nueva: str = Field(..., max_length=PASSWORD_MAX_LEN)


class UsuarioPublico(BaseModel):
    """Account as returned to clients (no password hash)."""

    id: int
    nombre_completo: str
    correo: str
    fecha_nacimiento: date
    tipo_documento_id: int
    numero_documento: str
    area_trabajo_id: int
    telefono: str | None = None
    rol_id: int
    fecha_registro: datetime | None = None
    activo: bool

    class Config:
        from_attributes = True


class MensajeResponse(BaseModel):
    """Plain acknowledgement; also the shape of every error body."""

    mensaje: str


class LoginResponse(BaseModel):
    """Session token returned after successful login."""

    mensaje: str = Field(default="¡Bienvenido!")
    token: str = Field(..., description="Send as: Authorization: Bearer <token>")
    usuario: UsuarioPublico


class PerfilResponse(BaseModel):
    usuario: UsuarioPublico


class AuthCheckResponse(BaseModel):
    """Token check result with the decoded claims."""

    auth: bool
    mensaje: str
    datos: dict[str, Any]


class UsuariosListResponse(BaseModel):
    """Response for GET /auth/usuarios (admin only)."""

    usuarios: list[UsuarioPublico]
