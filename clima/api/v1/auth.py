"""Login, registration, profile endpoints and the auth dependencies (get_current_claims, require_role)."""

import logging
from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from clima.core.config import Settings, get_settings
from clima.core.database import get_db
from clima.core.security import Rol, extract_bearer_token, role_allows
from clima.schemas.auth import (
    ActualizarPerfilRequest,
    CambiarContrasenaRequest,
    LoginRequest,
    LoginResponse,
    MensajeResponse,
    PerfilResponse,
    RegistroRequest,
    UsuarioPublico,
    UsuariosListResponse,
)
from clima.services import auth as auth_service
from clima.services.auth import AuthServiceError
from clima.services.credentials import CredentialStore

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_AUTHENTICATED_MESSAGE = "Por favor, inicia sesión para continuar"
INVALID_TOKEN_MESSAGE = "Tu sesión ha expirado. Por favor, inicia sesión de nuevo"
FORBIDDEN_MESSAGE = "No tiene permisos para acceder a esta información"

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _http_error(e: AuthServiceError) -> HTTPException:
    headers = _BEARER_CHALLENGE if e.status_code == status.HTTP_401_UNAUTHORIZED else None
    return HTTPException(status_code=e.status_code, detail=e.message, headers=headers)


def get_credential_store(db: Annotated[Session, Depends(get_db)]) -> CredentialStore:
    return CredentialStore(db)


def get_current_claims(
    settings: Annotated[Settings, Depends(get_settings)],
    authorization: Annotated[str | None, Header()] = None,
) -> dict[str, Any]:
    """
    Dependency: claims of the token in the Authorization header. Raises 401 if the header
    is missing or the token is invalid in any way (malformed, bad signature, expired).
    Never touches the database.
    """
    token = extract_bearer_token(authorization, strict=settings.AUTH_STRICT_BEARER)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=NOT_AUTHENTICATED_MESSAGE,
            headers=_BEARER_CHALLENGE,
        )
    claims = auth_service.validate(token, settings)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_TOKEN_MESSAGE,
            headers=_BEARER_CHALLENGE,
        )
    return claims


def get_current_user_id(
    claims: Annotated[dict[str, Any], Depends(get_current_claims)],
) -> int:
    """Dependency: the id claim of a valid token."""
    user_id = claims.get("id")
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_TOKEN_MESSAGE,
            headers=_BEARER_CHALLENGE,
        )
    return user_id


def require_role(required_role: Rol) -> Callable[..., dict[str, Any]]:
    """
    Build a dependency that lets the request through only when rol_id equals
    required_role exactly. Raises 401 without a valid token, 403 for another role.
    """

    def dependency(
        claims: Annotated[dict[str, Any], Depends(get_current_claims)],
    ) -> dict[str, Any]:
        if not role_allows(claims, required_role):
            logger.info(
                "Access denied",
                extra={"user_id": claims.get("id"), "required_role": int(required_role)},
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=FORBIDDEN_MESSAGE,
            )
        return claims

    return dependency


require_admin = require_role(Rol.ADMINISTRADOR)


@router.post("/registro", response_model=MensajeResponse, status_code=status.HTTP_201_CREATED)
def registro(
    body: RegistroRequest,
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> MensajeResponse:
    """Create an employee account (role usuario)."""
    try:
        auth_service.register(store, body)
    except AuthServiceError as e:
        raise _http_error(e) from e
    return MensajeResponse(mensaje="¡Cuenta creada exitosamente!")


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> LoginResponse:
    """
    Authenticate with correo and contrasena; returns a session token and the account.
    Include the token in the Authorization header as: Bearer <token>
    """
    try:
        token, usuario = auth_service.login(store, body.correo, body.contrasena, settings)
    except AuthServiceError as e:
        raise _http_error(e) from e
    return LoginResponse(
        mensaje="¡Bienvenido!",
        token=token,
        usuario=UsuarioPublico.model_validate(usuario),
    )


@router.get("/perfil", response_model=PerfilResponse)
def perfil(
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> PerfilResponse:
    try:
        usuario = auth_service.get_profile(store, user_id)
    except AuthServiceError as e:
        raise _http_error(e) from e
    return PerfilResponse(usuario=UsuarioPublico.model_validate(usuario))


@router.put("/actualizar-perfil", response_model=MensajeResponse)
def actualizar_perfil(
    body: ActualizarPerfilRequest,
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> MensajeResponse:
    try:
        auth_service.update_profile(store, user_id, body)
    except AuthServiceError as e:
        raise _http_error(e) from e
    return MensajeResponse(mensaje="Perfil actualizado exitosamente")


@router.put("/cambiar-contrasena", response_model=MensajeResponse)
def cambiar_contrasena(
    body: CambiarContrasenaRequest,
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> MensajeResponse:
    """Change the caller's password; the current password must be supplied."""
    try:
        auth_service.change_password(store, user_id, body.contrasena_actual, body.contrasena_nueva)
    except AuthServiceError as e:
        raise _http_error(e) from e
    return MensajeResponse(mensaje="Contraseña actualizada exitosamente")


@router.get("/usuarios", response_model=UsuariosListResponse)
def list_usuarios(
    _admin: Annotated[dict[str, Any], Depends(require_admin)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> UsuariosListResponse:
    """List all accounts, active or not (admin only)."""
    return UsuariosListResponse(
        usuarios=[UsuarioPublico.model_validate(u) for u in store.list_users()]
    )


def _set_active(
    user_id: int,
    activo: bool,
    admin: dict[str, Any],
    store: CredentialStore,
) -> MensajeResponse:
    if not activo and admin.get("id") == user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No puedes desactivar tu propia cuenta",
        )
    try:
        auth_service.set_user_active(store, user_id, activo)
    except AuthServiceError as e:
        raise _http_error(e) from e
    return MensajeResponse(
        mensaje="Usuario activado exitosamente" if activo else "Usuario desactivado exitosamente"
    )


@router.put("/usuarios/{user_id}/activar", response_model=MensajeResponse)
def activar_usuario(
    user_id: int,
    admin: Annotated[dict[str, Any], Depends(require_admin)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> MensajeResponse:
    return _set_active(user_id, True, admin, store)


@router.put("/usuarios/{user_id}/desactivar", response_model=MensajeResponse)
def desactivar_usuario(
    user_id: int,
    admin: Annotated[dict[str, Any], Depends(require_admin)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> MensajeResponse:
    """Soft-delete an account: login is refused, issued tokens expire on their own."""
    return _set_active(user_id, False, admin, store)
