"""Authenticator: registration, login (token issuance), token validation and account self-service.

Login failures are deliberately indistinguishable: an unknown correo, an inactive
account and a wrong password all raise InvalidCredentialsError with the same message.
"""

import logging
from datetime import date
from typing import TYPE_CHECKING, Any

from clima.core.security import (
    Rol,
    decode_token,
    encode_token,
    hash_password,
    verify_password,
    verify_password_dummy,
)
from clima.core.validators import (
    Violation,
    check_birth_date,
    check_document,
    check_email,
    check_password_policy,
    check_phone,
)
from clima.models import Usuario
from clima.schemas.auth import ActualizarPerfilRequest, RegistroRequest
from clima.services.credentials import CredentialStore, DuplicateAccountError

if TYPE_CHECKING:
    from clima.core.config import Settings

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "El correo o la contraseña no son correctos"
DUPLICATE_CORREO_MESSAGE = "Este correo ya está registrado"
DUPLICATE_DOCUMENTO_MESSAGE = "Este número de documento ya está registrado"
PROFILE_NOT_FOUND_MESSAGE = "No encontramos tu perfil"
USER_NOT_FOUND_MESSAGE = "Usuario no encontrado"
WRONG_CURRENT_PASSWORD_MESSAGE = "La contraseña actual no es correcta"


class AuthServiceError(Exception):
    """Base for auth failures that map to a client-visible message and HTTP status."""

    status_code = 400

    def __init__(self, message: str, codigo: str | None = None) -> None:
        self.message = message
        self.codigo = codigo
        super().__init__(message)


class InvalidCredentialsError(AuthServiceError):
    """Unknown identity or wrong password; one shape for both."""

    status_code = 401

    def __init__(self) -> None:
        super().__init__(INVALID_CREDENTIALS_MESSAGE)


class InvalidInputError(AuthServiceError):
    """A submitted field failed validation (message names the first failing rule)."""


class DuplicateIdentityError(InvalidInputError):
    """correo or numero_documento already belongs to another account."""


class ProfileNotFoundError(AuthServiceError):
    status_code = 404


def _raise_first_violation(*violations: Violation | None) -> None:
    for violation in violations:
        if violation is not None:
            raise InvalidInputError(violation.mensaje, codigo=violation.codigo)


def _normalize_phone(telefono: str | None) -> str | None:
    return telefono or None


def register(store: CredentialStore, data: RegistroRequest) -> Usuario:
    """
    Create a StandardUser account after validating every field in order
    (email, password policy, birth date against the document type, document, phone)
    and checking that neither correo nor numero_documento is taken.
    """
    _raise_first_violation(
        check_email(data.correo),
        check_password_policy(data.contrasena),
        check_birth_date(data.fecha_nacimiento, data.tipo_documento_id),
        check_document(data.numero_documento, data.tipo_documento_id),
        check_phone(data.telefono),
    )

    # Advisory pre-checks for friendly messages; the unique constraints decide races.
    if store.exists_correo(data.correo):
        raise DuplicateIdentityError(DUPLICATE_CORREO_MESSAGE, codigo="CORREO_DUPLICADO")
    if store.exists_documento(data.numero_documento):
        raise DuplicateIdentityError(DUPLICATE_DOCUMENTO_MESSAGE, codigo="DOCUMENTO_DUPLICADO")

    try:
        usuario = store.create(
            nombre_completo=data.nombre_completo.strip(),
            correo=data.correo,
            fecha_nacimiento=date.fromisoformat(data.fecha_nacimiento),
            tipo_documento_id=data.tipo_documento_id,
            numero_documento=data.numero_documento,
            area_trabajo_id=data.area_trabajo_id,
            telefono=_normalize_phone(data.telefono),
            password_hash=hash_password(data.contrasena),
            rol_id=Rol.USUARIO,
        )
    except DuplicateAccountError as e:
        raise DuplicateIdentityError(e.message, codigo="CUENTA_DUPLICADA") from e

    logger.info("Account registered", extra={"user_id": usuario.id})
    return usuario


def issue_token(usuario: Usuario, settings: "Settings") -> str:
    """Mint a session token with claims id, correo, rol_id and the configured TTL."""
    claims = {"id": usuario.id, "correo": usuario.correo, "rol_id": usuario.rol_id}
    return encode_token(
        claims,
        settings.JWT_SECRET.get_secret_value(),
        settings.JWT_EXPIRE_SECONDS,
    )


def login(
    store: CredentialStore,
    correo: str,
    contrasena: str,
    settings: "Settings",
) -> tuple[str, Usuario]:
    """Verify credentials against an active account and return (token, usuario)."""
    _raise_first_violation(check_email(correo))
    usuario = store.get_active_by_correo(correo)
    if usuario is None:
        verify_password_dummy(contrasena)
        logger.info("Login rejected", extra={"reason": "unknown_or_inactive"})
        raise InvalidCredentialsError()
    if not verify_password(contrasena, usuario.contrasena):
        logger.info("Login rejected", extra={"reason": "bad_password", "user_id": usuario.id})
        raise InvalidCredentialsError()

    token = issue_token(usuario, settings)
    logger.info("Login succeeded", extra={"user_id": usuario.id, "rol_id": usuario.rol_id})
    return token, usuario


def validate(token: str, settings: "Settings") -> dict[str, Any] | None:
    """Claims of a valid, unexpired token; None for any kind of invalid token."""
    return decode_token(token, settings.JWT_SECRET.get_secret_value())


def get_profile(store: CredentialStore, user_id: int) -> Usuario:
    usuario = store.get_active_by_id(user_id)
    if usuario is None:
        raise ProfileNotFoundError(PROFILE_NOT_FOUND_MESSAGE)
    return usuario


def update_profile(
    store: CredentialStore,
    user_id: int,
    data: ActualizarPerfilRequest,
) -> Usuario:
    """Update name, birth date, work area and phone of the caller's own account."""
    _raise_first_violation(
        check_birth_date(data.fecha_nacimiento),
        check_phone(data.telefono),
    )
    usuario = get_profile(store, user_id)
    return store.update_profile(
        usuario,
        nombre_completo=data.nombre_completo.strip(),
        fecha_nacimiento=date.fromisoformat(data.fecha_nacimiento),
        area_trabajo_id=data.area_trabajo_id,
        telefono=_normalize_phone(data.telefono),
    )


def change_password(
    store: CredentialStore,
    user_id: int,
    contrasena_actual: str,
    contrasena_nueva: str,
) -> None:
    """Replace the password hash after checking policy and the current password."""
    _raise_first_violation(check_password_policy(contrasena_nueva))
    usuario = get_profile(store, user_id)
    if not verify_password(contrasena_actual, usuario.contrasena):
        logger.info("Password change rejected", extra={"user_id": user_id})
        raise InvalidInputError(WRONG_CURRENT_PASSWORD_MESSAGE, codigo="CONTRASENA_ACTUAL")
    store.update_password_hash(usuario, hash_password(contrasena_nueva))
    logger.info("Password changed", extra={"user_id": user_id})


def set_user_active(store: CredentialStore, user_id: int, activo: bool) -> Usuario:
    """Activate or deactivate (soft delete) an account. Existing tokens stay valid until exp."""
    usuario = store.get_by_id(user_id)
    if usuario is None:
        raise ProfileNotFoundError(USER_NOT_FOUND_MESSAGE)
    usuario = store.set_active(usuario, activo)
    logger.info("Account active flag changed", extra={"user_id": user_id, "activo": activo})
    return usuario
