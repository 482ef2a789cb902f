"""Credential store: persistence boundary for accounts, password hashes and roles."""

import logging
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clima.core.security import Rol
from clima.models import Usuario

logger = logging.getLogger(__name__)


class DuplicateAccountError(Exception):
    """Raised when an insert hits the unique constraint on correo or numero_documento."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class CredentialStore:
    """
    Account lookups and writes on one SQLAlchemy session.

    Each method is a single atomic operation (committed before returning for writes).
    correo is matched exactly, so "A@b.com" and "a@b.com" are different identities.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_active_by_correo(self, correo: str) -> Usuario | None:
        return (
            self.session.query(Usuario)
            .filter(Usuario.correo == correo, Usuario.activo.is_(True))
            .first()
        )

    def get_active_by_id(self, user_id: int) -> Usuario | None:
        return (
            self.session.query(Usuario)
            .filter(Usuario.id == user_id, Usuario.activo.is_(True))
            .first()
        )

    def get_by_id(self, user_id: int) -> Usuario | None:
        return self.session.get(Usuario, user_id)

    def exists_correo(self, correo: str) -> bool:
        return (
            self.session.query(Usuario.id).filter(Usuario.correo == correo).first()
            is not None
        )

    def exists_documento(self, numero_documento: str) -> bool:
        return (
            self.session.query(Usuario.id)
            .filter(Usuario.numero_documento == numero_documento)
            .first()
            is not None
        )

    def list_users(self) -> list[Usuario]:
        return self.session.query(Usuario).order_by(Usuario.id).all()

    def create(
        self,
        *,
        nombre_completo: str,
        correo: str,
        fecha_nacimiento: date,
        tipo_documento_id: int,
        numero_documento: str,
        area_trabajo_id: int,
        telefono: str | None,
        password_hash: str,
        rol_id: int = Rol.USUARIO,
    ) -> Usuario:
        """
        Insert a new account. The unique constraints are the real uniqueness guard:
        a concurrent registration that passed the pre-checks ends here as
        DuplicateAccountError.
        """
        usuario = Usuario(
            nombre_completo=nombre_completo,
            correo=correo,
            fecha_nacimiento=fecha_nacimiento,
            tipo_documento_id=tipo_documento_id,
            numero_documento=numero_documento,
            area_trabajo_id=area_trabajo_id,
            telefono=telefono,
            contrasena=password_hash,
            rol_id=int(rol_id),
            activo=True,
        )
        self.session.add(usuario)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.info("Account insert rejected by unique constraint")
            raise DuplicateAccountError("La cuenta ya está registrada") from e
        self.session.refresh(usuario)
        return usuario

    def update_password_hash(self, usuario: Usuario, password_hash: str) -> None:
        usuario.contrasena = password_hash
        self.session.commit()

    def update_profile(
        self,
        usuario: Usuario,
        *,
        nombre_completo: str,
        fecha_nacimiento: date,
        area_trabajo_id: int,
        telefono: str | None,
    ) -> Usuario:
        usuario.nombre_completo = nombre_completo
        usuario.fecha_nacimiento = fecha_nacimiento
        usuario.area_trabajo_id = area_trabajo_id
        usuario.telefono = telefono
        self.session.commit()
        self.session.refresh(usuario)
        return usuario

    def set_active(self, usuario: Usuario, activo: bool) -> Usuario:
        usuario.activo = activo
        self.session.commit()
        self.session.refresh(usuario)
        return usuario
