"""ORM model for employee accounts (credentials, role and profile)."""

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, func, true

from clima.models.base import Base


class Usuario(Base):
    """
    Account used for login and role-based access control.

    correo is the identity key: unique and matched exactly (case-sensitive).
    contrasena holds the bcrypt hash, never the plain password.
    rol_id: 1 = administrador, 2 = usuario.
    Accounts are never deleted; activo=False disables login.
    """

    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nombre_completo = Column(String(255), nullable=False)
    correo = Column(String(255), nullable=False, unique=True, index=True)
    fecha_nacimiento = Column(Date, nullable=False)
    tipo_documento_id = Column(Integer, nullable=False)
    numero_documento = Column(String(20), nullable=False, unique=True, index=True)
    area_trabajo_id = Column(Integer, nullable=False)
    telefono = Column(String(20), nullable=True)
    contrasena = Column(String(255), nullable=False)
    rol_id = Column(Integer, nullable=False, default=2, server_default="2")
    fecha_registro = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    activo = Column(Boolean, nullable=False, default=True, server_default=true())
