"""Shared builders for tests: an isolated SQLite database and registration payloads."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clima.models import Base
from clima.schemas.auth import RegistroRequest

STRONG_PASSWORD = "Test1234!"


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database with all tables; every session shares one connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def registro_payload(**overrides: object) -> dict:
    """Valid registration body; override any field."""
    data = {
        "nombre_completo": "Ana Pérez",
        "correo": "a@b.com",
        "fecha_nacimiento": "1990-05-10",
        "tipo_documento_id": 2,
        "numero_documento": "1012345678",
        "area_trabajo_id": 1,
        "telefono": "3001234567",
        "contrasena": STRONG_PASSWORD,
    }
    data.update(overrides)
    return data


def registro(**overrides: object) -> RegistroRequest:
    return RegistroRequest(**registro_payload(**overrides))
