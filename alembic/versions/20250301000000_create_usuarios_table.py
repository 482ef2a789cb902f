"""Create usuarios table (credentials, role, profile).

Revision ID: 20250301000000
Revises:
Create Date: 2025-03-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20250301000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "usuarios",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nombre_completo", sa.String(length=255), nullable=False),
        sa.Column("correo", sa.String(length=255), nullable=False),
        sa.Column("fecha_nacimiento", sa.Date(), nullable=False),
        sa.Column("tipo_documento_id", sa.Integer(), nullable=False),
        sa.Column("numero_documento", sa.String(length=20), nullable=False),
        sa.Column("area_trabajo_id", sa.Integer(), nullable=False),
        sa.Column("telefono", sa.String(length=20), nullable=True),
        sa.Column("contrasena", sa.String(length=255), nullable=False),
        sa.Column("rol_id", sa.Integer(), nullable=False, server_default="2"),
        sa.Column(
            "fecha_registro",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )
    # Unique indexes back the identity-key and document uniqueness invariants.
    op.create_index(op.f("ix_usuarios_correo"), "usuarios", ["correo"], unique=True)
    op.create_index(
        op.f("ix_usuarios_numero_documento"),
        "usuarios",
        ["numero_documento"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_usuarios_numero_documento"), table_name="usuarios")
    op.drop_index(op.f("ix_usuarios_correo"), table_name="usuarios")
    op.drop_table("usuarios")
