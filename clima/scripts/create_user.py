"""
Create an account directly in the database (e.g. the first administrator). Run from project root:
  python -m clima.scripts.create_user CORREO CONTRASENA NOMBRE DOCUMENTO FECHA_NACIMIENTO [--rol admin]
Example:
  python -m clima.scripts.create_user admin@empresa.com 'Admin2024!' "Ana Pérez" 1012345678 1990-04-12 --rol admin
"""
import argparse
import logging
import sys
from datetime import date

from clima.core.database import SessionLocal
from clima.core.security import Rol, hash_password
from clima.core.validators import check_birth_date, check_document, check_email, check_password_policy
from clima.services.credentials import CredentialStore, DuplicateAccountError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

ROLES = {"admin": Rol.ADMINISTRADOR, "usuario": Rol.USUARIO}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Clima account (bypasses self-registration).")
    parser.add_argument("correo", help="Correo (identity key, case-sensitive)")
    parser.add_argument("contrasena", help="Password meeting the password policy")
    parser.add_argument("nombre", help="Nombre completo")
    parser.add_argument("documento", help="Número de documento")
    parser.add_argument("fecha_nacimiento", help="AAAA-MM-DD")
    parser.add_argument("--tipo-documento", type=int, default=2, help="1=TI, 2=CC, 3=CE, 4=NIT")
    parser.add_argument("--area", type=int, default=1, help="area_trabajo_id")
    parser.add_argument("--rol", default="usuario", choices=sorted(ROLES))
    args = parser.parse_args(argv)

    for violation in (
        check_email(args.correo),
        check_password_policy(args.contrasena),
        check_birth_date(args.fecha_nacimiento, args.tipo_documento),
        check_document(args.documento, args.tipo_documento),
    ):
        if violation is not None:
            print(violation.mensaje, file=sys.stderr)
            return 1

    db = SessionLocal()
    try:
        store = CredentialStore(db)
        if store.exists_correo(args.correo):
            print(f"Account '{args.correo}' already exists.", file=sys.stderr)
            return 1
        usuario = store.create(
            nombre_completo=args.nombre.strip(),
            correo=args.correo,
            fecha_nacimiento=date.fromisoformat(args.fecha_nacimiento),
            tipo_documento_id=args.tipo_documento,
            numero_documento=args.documento,
            area_trabajo_id=args.area,
            telefono=None,
            password_hash=hash_password(args.contrasena),
            rol_id=ROLES[args.rol],
        )
        logger.info("Created account id=%s rol=%s", usuario.id, args.rol)
        return 0
    except DuplicateAccountError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
