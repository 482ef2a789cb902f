"""Tests for clima.services.auth against an in-memory database: register, login, validate, self-service."""

import unittest
from unittest.mock import MagicMock

from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from clima.core.config import Settings
from clima.core.security import Rol, decode_token, verify_password
from clima.schemas.auth import ActualizarPerfilRequest
from clima.services import auth as auth_service
from clima.services.auth import (
    INVALID_CREDENTIALS_MESSAGE,
    DuplicateIdentityError,
    InvalidCredentialsError,
    InvalidInputError,
    ProfileNotFoundError,
)
from clima.services.credentials import CredentialStore
from support import STRONG_PASSWORD, make_session_factory, registro

SECRET = "clima-service-test-secret-0123456789abcdef"


def _settings(**overrides: object) -> Settings:
    values = {"JWT_SECRET": SECRET, "JWT_EXPIRE_SECONDS": 3600}
    values.update(overrides)
    return Settings(**values)


class _StoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.session = make_session_factory()()
        self.store = CredentialStore(self.session)
        self.settings = _settings()

    def tearDown(self) -> None:
        self.session.close()


class TestRegister(_StoreTestCase):
    def test_creates_standard_user_with_hashed_password(self) -> None:
        usuario = auth_service.register(self.store, registro())
        self.assertIsNotNone(usuario.id)
        self.assertEqual(usuario.rol_id, Rol.USUARIO)
        self.assertTrue(usuario.activo)
        self.assertNotEqual(usuario.contrasena, STRONG_PASSWORD)
        self.assertTrue(verify_password(STRONG_PASSWORD, usuario.contrasena))

    def test_duplicate_correo_is_reported_specifically(self) -> None:
        auth_service.register(self.store, registro())
        with self.assertRaises(DuplicateIdentityError) as ctx:
            auth_service.register(self.store, registro(numero_documento="99887766"))
        self.assertEqual(ctx.exception.message, "Este correo ya está registrado")
        self.assertEqual(ctx.exception.status_code, 400)

    def test_duplicate_documento(self) -> None:
        auth_service.register(self.store, registro())
        with self.assertRaises(DuplicateIdentityError) as ctx:
            auth_service.register(self.store, registro(correo="otra@b.com"))
        self.assertEqual(ctx.exception.message, "Este número de documento ya está registrado")

    def test_correo_is_case_sensitive(self) -> None:
        auth_service.register(self.store, registro())
        other = auth_service.register(
            self.store, registro(correo="A@b.com", numero_documento="99887766")
        )
        self.assertEqual(other.correo, "A@b.com")

    def test_weak_password_rejected_with_first_failing_rule(self) -> None:
        with self.assertRaises(InvalidInputError) as ctx:
            auth_service.register(self.store, registro(contrasena="abcdefgh"))
        self.assertEqual(ctx.exception.codigo, "CONTRASENA_MAYUSCULA")
        self.assertFalse(self.store.exists_correo("a@b.com"))

    def test_email_checked_before_password(self) -> None:
        with self.assertRaises(InvalidInputError) as ctx:
            auth_service.register(self.store, registro(correo="no-es-correo", contrasena="x"))
        self.assertEqual(ctx.exception.codigo, "CORREO_INVALIDO")

    def test_age_band_follows_document_type(self) -> None:
        with self.assertRaises(InvalidInputError) as ctx:
            auth_service.register(self.store, registro(tipo_documento_id=1))
        self.assertEqual(ctx.exception.codigo, "EDAD_INVALIDA")

    def test_unique_constraint_closes_the_precheck_race(self) -> None:
        class _RacyStore(CredentialStore):
            def exists_correo(self, correo: str) -> bool:
                return False

            def exists_documento(self, numero_documento: str) -> bool:
                return False

        racy = _RacyStore(self.session)
        auth_service.register(racy, registro())
        with self.assertRaises(DuplicateIdentityError) as ctx:
            auth_service.register(racy, registro())
        self.assertEqual(ctx.exception.codigo, "CUENTA_DUPLICADA")
        self.assertEqual(len(self.store.list_users()), 1)

    def test_empty_phone_is_stored_as_null(self) -> None:
        usuario = auth_service.register(self.store, registro(telefono=""))
        self.assertIsNone(usuario.telefono)


class TestLogin(_StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.usuario = auth_service.register(self.store, registro())

    def test_success_issues_token_with_identity_claims(self) -> None:
        token, usuario = auth_service.login(self.store, "a@b.com", STRONG_PASSWORD, self.settings)
        self.assertEqual(usuario.id, self.usuario.id)
        claims = decode_token(token, SECRET)
        self.assertEqual(claims["id"], self.usuario.id)
        self.assertEqual(claims["correo"], "a@b.com")
        self.assertEqual(claims["rol_id"], 2)
        self.assertEqual(claims["exp"] - claims["iat"], 3600)

    def test_ttl_comes_from_settings(self) -> None:
        token, _ = auth_service.login(
            self.store, "a@b.com", STRONG_PASSWORD, _settings(JWT_EXPIRE_SECONDS=120)
        )
        claims = decode_token(token, SECRET)
        self.assertEqual(claims["exp"] - claims["iat"], 120)

    def test_unknown_identity_and_wrong_password_look_identical(self) -> None:
        with self.assertRaises(InvalidCredentialsError) as unknown:
            auth_service.login(self.store, "nonexistent@x.com", "anything", self.settings)
        with self.assertRaises(InvalidCredentialsError) as wrong:
            auth_service.login(self.store, "a@b.com", "wrong", self.settings)
        self.assertEqual(unknown.exception.message, wrong.exception.message)
        self.assertEqual(unknown.exception.status_code, wrong.exception.status_code)
        self.assertEqual(unknown.exception.message, INVALID_CREDENTIALS_MESSAGE)
        self.assertEqual(unknown.exception.status_code, 401)

    def test_identity_match_is_exact(self) -> None:
        with self.assertRaises(InvalidCredentialsError):
            auth_service.login(self.store, "A@B.com", STRONG_PASSWORD, self.settings)

    def test_inactive_account_is_rejected_generically(self) -> None:
        auth_service.set_user_active(self.store, self.usuario.id, False)
        with self.assertRaises(InvalidCredentialsError) as ctx:
            auth_service.login(self.store, "a@b.com", STRONG_PASSWORD, self.settings)
        self.assertEqual(ctx.exception.message, INVALID_CREDENTIALS_MESSAGE)

    def test_malformed_correo_is_input_error(self) -> None:
        with self.assertRaises(InvalidInputError):
            auth_service.login(self.store, "sin-arroba", STRONG_PASSWORD, self.settings)

    def test_storage_failure_is_not_invalid_credentials(self) -> None:
        store = MagicMock()
        store.get_active_by_correo.side_effect = OperationalError("SELECT", {}, Exception("down"))
        with self.assertRaises(OperationalError):
            auth_service.login(store, "a@b.com", STRONG_PASSWORD, self.settings)


class TestValidate(_StoreTestCase):
    def test_valid_token_returns_claims(self) -> None:
        auth_service.register(self.store, registro())
        token, _ = auth_service.login(self.store, "a@b.com", STRONG_PASSWORD, self.settings)
        claims = auth_service.validate(token, self.settings)
        self.assertEqual(claims["correo"], "a@b.com")

    def test_token_signed_with_other_secret_is_rejected(self) -> None:
        auth_service.register(self.store, registro())
        token, _ = auth_service.login(self.store, "a@b.com", STRONG_PASSWORD, self.settings)
        other = _settings(JWT_SECRET="another-secret-for-tests-0123456789abcdef")
        self.assertIsNone(auth_service.validate(token, other))


class TestSelfService(_StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.usuario = auth_service.register(self.store, registro())

    def test_change_password(self) -> None:
        auth_service.change_password(self.store, self.usuario.id, STRONG_PASSWORD, "Nueva5678#")
        with self.assertRaises(InvalidCredentialsError):
            auth_service.login(self.store, "a@b.com", STRONG_PASSWORD, self.settings)
        token, _ = auth_service.login(self.store, "a@b.com", "Nueva5678#", self.settings)
        self.assertIsNotNone(decode_token(token, SECRET))

    def test_change_password_requires_current_password(self) -> None:
        with self.assertRaises(InvalidInputError) as ctx:
            auth_service.change_password(self.store, self.usuario.id, "Wrong123!", "Nueva5678#")
        self.assertEqual(ctx.exception.message, "La contraseña actual no es correcta")

    def test_change_password_applies_policy(self) -> None:
        with self.assertRaises(InvalidInputError) as ctx:
            auth_service.change_password(self.store, self.usuario.id, STRONG_PASSWORD, "corta")
        self.assertEqual(ctx.exception.codigo, "CONTRASENA_LONGITUD")

    def test_update_profile(self) -> None:
        body = ActualizarPerfilRequest(
            nombre_completo="Ana María Pérez",
            fecha_nacimiento="1991-01-20",
            area_trabajo_id=3,
            telefono="3109876543",
        )
        usuario = auth_service.update_profile(self.store, self.usuario.id, body)
        self.assertEqual(usuario.nombre_completo, "Ana María Pérez")
        self.assertEqual(usuario.area_trabajo_id, 3)
        self.assertEqual(usuario.fecha_nacimiento.isoformat(), "1991-01-20")

    def test_update_profile_rejects_bad_phone(self) -> None:
        body = ActualizarPerfilRequest(
            nombre_completo="Ana", fecha_nacimiento="1990-05-10", area_trabajo_id=1, telefono="123"
        )
        with self.assertRaises(InvalidInputError):
            auth_service.update_profile(self.store, self.usuario.id, body)

    def test_update_profile_rejects_blank_name(self) -> None:
        with self.assertRaises(ValidationError):
            ActualizarPerfilRequest(
                nombre_completo="   ", fecha_nacimiento="1990-05-10", area_trabajo_id=1
            )
        self.assertEqual(self.store.get_by_id(self.usuario.id).nombre_completo, "Ana Pérez")

    def test_profile_of_inactive_or_unknown_account(self) -> None:
        with self.assertRaises(ProfileNotFoundError):
            auth_service.get_profile(self.store, 9999)
        auth_service.set_user_active(self.store, self.usuario.id, False)
        with self.assertRaises(ProfileNotFoundError):
            auth_service.get_profile(self.store, self.usuario.id)

    def test_reactivation(self) -> None:
        auth_service.set_user_active(self.store, self.usuario.id, False)
        auth_service.set_user_active(self.store, self.usuario.id, True)
        token, _ = auth_service.login(self.store, "a@b.com", STRONG_PASSWORD, self.settings)
        self.assertIsNotNone(token)

    def test_set_active_unknown_user(self) -> None:
        with self.assertRaises(ProfileNotFoundError):
            auth_service.set_user_active(self.store, 9999, False)


if __name__ == "__main__":
    unittest.main()
