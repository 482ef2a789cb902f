"""Input validation for account data: password policy, email, birth date, identity document, phone.

Each check returns None when the value is acceptable, or a Violation carrying a stable
code and the user-facing message (Spanish, shown as-is by the API).
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import NamedTuple

from email_validator import EmailNotValidError, validate_email


class Violation(NamedTuple):
    """First failing rule for a value."""

    codigo: str
    mensaje: str


# Password policy, checked in this order; the first failing rule is reported.
PASSWORD_MIN_LENGTH = 8
SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'

_UPPERCASE = re.compile(r"[A-Z]")
_LOWERCASE = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")

_PASSWORD_RULES: tuple[tuple[Callable[[str], bool], Violation], ...] = (
    (
        lambda p: bool(p),
        Violation("CONTRASENA_VACIA", "Por favor ingresa una contraseña"),
    ),
    (
        lambda p: len(p) >= PASSWORD_MIN_LENGTH,
        Violation("CONTRASENA_LONGITUD", "La contraseña debe tener al menos 8 caracteres"),
    ),
    (
        lambda p: _UPPERCASE.search(p) is not None,
        Violation("CONTRASENA_MAYUSCULA", "La contraseña debe incluir al menos una letra mayúscula"),
    ),
    (
        lambda p: _LOWERCASE.search(p) is not None,
        Violation("CONTRASENA_MINUSCULA", "La contraseña debe incluir al menos una letra minúscula"),
    ),
    (
        lambda p: _DIGIT.search(p) is not None,
        Violation("CONTRASENA_NUMERO", "La contraseña debe incluir al menos un número"),
    ),
    (
        lambda p: _SPECIAL.search(p) is not None,
        Violation(
            "CONTRASENA_ESPECIAL",
            "La contraseña debe incluir al menos un carácter especial (" + SPECIAL_CHARACTERS + ")",
        ),
    ),
)


def check_password_policy(plain_password: str | None) -> Violation | None:
    """Return the first password rule that plain_password breaks, or None if all pass."""
    value = plain_password or ""
    for passes, violation in _PASSWORD_RULES:
        if not passes(value):
            return violation
    return None


def check_email(correo: str | None) -> Violation | None:
    if not correo:
        return Violation("CORREO_VACIO", "Por favor ingresa tu correo electrónico")
    try:
        validate_email(correo, check_deliverability=False)
    except EmailNotValidError:
        return Violation("CORREO_INVALIDO", "El formato del correo electrónico no es válido")
    return None


@dataclass(frozen=True)
class DocumentType:
    """Identity document type: number format and the age band it is issued for."""

    nombre: str
    patron: re.Pattern[str]
    descripcion: str
    edad_min: int
    edad_max: int | None = None


MIN_AGE_TI = 14
MAX_AGE_TI = 17
MIN_AGE_ADULT = 18
MAX_AGE = 100

DOCUMENT_TYPES: dict[int, DocumentType] = {
    1: DocumentType(
        "Tarjeta de Identidad", re.compile(r"[0-9]{10}"), "10 dígitos exactos", MIN_AGE_TI, MAX_AGE_TI
    ),
    2: DocumentType(
        "Cédula de Ciudadanía", re.compile(r"[0-9]{6,10}"), "entre 6 y 10 dígitos", MIN_AGE_ADULT
    ),
    3: DocumentType(
        "Cédula de Extranjería", re.compile(r"[0-9]{6,12}"), "entre 6 y 12 dígitos", MIN_AGE_ADULT
    ),
    4: DocumentType(
        "NIT",
        re.compile(r"[0-9]{9}-[0-9]"),
        "9 dígitos, guión y dígito de verificación",
        MIN_AGE_ADULT,
    ),
}

_INVALID_DOCUMENT_TYPE = Violation(
    "TIPO_DOCUMENTO_INVALIDO", "El tipo de documento seleccionado no es válido"
)


def _age_on(birth: date, today: date) -> int:
    years = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        years -= 1
    return years


def check_birth_date(
    fecha: str | None,
    tipo_documento_id: int | None = None,
    today: date | None = None,
) -> Violation | None:
    """
    Validate a YYYY-MM-DD birth date: not in the future, age at most 100, and,
    when a document type is given, within that document's age band.
    """
    if not fecha:
        return Violation("FECHA_VACIA", "Por favor ingresa tu fecha de nacimiento")
    try:
        birth = datetime.strptime(fecha, "%Y-%m-%d").date()
    except ValueError:
        return Violation("FECHA_FORMATO", "La fecha debe tener el formato AAAA-MM-DD")
    # strptime accepts unpadded months/days; only the canonical form is valid.
    if birth.isoformat() != fecha:
        return Violation("FECHA_FORMATO", "La fecha debe tener el formato AAAA-MM-DD")

    today = today or date.today()
    if birth > today:
        return Violation("FECHA_FUTURA", "La fecha de nacimiento no puede ser futura")

    age = _age_on(birth, today)
    if age > MAX_AGE:
        return Violation("EDAD_MAXIMA", "La edad ingresada supera el límite permitido")

    if tipo_documento_id is None:
        return None
    doc_type = DOCUMENT_TYPES.get(tipo_documento_id)
    if doc_type is None:
        return _INVALID_DOCUMENT_TYPE
    if age < doc_type.edad_min or (doc_type.edad_max is not None and age > doc_type.edad_max):
        if doc_type.edad_max is not None:
            band = f"entre {doc_type.edad_min} y {doc_type.edad_max}"
        else:
            band = f"mínimo {doc_type.edad_min}"
        return Violation("EDAD_INVALIDA", f"Para {doc_type.nombre} debe tener {band} años")
    return None


def check_document(numero: str | None, tipo_documento_id: int | None) -> Violation | None:
    if not numero:
        return Violation("DOCUMENTO_VACIO", "Por favor ingresa tu número de documento")
    doc_type = DOCUMENT_TYPES.get(tipo_documento_id) if tipo_documento_id is not None else None
    if doc_type is None:
        return _INVALID_DOCUMENT_TYPE
    if doc_type.patron.fullmatch(numero) is None:
        return Violation(
            "DOCUMENTO_INVALIDO",
            f"El documento debe tener {doc_type.descripcion} para {doc_type.nombre}",
        )
    return None


_PHONE = re.compile(r"3[0-9]{9}")


def check_phone(telefono: str | None) -> Violation | None:
    """Phone is optional; when given it must be a 10-digit number starting with 3."""
    if not telefono:
        return None
    if _PHONE.fullmatch(telefono) is None:
        return Violation("TELEFONO_INVALIDO", "El número debe empezar con 3 y tener 10 dígitos")
    return None
