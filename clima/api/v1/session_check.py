"""Token check endpoint: lets a client confirm its stored token is still accepted."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from clima.api.v1.auth import get_current_claims
from clima.schemas.auth import AuthCheckResponse

router = APIRouter()


@router.get("/test-auth", response_model=AuthCheckResponse)
def check_token(
    claims: Annotated[dict[str, Any], Depends(get_current_claims)],
) -> AuthCheckResponse:
    """Return the decoded claims (id, correo, rol_id, iat, exp) of a valid token."""
    return AuthCheckResponse(auth=True, mensaje="Autenticación correcta", datos=claims)
