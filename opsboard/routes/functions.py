# OPSBOARD/opsboard/routes/functions.py : fonctions privilégiées (réponses {"success"} / {"error"})

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Optional
import json
import logging

from opsboard.access import resolve_context
from opsboard.auth import get_user_from_token
from opsboard.database import get_db
from opsboard.errors import ConflictError
from opsboard.schemas import schemas
from opsboard.services.admin_service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["functions"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _error_from_exception(db: Session, exc: Exception) -> JSONResponse:
    db.rollback()
    if isinstance(exc, LookupError):
        return _error(404, str(exc))
    if isinstance(exc, PermissionError):
        return _error(403, str(exc))
    if isinstance(exc, ConflictError):
        return _error(409, str(exc))
    if isinstance(exc, ValueError):
        return _error(400, str(exc))
    logger.error(f"Erreur dans une fonction privilégiée: {exc}", exc_info=True)
    return _error(500, str(exc) or "Internal error")


def _authenticate(db: Session, authorization: Optional[str]):
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    return get_user_from_token(db, authorization[7:].strip())


async def _read_payload(request: Request, model):
    """Corps JSON lu après l'authentification; un corps vide vaut {}"""
    raw = await request.body()
    body = json.loads(raw) if raw.strip() else {}
    if not isinstance(body, dict):
        raise ValueError("JSON object expected")
    return model.model_validate(body)

@router.post("/admin-update-profile")
async def admin_update_profile(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db)
):
    """Modification d'un profil par un administrateur de la plateforme"""
    user = _authenticate(db, authorization)
    if not user:
        return _error(401, "Unauthorized")
    ctx = resolve_context(db, user)
    if not ctx.is_platform_admin:
        logger.warning(f"admin-update-profile refusé pour l'utilisateur {user.id}")
        return _error(403, "Not a platform admin")
    try:
        payload = await _read_payload(request, schemas.AdminProfileUpdate)
    except ValueError:
        return _error(400, "Invalid request body")
    if payload.target_user_id is None:
        return _error(400, "target_user_id required")

    try:
        AdminService(db).update_profile(payload.target_user_id, payload.full_name, payload.email)
    except Exception as e:
        return _error_from_exception(db, e)
    return {"success": True}


@router.post("/delete-user")
async def delete_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db)
):
    """Suppression d'un membre par le propriétaire de l'entreprise"""
    user = _authenticate(db, authorization)
    if not user:
        return _error(401, "Unauthorized")
    try:
        payload = await _read_payload(request, schemas.DeleteUserRequest)
    except ValueError:
        return _error(400, "Invalid request body")
    if payload.user_id is None:
        return _error(400, "user_id is required")
    ctx = resolve_context(db, user)
    if not ctx.is_owner:
        logger.warning(f"delete-user refusé pour l'utilisateur {user.id}")
        return _error(403, "Only business owners can delete users")

    try:
        AdminService(db).delete_user(ctx.business_id, payload.user_id)
    except Exception as e:
        return _error_from_exception(db, e)
    return {"success": True}
