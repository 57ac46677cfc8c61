# OPSBOARD/opsboard/errors.py : traduction des erreurs métier en réponses HTTP

"""
Les services lèvent des exceptions standard; les routes les traduisent ici.

- LookupError      -> 404 (ressource absente ou hors de l'entreprise)
- PermissionError  -> 403
- ConflictError    -> 409
- ValueError       -> 400 (validation, règle métier)
"""

from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class ConflictError(Exception):
    """L'opération entre en conflit avec l'état actuel (doublon, déjà confirmé...)"""


class InsufficientStockError(ValueError):
    """Le stock ne couvre pas la quantité demandée"""

    def __init__(self, message: str, shortages: list = None):
        super().__init__(message)
        self.shortages = shortages or []


def to_http_exception(exc: Exception) -> HTTPException:
    """Convertit une exception de service en HTTPException"""
    if isinstance(exc, LookupError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, PermissionError):
        logger.warning(f"Accès refusé: {exc}")
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    logger.error(f"Erreur interne: {type(exc).__name__}: {exc}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Une erreur interne est survenue",
    )


SERVICE_ERRORS = (LookupError, PermissionError, ConflictError, ValueError)
