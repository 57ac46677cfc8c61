# OPSBOARD/opsboard/routes/users.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from opsboard import auth
from opsboard.access import BusinessContext, get_context
from opsboard.config import MIN_PASSWORD_LENGTH
from opsboard.database import get_db
from opsboard.models import models as db_models
from opsboard.schemas.schemas import (
    MeOut,
    PasswordChange,
    ProfileOut,
    ProfileUpdate,
    Token,
    UserCreate,
    UserLogin,
    UserOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

@router.post("/register", response_model=UserOut)
def register(user: UserCreate, db: Session = Depends(get_db)):
    email = user.email.strip().lower()
    if "@" not in email:
        raise HTTPException(status_code=400, detail="Adresse email invalide")
    if len(user.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères"
        )
    db_user = db.query(db_models.User).filter(db_models.User.email == email).first()
    if db_user:
        raise HTTPException(status_code=400, detail="Email déjà utilisé")
    hashed_password = auth.hash_password(user.password)
    new_user = db_models.User(email=email, password_hash=hashed_password)
    db.add(new_user)
    db.flush()
    db.add(db_models.Profile(id=new_user.id, email=email, full_name=user.full_name))
    db.commit()
    db.refresh(new_user)
    logger.info(f"Nouvel utilisateur inscrit: {new_user.id}")
    return new_user

@router.post("/login", response_model=Token)
def login(user: UserLogin, db: Session = Depends(get_db)):
    email = user.email.strip().lower()
    db_user = db.query(db_models.User).filter(db_models.User.email == email).first()
    if not db_user or not auth.verify_password(user.password, db_user.password_hash):
        raise HTTPException(status_code=400, detail="Email ou mot de passe incorrect")
    token = auth.create_access_token({"sub": str(db_user.id)})
    return {"access_token": token, "token_type": "bearer"}

@router.get("/me", response_model=MeOut)
def me(ctx: BusinessContext = Depends(get_context)):
    """Profil, entreprise et rôles de l'utilisateur connecté"""
    return {
        "user": ctx.user,
        "profile": ctx.profile,
        "business": ctx.business,
        "roles": sorted(ctx.roles),
        "is_platform_admin": ctx.is_platform_admin,
        "needs_onboarding": ctx.needs_onboarding,
    }

@router.patch("/me", response_model=ProfileOut)
def update_me(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    ctx: BusinessContext = Depends(get_context)
):
    profile = ctx.profile
    if profile is None:
        profile = db_models.Profile(id=ctx.user.id, email=ctx.user.email)
        db.add(profile)
    data = payload.model_dump(exclude_unset=True)
    for field in ("full_name", "phone_number"):
        if field in data:
            value = (data[field] or "").strip()
            setattr(profile, field, value or None)
    db.commit()
    db.refresh(profile)
    return profile

@router.post("/me/password")
def change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user)
):
    if not auth.verify_password(payload.current_password, current_user.password_hash):
        raise HTTPException(status_code=400, detail="Mot de passe actuel incorrect")
    if len(payload.new_password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères"
        )
    current_user.password_hash = auth.hash_password(payload.new_password)
    db.commit()
    return {"success": True}
