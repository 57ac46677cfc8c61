# OPSBOARD/opsboard/config.py

import os
import logging
from dotenv import load_dotenv
from pathlib import Path

logger = logging.getLogger(__name__)

# Dossier du package (opsboard/) et racine du projet
BASE_DIR = Path(__file__).parent.absolute()
ROOT_DIR = BASE_DIR.parent
env_path = ROOT_DIR / '.env'

# Charge les variables depuis le fichier .env
if env_path.exists():
    load_dotenv(dotenv_path=env_path)
    logger.info(f"Fichier .env chargé depuis {env_path}")

# ============================================
# CONFIGURATION ENVIRONNEMENT
# ============================================
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# ============================================
# CONFIGURATION BASE DE DONNÉES
# ============================================
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    # En production, on veut lever une erreur
    if ENVIRONMENT == "production":
        raise ValueError("DATABASE_URL must be set in production")
    DATABASE_URL = f"sqlite:///{ROOT_DIR / 'opsboard.db'}"
    logger.warning("DATABASE_URL non définie, utilisation de SQLite local")

DATABASE_ECHO = os.getenv("DATABASE_ECHO", "false").lower() == "true"

# ============================================
# CONFIGURATION JWT / AUTH
# ============================================
SECRET_KEY = os.getenv("SECRET_KEY", "change_this_secret_key_in_production")
if SECRET_KEY == "change_this_secret_key_in_production" and ENVIRONMENT == "production":
    raise ValueError("SECRET_KEY must be changed in production")

ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 24 heures par défaut
MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))

# ============================================
# CONFIGURATION STOCKAGE (images inventaire, photos de livraison)
# ============================================
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local").lower()  # local | s3
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(ROOT_DIR / "uploads")))
UPLOAD_URL_PREFIX = os.getenv("UPLOAD_URL_PREFIX", "/uploads")
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", str(5 * 1024 * 1024)))  # 5 Mo

AWS_CONFIG = {
    "access_key_id": os.getenv("AWS_ACCESS_KEY_ID", ""),
    "secret_access_key": os.getenv("AWS_SECRET_ACCESS_KEY", ""),
    "region": os.getenv("AWS_REGION", "us-east-1"),
    "bucket_name": os.getenv("AWS_BUCKET_NAME", "opsboard-media"),
    "public_url": os.getenv("AWS_PUBLIC_URL", ""),
    "enabled": all([
        os.getenv("AWS_ACCESS_KEY_ID"),
        os.getenv("AWS_SECRET_ACCESS_KEY"),
        os.getenv("AWS_BUCKET_NAME")
    ])
}

# ============================================
# CONFIGURATION LIENS PUBLICS (confirmation de livraison)
# ============================================
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8080").rstrip("/")

# ============================================
# CONFIGURATION CORS (Frontend)
# ============================================
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:8080").split(",")

# ============================================
# LOGGING
# ============================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ============================================
# FONCTIONS UTILITAIRES
# ============================================
def get_storage_config():
    """Retourne la configuration du stockage d'objets"""
    return {
        "backend": STORAGE_BACKEND,
        "upload_dir": UPLOAD_DIR,
        "url_prefix": UPLOAD_URL_PREFIX,
        "max_size": MAX_UPLOAD_SIZE,
        "aws": AWS_CONFIG,
    }

def is_development():
    """Vérifie si on est en développement"""
    return ENVIRONMENT == "development"
