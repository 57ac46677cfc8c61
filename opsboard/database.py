# OPSBOARD/opsboard/database.py

from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from opsboard.config import DATABASE_URL, DATABASE_ECHO
import logging

logger = logging.getLogger(__name__)

# Création de la connexion à la base de données
if DATABASE_URL.startswith("sqlite"):
    # SQLite: une connexion peut être partagée entre threads (TestClient, uvicorn)
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=DATABASE_ECHO
    )
else:
    engine = create_engine(
        DATABASE_URL,
        pool_size=5,  # Nombre de connexions permanentes
        max_overflow=10,  # Connexions supplémentaires temporaires
        pool_pre_ping=True,  # Vérifie que la connexion est vivante avant utilisation
        echo=DATABASE_ECHO
    )

# Session pour interagir avec la base
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# Base pour créer les modèles (tables)
Base = declarative_base()

# Dependency pour FastAPI
def get_db():
    """
    Dépendance FastAPI pour obtenir une session de base de données.
    À utiliser dans les routes avec: db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def create_tables():
    """Crée toutes les tables définies dans les modèles"""
    # Import nécessaire pour enregistrer les modèles sur Base.metadata
    from opsboard.models import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("Tables créées/vérifiées avec succès")

def drop_tables():
    """Supprime toutes les tables (UTILISER AVEC PRÉCAUTION)"""
    Base.metadata.drop_all(bind=engine)
    logger.warning("Toutes les tables ont été supprimées")

def check_connection():
    """Vérifie que la connexion à la base fonctionne"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Erreur de connexion: {e}")
        return False
