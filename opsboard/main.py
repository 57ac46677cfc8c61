# OPSBOARD/opsboard/main.py

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from opsboard.config import (
    ALLOWED_ORIGINS,
    DEBUG,
    ENVIRONMENT,
    LOG_LEVEL,
    STORAGE_BACKEND,
    UPLOAD_URL_PREFIX,
    is_development,
)
from opsboard.database import check_connection, create_tables
from opsboard.routes import (
    budget,
    businesses,
    dashboard,
    delivery,
    functions,
    inventory,
    orders,
    products,
    superadmin,
    team,
    users,
)
from opsboard.services.storage import local_upload_root
import logging
import datetime

# Configuration du logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Démarrage de l'API OpsBoard...")

    if check_connection():
        logger.info("✅ Connexion à la base de données établie")
        # Création des tables si elles n'existent pas
        create_tables()
    else:
        logger.error("❌ Impossible de se connecter à la base de données")

    yield

    logger.info("👋 Arrêt de l'API OpsBoard")

app = FastAPI(
    title="OpsBoard API",
    description="API de gestion des opérations pour petites entreprises: stock, produits, commandes, livraisons",
    version="1.0.0",
    debug=DEBUG,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "users", "description": "Authentification et profil"},
        {"name": "businesses", "description": "Onboarding et paramètres de l'entreprise"},
        {"name": "inventory", "description": "Articles d'inventaire et disponibilité"},
        {"name": "products", "description": "Produits, nomenclature et prix de vente"},
        {"name": "orders", "description": "Commandes et tableau kanban"},
        {"name": "delivery", "description": "Livraisons et confirmation par lien"},
        {"name": "team", "description": "Membres et rôles"},
        {"name": "budget", "description": "Budget de l'entreprise"},
        {"name": "dashboard", "description": "Tableau de bord synthétique"},
        {"name": "superadmin", "description": "Vue d'ensemble de la plateforme"},
        {"name": "functions", "description": "Fonctions privilégiées"},
    ]
)

# Configuration CORS pour permettre au frontend d'accéder à l'API
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Fichiers téléversés servis par l'API quand le stockage est local
if STORAGE_BACKEND == "local":
    app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=local_upload_root()), name="uploads")

# Inclusion des routeurs
app.include_router(users.router)
app.include_router(businesses.router)
app.include_router(inventory.router)
app.include_router(products.router)
app.include_router(orders.router)
app.include_router(delivery.driver_router)
app.include_router(delivery.router)
app.include_router(team.router)
app.include_router(budget.router)
app.include_router(dashboard.router)
app.include_router(superadmin.router)
app.include_router(functions.router)

@app.get("/")
def root():
    """
    Racine de l'API - Informations générales
    """
    return {
        "success": True,
        "message": "OpsBoard backend opérationnel 🚀",
        "version": app.version,
        "environment": ENVIRONMENT,
        "documentation": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "endpoints": {
            "users": "/users",
            "businesses": "/businesses",
            "inventory": "/inventory",
            "products": "/products",
            "orders": "/orders",
            "driver": "/driver/deliveries",
            "delivery": "/delivery/{token}",
            "team": "/team",
            "budget": "/budget",
            "dashboard": "/dashboard",
            "superadmin": "/superadmin",
            "functions": "/functions",
        },
        "health_check": "/health"
    }

@app.get("/health")
def health_check():
    """
    Endpoint de santé pour le monitoring
    """
    db_status = check_connection()

    return {
        "status": "healthy" if db_status else "unhealthy",
        "database": "connected" if db_status else "disconnected",
        "storage": STORAGE_BACKEND,
        "version": app.version,
        "timestamp": datetime.datetime.now().isoformat()
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("opsboard.main:app", host="0.0.0.0", port=8000, reload=is_development())
