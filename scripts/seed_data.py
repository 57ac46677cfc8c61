# OPSBOARD/scripts/seed_data.py : script pour générer des données de démonstration

#!/usr/bin/env python
"""Crée une entreprise de démo: propriétaire, livreur, inventaire, produits et commandes"""

import random
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from opsboard.auth import hash_password
from opsboard.constants import ROLE_DRIVER, STATUS_COMPLETED, STATUS_READY, ORDER_STATUSES
from opsboard.database import SessionLocal, create_tables, drop_tables
from opsboard.models import models
from opsboard.services.business_service import BusinessService
from opsboard.services.inventory_service import InventoryService
from opsboard.services.order_service import OrderService
from opsboard.services.product_service import ProductService

DEMO_EMAIL = "demo@opsboard.app"
DRIVER_EMAIL = "livreur@opsboard.app"
DEMO_PASSWORD = "demo123"

INVENTORY = [
    # nom, quantité, coût unitaire, catégorie
    ("Farine", 200, 1.20, "Épicerie"),
    ("Sucre", 150, 0.80, "Épicerie"),
    ("Beurre", 40, 3.50, "Frais"),
    ("Oeufs", 120, 0.25, "Frais"),
    ("Boîtes cadeau", 8, 1.00, "Emballage"),
]

PRODUCTS = [
    # nom, stock, marge, [(article, quantité)]
    ("Gâteau au beurre", 12, 40, [("Farine", 2), ("Sucre", 1), ("Beurre", 1), ("Oeufs", 4)]),
    ("Biscuits (boîte)", 6, 60, [("Farine", 1), ("Sucre", 1), ("Boîtes cadeau", 1)]),
]

CLIENTS = ["Awa Diop", "Moussa Ba", "Fatou Ndiaye", "Ibrahima Sow", "Aminata Fall"]


def generate_demo_data(reset=False):
    """Génère une entreprise de démonstration (--reset vide d'abord la base)"""
    if reset:
        drop_tables()
    create_tables()
    db = SessionLocal()
    try:
        if db.query(models.User).filter(models.User.email == DEMO_EMAIL).first():
            print(f"ℹ️ Données de démo déjà présentes ({DEMO_EMAIL})")
            return

        owner = models.User(email=DEMO_EMAIL, password_hash=hash_password(DEMO_PASSWORD))
        db.add(owner)
        db.flush()
        db.add(models.Profile(id=owner.id, email=DEMO_EMAIL, full_name="Compte Démo"))
        db.commit()

        business = BusinessService(db).onboard(owner, "Pâtisserie Démo", "EUR")

        driver = models.User(email=DRIVER_EMAIL, password_hash=hash_password(DEMO_PASSWORD))
        db.add(driver)
        db.flush()
        db.add(models.Profile(id=driver.id, email=DRIVER_EMAIL, full_name="Livreur Démo", business_id=business.id))
        db.add(models.UserRole(user_id=driver.id, business_id=business.id, role=ROLE_DRIVER))
        db.commit()

        inventory = InventoryService(db, business.id)
        items = {}
        for name, quantity, unit_cost, category in INVENTORY:
            item = inventory.create_item({
                "name": name,
                "quantity": quantity,
                "unit_cost": unit_cost,
                "category": category,
            })
            items[name] = item["id"]

        products = ProductService(db, business.id)
        product_ids = []
        for name, quantity_available, margin, components in PRODUCTS:
            product = products.save({
                "name": name,
                "quantity_available": quantity_available,
                "profit_margin": margin,
                "components": [
                    {"inventory_item_id": items[item_name], "quantity": qty}
                    for item_name, qty in components
                ],
            })
            product_ids.append(product["id"])

        orders = OrderService(db, business.id)
        for client_name in CLIENTS:
            order = orders.create_order({
                "client_name": client_name,
                "product_id": random.choice(product_ids),
                "quantity": 1,
                "payment_method": random.choice(["Espèces", "Carte", "Virement"]),
            })
            status = random.choice(ORDER_STATUSES)
            if status in (STATUS_READY, STATUS_COMPLETED):
                orders.assign_driver(order["id"], driver.id)
            orders.change_status(order["id"], status)

        print("✅ Données de démo générées avec succès!")
        print(f"👤 Propriétaire: {DEMO_EMAIL} / {DEMO_PASSWORD}")
        print(f"🚚 Livreur: {DRIVER_EMAIL} / {DEMO_PASSWORD}")
    finally:
        db.close()

if __name__ == "__main__":
    generate_demo_data(reset="--reset" in sys.argv)
