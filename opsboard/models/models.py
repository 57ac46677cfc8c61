# OPSBOARD/opsboard/models/models.py

from sqlalchemy import Column, Integer, String, Float, Boolean, Text, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from opsboard.database import Base

class User(Base):
    """Compte d'authentification (email + mot de passe)"""
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    roles = relationship("UserRole", back_populates="user", cascade="all, delete-orphan")

class Business(Base):
    __tablename__ = "businesses"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    currency = Column(String, nullable=False, default="USD")
    currency_symbol = Column(String, nullable=False, default="$")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    members = relationship("Profile", back_populates="business")
    roles = relationship("UserRole", back_populates="business", cascade="all, delete-orphan")
    inventory_items = relationship("InventoryItem", back_populates="business", cascade="all, delete-orphan")
    products = relationship("Product", back_populates="business", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="business", cascade="all, delete-orphan")
    budget = relationship("BudgetSettings", back_populates="business", uselist=False, cascade="all, delete-orphan")

class Profile(Base):
    """Profil utilisateur; l'appartenance à une entreprise est optionnelle"""
    __tablename__ = "profiles"
    id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    email = Column(String, index=True)
    full_name = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="profile")
    business = relationship("Business", back_populates="members")

class UserRole(Base):
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "business_id", "role", name="uq_user_business_role"),)
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String, nullable=False)  # owner | admin | driver
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="roles")
    business = relationship("Business", back_populates="roles")

class PlatformAdmin(Base):
    __tablename__ = "platform_admins"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

class InventoryItem(Base):
    __tablename__ = "inventory_items"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    quantity = Column(Float, nullable=False, default=0)
    unit_cost = Column(Float, nullable=True, default=0)
    total_cost = Column(Float, nullable=True, default=0)
    reorder_level = Column(Float, nullable=True, default=10)
    category = Column(String, nullable=True, index=True)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    business = relationship("Business", back_populates="inventory_items")
    components = relationship("ProductComponent", back_populates="inventory_item")

class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    quantity_available = Column(Integer, nullable=False, default=0)
    profit_margin = Column(Float, nullable=True, default=20)
    sale_price = Column(Float, nullable=True, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    business = relationship("Business", back_populates="products")
    components = relationship("ProductComponent", back_populates="product", cascade="all, delete-orphan")

class ProductComponent(Base):
    """Nomenclature: un produit consomme `quantity` unités d'un article d'inventaire"""
    __tablename__ = "product_components"
    id = Column(Integer, primary_key=True, index=True)
    quantity = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)

    product = relationship("Product", back_populates="components")
    inventory_item = relationship("InventoryItem", back_populates="components")

class Order(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True, index=True)
    client_name = Column(String, nullable=False)
    client_contact = Column(String, nullable=True)
    product_name = Column(String, nullable=False)  # copie au moment de la commande
    quantity = Column(Integer, nullable=False, default=1)
    sale_price = Column(Float, nullable=False, default=0)  # total de la commande
    delivery_info = Column(Text, nullable=True)
    payment_method = Column(String, nullable=True)
    status = Column(String, nullable=False, default="New Inquiry", index=True)
    inventory_deducted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    assigned_driver_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    business = relationship("Business", back_populates="orders")
    product = relationship("Product")
    assigned_driver = relationship("User")
    delivery_confirmations = relationship(
        "DeliveryConfirmation",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="DeliveryConfirmation.created_at"
    )

class DeliveryConfirmation(Base):
    __tablename__ = "delivery_confirmations"
    id = Column(Integer, primary_key=True, index=True)
    driver_token = Column(String, unique=True, index=True, nullable=False)
    delivery_photo_url = Column(String, nullable=True)
    driver_notes = Column(Text, nullable=True)
    confirmed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    order = relationship("Order", back_populates="delivery_confirmations")

class BudgetSettings(Base):
    __tablename__ = "budget_settings"
    id = Column(Integer, primary_key=True, index=True)
    total_budget = Column(Float, nullable=False, default=0)
    amount_spent = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), unique=True, nullable=False)
    business = relationship("Business", back_populates="budget")
