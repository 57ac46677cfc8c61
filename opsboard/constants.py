# OPSBOARD/opsboard/constants.py

# Statuts de commande, dans l'ordre des colonnes du kanban
ORDER_STATUSES = [
    "New Inquiry",
    "In Progress",
    "Deposit Received",
    "Ready for Delivery",
    "Completed",
    "Cancelled",
]

STATUS_NEW = "New Inquiry"
STATUS_READY = "Ready for Delivery"
STATUS_COMPLETED = "Completed"
STATUS_CANCELLED = "Cancelled"

# Une commande "en cours" n'est ni terminée ni annulée
CLOSED_STATUSES = {STATUS_COMPLETED, STATUS_CANCELLED}

# Rôles
ROLE_OWNER = "owner"
ROLE_ADMIN = "admin"
ROLE_DRIVER = "driver"
MANAGER_ROLES = (ROLE_OWNER, ROLE_ADMIN)
INVITABLE_ROLES = [ROLE_ADMIN, ROLE_DRIVER]

# Devises supportées: code -> (libellé, symbole)
CURRENCIES = {
    "USD": ("US Dollar", "$"),
    "CAD": ("Canadian Dollar", "C$"),
    "EUR": ("Euro", "€"),
    "GBP": ("British Pound", "£"),
    "MXN": ("Mexican Peso", "MX$"),
    "PEN": ("Peruvian Sol", "S/"),
    "BRL": ("Brazilian Real", "R$"),
    "COP": ("Colombian Peso", "COL$"),
}
DEFAULT_CURRENCY = "USD"

# Stock
STOCK_STATUSES = ["all", "in-stock", "low-stock", "out-of-stock"]
DEFAULT_REORDER_LEVEL = 10

# Seuils et limites
DEFAULT_PROFIT_MARGIN = 20
MAX_PRODUCT_QUANTITY = 100000
MAX_PROFIT_MARGIN = 1000
MAX_ORDER_QUANTITY = 10000
RECENT_ORDERS_LIMIT = 5

# Buckets de stockage
INVENTORY_IMAGES_BUCKET = "inventory-images"
DELIVERY_PHOTOS_BUCKET = "delivery-photos"
