"""Application configuration."""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Paths
BASE_DIR = Path(__file__).parent
DATA_DIR = BASE_DIR / "data"
DB_PATH = Path(os.getenv("INVENTORY_DB_PATH", str(DATA_DIR / "inventory.db")))

# Database
DATABASE_URL = os.getenv("INVENTORY_DATABASE_URL", f"sqlite:///{DB_PATH}")

# Catalog
DEFAULT_ROOT_NAME = "All Products"
LOCATION_PLACEHOLDER = "N/A"

# Product bounds (inclusive)
MAX_QUANTITY = 1_000_000
MAX_PRICE = 1_000_000.0

# Alert strategy defaults
DEFAULT_ALERT_THRESHOLD = int(os.getenv("INVENTORY_ALERT_THRESHOLD", "5"))
HIGH_ALERT_THRESHOLD = 10
REORDER_POINT = int(os.getenv("INVENTORY_REORDER_POINT", "10"))
SAFETY_STOCK = int(os.getenv("INVENTORY_SAFETY_STOCK", "3"))
