# shopez/config/settings.py

"""Central configuration for the ShopEZ storefront client."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the ShopEZ storefront client."""

    # --- Remote services ---
    CATALOG_BASE_URL: str = os.getenv(
        "SHOPEZ_CATALOG_URL", "https://fakestoreapi.com"
    ).rstrip("/")
    FIREBASE_API_KEY: str = os.getenv("SHOPEZ_FIREBASE_API_KEY", "")
    FIREBASE_DATABASE_URL: str = os.getenv(
        "SHOPEZ_FIREBASE_DATABASE_URL",
        "https://shopez-f3bd0-default-rtdb.firebaseio.com",
    ).rstrip("/")
    AUTH_BASE_URL: str = "https://identitytoolkit.googleapis.com/v1"
    TOKEN_BASE_URL: str = "https://securetoken.googleapis.com/v1"

    # --- Networking ---
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    TOKEN_REFRESH_MARGIN: int = 300     # Refresh id tokens this close to expiry

    # --- Cart store layout ---
    CART_ROOT: str = "carts"

    # --- Presentation ---
    ALL_CATEGORIES: str = "all"
    CURRENCY_SYMBOL: str = "R"
    TITLE_PREVIEW_LENGTH: int = 40

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json",
        "Accept-Language": "en-US,en;q=0.9",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Diagnostics (probe targets for --health) ---
    HEALTH_ENDPOINTS: list[dict[str, str]] = [
        {
            "id": "catalog",
            "label": "Product catalog",
            "url": f"{CATALOG_BASE_URL}/products/categories",
        },
        {
            "id": "auth",
            "label": "Identity provider",
            "url": f"{AUTH_BASE_URL}/projects",
        },
        {
            "id": "cart_store",
            "label": "Realtime database",
            "url": f"{FIREBASE_DATABASE_URL}/.json?shallow=true",
        },
    ]
