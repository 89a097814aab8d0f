import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    # API Configuration
    API_TITLE = "Storefront Catalog Proxy"
    API_VERSION = "1.0.0"
    API_DESCRIPTION = "Per-store product catalog proxy for Shopify storefronts"

    # Server Configuration
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 3000))
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"

    # Request Configuration
    REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", 30))

    # Catalog Configuration
    PAGE_SIZE = int(os.getenv("PAGE_SIZE", 50))
    PRODUCT_CACHE_TTL = float(os.getenv("PRODUCT_CACHE_TTL", 600))  # 10 minutes
    PLACEHOLDER_IMAGE_URL = os.getenv("PLACEHOLDER_IMAGE_URL", "https://placehold.co/200x200?text=No+Image")
    PRICE_CURRENCY = os.getenv("PRICE_CURRENCY", "INR")

    # Database Configuration
    DATABASE_URL = os.getenv("DATABASE_URL", "mysql+mysqlconnector://root:@localhost/storefront_catalog")

    # Logging Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Security Configuration
    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

    # Shopify Specific
    SHOPIFY_API_VERSION = os.getenv("SHOPIFY_API_VERSION", "2024-01")
    SHOPIFY_GRAPHQL_PATH = "/admin/api/{version}/graphql.json"


# Create settings instance
settings = Settings()


# Environment check
def get_environment():
    """Get current environment"""
    return os.getenv("ENVIRONMENT", "development")


def is_production():
    """Check if running in production"""
    return get_environment().lower() == "production"
