import os
from typing import List, Set


def _split(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


# Database
DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "storefront")

# Identity provider (Clerk session tokens)
CLERK_JWT_KEY = os.getenv("CLERK_JWT_KEY", "")
CLERK_JWT_ALGORITHMS: List[str] = _split(os.getenv("CLERK_JWT_ALGORITHMS", "RS256"))
CLERK_AUTHORIZED_PARTIES: List[str] = _split(os.getenv("CLERK_AUTHORIZED_PARTIES", ""))
SESSION_COOKIE = "__session"

# Sellers
SELLER_USER_IDS: Set[str] = set(_split(os.getenv("SELLER_USER_IDS", "")))

# Media store
CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME", "")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY", "")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET", "")
UPLOAD_MAX_WORKERS = int(os.getenv("UPLOAD_MAX_WORKERS", 4))

# Server
CORS_ORIGINS: List[str] = _split(os.getenv("CORS_ORIGINS", "*"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", 8000))
