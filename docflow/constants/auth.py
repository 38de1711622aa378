"""
Authentication Constants

Configuration constants for JWT authentication.
"""

import logging

from decouple import config

from docflow.config import settings

logger = logging.getLogger(__name__)

# JWT Configuration
SECRET_KEY = config("SECRET_KEY", default=settings.secret_key)
if SECRET_KEY == "docflow-secret-key":
    logger.warning("Using default SECRET_KEY. This is insecure and should be changed in production!")

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = config(
    "ACCESS_TOKEN_EXPIRE_MINUTES", default=settings.access_token_expire_minutes, cast=int
)
