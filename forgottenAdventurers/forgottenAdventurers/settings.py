"""Django settings for the ForgottenAdventurers mint service."""

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

ENVIRONMENT = os.getenv("DJANGO_ENV", "development")
if ENVIRONMENT == "production":
    env_file = BASE_DIR / ".env.production"
elif ENVIRONMENT == "rinkeby":
    env_file = BASE_DIR / ".env.rinkeby"
else:
    env_file = BASE_DIR / ".env"

if env_file.exists():
    load_dotenv(env_file)
else:
    load_dotenv(BASE_DIR / ".env")

TESTING = ENVIRONMENT == "test" or "pytest" in sys.modules

SECRET_KEY = os.getenv("SECRET_KEY", "")
if not SECRET_KEY:
    if ENVIRONMENT in {"production", "rinkeby"}:
        raise ValueError("SECRET_KEY must be set in environment")
    SECRET_KEY = "dev-only-insecure-secret-key-change-before-production"

DEBUG = os.getenv("DEBUG", "False").lower() == "true"
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")

INSTALLED_APPS = [
    "daphne",
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "minting.apps.MintingConfig",
    "channels",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "minting.middleware.RequestIDMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "forgottenAdventurers.urls"
WSGI_APPLICATION = "forgottenAdventurers.wsgi.application"
ASGI_APPLICATION = "forgottenAdventurers.asgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

if TESTING:
    CHANNEL_LAYERS = {
        "default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}
    }
else:
    CHANNEL_LAYERS = {
        "default": {
            "BACKEND": "channels_redis.core.RedisChannelLayer",
            "CONFIG": {"hosts": [(os.getenv("REDIS_HOST", "127.0.0.1"), 6379)]},
        }
    }

BLOCKCHAIN_RPC_URL = os.getenv("BLOCKCHAIN_RPC_URL")
BLOCKCHAIN_NETWORK = os.getenv("BLOCKCHAIN_NETWORK", "anvil")
CHAIN_ID = int(os.getenv("CHAIN_ID", "31337"))
ADVENTURERS_CONTRACT_ADDRESS = os.getenv("ADVENTURERS_CONTRACT_ADDRESS", "")

# Constructor parameters of the ForgottenAdventurers deployment per network:
# VRF coordinator, LINK token, key hash and the LINK fee per request.
NETWORK_CONFIGS = {
    "anvil": {
        "chain_id": 31337,
        "explorer_url": None,
        "name": "Anvil Local",
        "vrf_coordinator": os.getenv("ORACLE_ADDRESS", "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"),
        "link_token": os.getenv("LINK_TOKEN_ADDRESS", "0x5FbDB2315678afecb367f032d93F642f64180aa3"),
        "key_hash": "0x6c3699283bda56ad74f6b855546325b68d482e983852a7a82979cc4807b641f4",
        "fee": 100000000000000000,
    },
    "rinkeby": {
        "chain_id": 4,
        "explorer_url": "https://rinkeby.etherscan.io",
        "name": "Rinkeby Testnet",
        "vrf_coordinator": "0xb3dCcb4Cf7a26f6cf6B120Cf5A73875B7BBc655B",
        "link_token": "0x01BE23585060835E02B77ef475b0Cc51aA1e0709",
        "key_hash": "0x2ed0feb3e7fd2022120aa84fab1945545a9f2ffc9076fd6156fa96eaff4c1311",
        "fee": 100000000000000000,
    },
    "mainnet": {
        "chain_id": 1,
        "explorer_url": "https://etherscan.io",
        "name": "Ethereum Mainnet",
        "vrf_coordinator": "0xf0d54349aDdcf704F77AE15b96510dEA15cb7952",
        "link_token": "0x514910771AF9Ca656af840dff83E8264EcF986CA",
        "key_hash": "0xAA77729D3466CA35AE8D28B3BBAC7CC36A5031EFDC430821C02BC31A238AF445",
        "fee": 2000000000000000000,
    },
}
CURRENT_NETWORK_CONFIG = NETWORK_CONFIGS.get(BLOCKCHAIN_NETWORK, NETWORK_CONFIGS["anvil"])

# Address the off-chain coordinator acts as (holds LINK, consumes randomness).
MINT_COORDINATOR_ADDRESS = os.getenv(
    "MINT_COORDINATOR_ADDRESS",
    ADVENTURERS_CONTRACT_ADDRESS or "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512",
)
# Only used to sign fulfillments when this process plays the oracle locally.
ORACLE_PRIVATE_KEY = os.getenv("ORACLE_PRIVATE_KEY")

TOKEN_BASE_URI = os.getenv("TOKEN_BASE_URI", "http://localhost:8000/mint/api/token/")
TOKEN_IMAGE_BASE_URI = os.getenv("TOKEN_IMAGE_BASE_URI", "")

if ENVIRONMENT == "production":
    assert not DEBUG, "DEBUG must be False in production"
    assert SECRET_KEY and len(SECRET_KEY) >= 50, "Invalid SECRET_KEY in production"
    assert BLOCKCHAIN_RPC_URL and BLOCKCHAIN_RPC_URL.startswith(
        "https://"
    ), "Invalid RPC URL in production"
    assert not ORACLE_PRIVATE_KEY, "ORACLE_PRIVATE_KEY must not be set in production"
    assert (
        ADVENTURERS_CONTRACT_ADDRESS and len(ADVENTURERS_CONTRACT_ADDRESS) == 42
    ), "Invalid contract address in production"
    assert BLOCKCHAIN_NETWORK == "mainnet", "Production must use mainnet"
    assert CHAIN_ID == 1, "Production chain ID must be 1"

    SECURE_SSL_REDIRECT = True
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True
    SECURE_CONTENT_TYPE_NOSNIFF = True
    X_FRAME_OPTIONS = "DENY"

elif ENVIRONMENT == "rinkeby":
    assert BLOCKCHAIN_NETWORK == "rinkeby", "Rinkeby environment must use rinkeby network"
    assert CHAIN_ID == 4, "Rinkeby chain ID must be 4"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_id": {"()": "minting.middleware.RequestIDLogFilter"},
    },
    "formatters": {
        "verbose": {
            "format": "[{levelname}] {asctime} {name} [{request_id}] {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
            "filters": ["request_id"],
        },
        "file": {
            "class": "logging.FileHandler",
            "filename": BASE_DIR / "logs" / "django.log",
            "formatter": "verbose",
            "filters": ["request_id"],
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console", "file"] if not DEBUG else ["console"],
            "level": "INFO",
        },
        "minting": {
            "handlers": ["console", "file"] if not DEBUG else ["console"],
            "level": "DEBUG" if DEBUG else "INFO",
        },
    },
}

(BASE_DIR / "logs").mkdir(exist_ok=True)

logger = logging.getLogger(__name__)
logger.info("=" * 50)
logger.info("Starting ForgottenAdventurers mint service")
logger.info("Environment: %s", ENVIRONMENT)
logger.info("Debug Mode: %s", DEBUG)
logger.info("Network: %s (%s)", BLOCKCHAIN_NETWORK, CURRENT_NETWORK_CONFIG["name"])
logger.info("Chain ID: %s", CHAIN_ID)
logger.info("RPC URL: %s", BLOCKCHAIN_RPC_URL)
logger.info("Coordinator: %s", MINT_COORDINATOR_ADDRESS)
if ADVENTURERS_CONTRACT_ADDRESS:
    logger.info("Contract: %s", ADVENTURERS_CONTRACT_ADDRESS)
else:
    logger.warning("Contract address not set. On-chain reads are disabled.")
logger.info("=" * 50)
