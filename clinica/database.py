from clinica.config import get_settings
from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie

from clinica.store import CredentialStore, InMemoryCredentialStore
from clinica.utils.logger import get_logger

settings = get_settings()
logger = get_logger("database")

_mongo_client: AsyncIOMotorClient | None = None


async def init_db() -> CredentialStore:
    """Build the configured credential store; for Mongo, connect and register Beanie models."""
    global _mongo_client
    if settings.STORE_BACKEND == "memory":
        logger.warning("Using in-memory credential store; data is not persisted")
        return InMemoryCredentialStore()

    from clinica.models import User, Patient, Notification
    from clinica.store.mongo import MongoCredentialStore

    _mongo_client = AsyncIOMotorClient(
        settings.MONGODB_URI,
        serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
        timeoutMS=settings.MONGODB_TIMEOUT_MS,
    )
    # Extract database name from URI, default to 'clinica' if not specified
    db_name = settings.MONGODB_URI.rsplit("/", 1)[-1].split("?")[0]
    if not db_name:
        db_name = "clinica"
    await init_beanie(
        database=_mongo_client[db_name],
        document_models=[User, Patient, Notification],
    )
    logger.info(f"Connected to MongoDB database '{db_name}'")
    return MongoCredentialStore(_mongo_client)


def close_db() -> None:
    global _mongo_client
    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None
