from motor.motor_asyncio import AsyncIOMotorClient
from vendor_compliance.config import settings
import logging

# Set up logging
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# =====================================================
# MONGODB CONNECTION (users, documents, submissions)
# =====================================================

class MongoDatabase:
    client: AsyncIOMotorClient = None
    database = None

db = MongoDatabase()


def _connection_candidates(url: str) -> list:
    """Connection strings to try, in order."""
    candidates = [url]

    # Let the driver negotiate TLS itself if the explicit flags are rejected
    stripped = url.replace("&ssl=true&ssl_cert_reqs=CERT_NONE", "")
    if stripped != url:
        candidates.append(stripped)

    if url.startswith("mongodb+srv://"):
        separator = "&" if "?" in url else "?"
        candidates.append(url + f"{separator}tlsAllowInvalidCertificates=true")

    return candidates


async def connect_to_mongo():
    """Create MongoDB database connection for the reporting collections."""
    connection_strings = _connection_candidates(settings.mongodb_url)

    for i, connection_string in enumerate(connection_strings, 1):
        try:
            logger.info(f"Attempting MongoDB connection {i} with: {connection_string[:80]}...")

            db.client = AsyncIOMotorClient(
                connection_string,
                serverSelectionTimeoutMS=30000,
                connectTimeoutMS=30000,
                socketTimeoutMS=30000
            )

            # Test the connection by attempting to get server info
            await db.client.server_info()

            db.database = db.client[settings.database_name]

            logger.info(f"✅ Successfully connected to MongoDB using connection string {i}")
            logger.info(f"📊 Connected to database: {settings.database_name}")
            return

        except Exception as e:
            logger.error(f"❌ MongoDB connection attempt {i} failed: {str(e)}")
            if db.client:
                db.client.close()
                db.client = None

            if i == len(connection_strings):
                logger.error("🚫 All MongoDB connection attempts failed!")
                raise Exception(f"Failed to connect to MongoDB after {len(connection_strings)} attempts: {str(e)}")

async def close_mongo_connection():
    """Close the MongoDB database connection."""
    if db.client:
        logger.info("🔌 Closing MongoDB connection...")
        db.client.close()
        db.client = None
        db.database = None
        logger.info("✅ MongoDB connection closed")

def get_database():
    """Get MongoDB database instance for the reporting collections."""
    return db.database
