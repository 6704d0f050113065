# database.py
import logging
from motor.motor_asyncio import AsyncIOMotorClient
import config

logger = logging.getLogger(__name__)

client = AsyncIOMotorClient(config.MONGODB_URI)
db = client[config.MONGODB_DB]


def get_db():
    return db


async def init_db():
    database = get_db()
    await database.students.create_index("username", unique=True)
    await database.students.create_index("email", unique=True)
    logger.info("Unique indexes ensured on students.username and students.email")


async def ping_db():
    await get_db().command("ping")
