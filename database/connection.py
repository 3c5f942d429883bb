from motor.motor_asyncio import AsyncIOMotorClient

from core.config import MONGODB_URL, MONGODB_DB


def create_client(url: str = MONGODB_URL) -> AsyncIOMotorClient:
    return AsyncIOMotorClient(url)


def get_database(client: AsyncIOMotorClient, name: str = MONGODB_DB):
    return client[name]
