from .nosql import MongoHandle
from .settings import MongoSettings, get_mongo_settings

__all__ = ["MongoHandle", "MongoSettings", "get_mongo_settings"]
