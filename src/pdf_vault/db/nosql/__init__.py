from .mongo import MongoHandle

__all__ = ["MongoHandle"]
