from .client import DEFAULT_DATABASE, MongoHandle

__all__ = ["DEFAULT_DATABASE", "MongoHandle"]
