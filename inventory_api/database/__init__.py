from inventory_api.database.base import Base
from inventory_api.database.engine import build_engine
from inventory_api.database.session import Database, get_db

__all__ = ["Base", "Database", "build_engine", "get_db"]
