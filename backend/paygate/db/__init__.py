"""
Database package for Paygate.

Exports engine setup and the transaction ORM model.
"""
from .init_db import create_engine, create_session_factory, initialize_database
from .models import Base, TransactionModel

__all__ = [
    "create_engine",
    "create_session_factory",
    "initialize_database",
    "Base",
    "TransactionModel",
]
