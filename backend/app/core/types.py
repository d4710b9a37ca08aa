"""Column types shared by all models"""
import uuid

from sqlalchemy import TypeDecorator, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID


def generate_uuid() -> str:
    return str(uuid.uuid4())


class GUID(TypeDecorator):
    """
    Primary/foreign key type.

    Native UUID on PostgreSQL, CHAR-like String(36) elsewhere (SQLite in
    tests). Python side always sees plain strings so ids compare equal to
    path parameters without conversion.
    """
    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_UUID(as_uuid=False))
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else str(value)
