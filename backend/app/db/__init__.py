"""Sample data for local development (``schooladmin-seed`` / ``schooladmin-seed clear``)"""
from app.db.seed_data import seed_all, clear_all

__all__ = ["seed_all", "clear_all"]
