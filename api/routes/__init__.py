"""API route definitions and exports."""
from api.routes import music, system

__all__ = ["music", "system"]
