# src/flexpro/db/__init__.py
# Engine and sessions live in flexpro.db.session; importing the package stays side-effect free.
from .base import Base

__all__ = ["Base"]
