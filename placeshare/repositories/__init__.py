"""
PlaceShare Backend: Repositories
================================

What:  Thin CRUD accessors over the places, users and user_places tables.
How:   A repository wraps the AsyncSession it is given and never commits or
       opens transactions itself. Whoever owns the session decides the unit
       of work, which is how PlaceWriter makes a place insert and a
       membership insert land in one atomic transaction.
"""

from placeshare.repositories.place_repository import PlaceRepository
from placeshare.repositories.user_repository import UserRepository

__all__ = ["PlaceRepository", "UserRepository"]
