# Repositories package init
"""
SongCatalog Backend: Persistence Layer
=======================================

What:  Database access for the song catalog.
How:   SongRepository (abstract) defines the operations; SqlSongRepository
       implements them with SQLAlchemy. Services only see the abstract type.
"""

from songcatalog.repositories.base import SongRepository
from songcatalog.repositories.song_repository import SqlSongRepository

__all__ = ["SongRepository", "SqlSongRepository"]
