# Routes package init
"""
SongCatalog Backend: API Routes Package
========================================

Route Inventory:
    - songs.py:   /songs, /songs/{id}, /songs/{id}/text, /info
    - health.py:  GET /health

Routes stay thin: bind the request, call SongService, shape the response.
"""
