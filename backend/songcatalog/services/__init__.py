# Services package init
"""
SongCatalog Backend: Services Layer
====================================

What:  Business logic sitting between routes (HTTP) and repositories (SQL).
Why:   Routes handle HTTP; services handle domain rules; repositories own the
       database. Each layer can be tested without the one above it.

Service Inventory:
    - SongService: catalog CRUD pass-through, verse splitting and paging
"""
