# Middleware package init
"""
SongCatalog Backend: Middleware Package
========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so every later log line and error body can use it
    2. Logging times the rest of the chain and records the final status
"""
