"""
Every /api/v1 route, grouped by resource.
"""

from fastapi import APIRouter

from fupa.api.v1.endpoints import (attendance, auth, board, notifications,
                                   system, users)

api_router = APIRouter()

# Login, refresh, logout, me
api_router.include_router(auth.router)

# Employee accounts & profiles
api_router.include_router(users.router)

# Clock in / clock out, history, export
api_router.include_router(attendance.router)

# Override rules & announcements
api_router.include_router(board.router)

# Per-user notifications
api_router.include_router(notifications.router)

# Health & status
api_router.include_router(system.router)
