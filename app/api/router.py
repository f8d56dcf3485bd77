"""
FitMatch — Main API Router

Aggregates all sub-routers under a single prefix so that ``app.main``
can mount the entire API surface with one ``include_router`` call.
"""

from fastapi import APIRouter

from app.api import gyms, messages, realtime, saved_gyms, user_matches, users
from app.api.admin import gyms as admin_gyms
from app.api.admin import users as admin_users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(gyms.router, prefix="/gyms", tags=["Gyms"])
router.include_router(saved_gyms.recommendations_router, prefix="/recommendations", tags=["Recommendations"])
router.include_router(saved_gyms.router, prefix="/saved-gyms", tags=["Saved Gyms"])
router.include_router(user_matches.router, prefix="/user-matches", tags=["User Matches"])
router.include_router(messages.router, prefix="/messages", tags=["Messages"])
router.include_router(realtime.router, tags=["Realtime"])
router.include_router(admin_users.router, prefix="/admin/users", tags=["Admin - Users"])
router.include_router(admin_gyms.router, prefix="/admin/gyms", tags=["Admin - Gyms"])
