from agora.web.routers.actions import router as actions_router
from agora.web.routers.sessions import router as sessions_router

__all__ = [
    "actions_router",
    "sessions_router",
]
