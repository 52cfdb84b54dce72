from fastapi import APIRouter

from scriptbreaker.api.v1 import breakdowns, episodes, panels


api_router = APIRouter(prefix="/v1")

api_router.include_router(breakdowns.router)
api_router.include_router(episodes.router)
api_router.include_router(panels.router)
