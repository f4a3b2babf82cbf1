from .summaries import router as summaries_router
from .workouts import router as workouts_router

__all__ = [
    "summaries_router",
    "workouts_router",
]
