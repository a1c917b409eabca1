from fastapi import APIRouter
from feedback_hub.routers import auth, comments, cycles, feedback, hierarchy, reviews, system

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(comments.router, tags=["Comments"])
api_router.include_router(feedback.router, tags=["Feedback"])
api_router.include_router(reviews.router, tags=["Reviews"])
api_router.include_router(hierarchy.router, tags=["Hierarchy"])
api_router.include_router(cycles.router, tags=["Review Cycles"])
api_router.include_router(system.router, tags=["System"])
