from fastapi import APIRouter

from .batch import batch_router
from .recommendation import recommendation_router

router = APIRouter()

router.include_router(recommendation_router, tags=["Recommendations"])
router.include_router(batch_router, tags=["Batch Runs"])
