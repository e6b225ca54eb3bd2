from fastapi import APIRouter, Depends

from routers.deps import get_stats_service
from services.stats_service import StatsService

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("")
def get_stats(service: StatsService = Depends(get_stats_service)):
    """total / pending / resolved + counts per category and per location"""
    return service.stats()
