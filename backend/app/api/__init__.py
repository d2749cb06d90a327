from fastapi import APIRouter

from .imports import router as imports_router
from .reconciliation import router as reconciliation_router

api_router = APIRouter()

api_router.include_router(imports_router, prefix="/import", tags=["import"])
api_router.include_router(reconciliation_router, prefix="/reconciliation", tags=["reconciliation"])
