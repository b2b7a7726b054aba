"""
API v1 router aggregating all endpoint routers.
"""

from fastapi import APIRouter

from bill_analyzer.api.v1.endpoints import analysis, history, logs, ocr, samples

api_router = APIRouter()

api_router.include_router(
    analysis.router,
    prefix="/analysis",
    tags=["Analysis"],
)
api_router.include_router(
    ocr.router,
    prefix="/ocr",
    tags=["OCR"],
)
api_router.include_router(
    history.router,
    prefix="/history",
    tags=["History"],
)
api_router.include_router(
    logs.router,
    prefix="/logs",
    tags=["Logs"],
)
api_router.include_router(
    samples.router,
    prefix="/samples",
    tags=["Samples"],
)
