from fastapi import APIRouter
from genoscript.api.routes import datasets, scripts, upload

api_router = APIRouter()

api_router.include_router(upload.router, prefix="/upload", tags=["Upload"])
api_router.include_router(datasets.router, prefix="/datasets", tags=["Datasets"])
api_router.include_router(scripts.router, prefix="/scripts", tags=["Scripts"])
