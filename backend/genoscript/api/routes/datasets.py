from typing import List

from fastapi import APIRouter

from genoscript.schemas.conversion import PublicDataset
from genoscript.services.source.catalog import PUBLIC_DATASETS

router = APIRouter()


@router.get("/", response_model=List[PublicDataset])
async def list_public_datasets():
    """Public VCF datasets the generated script can download, in display order."""
    return list(PUBLIC_DATASETS)
