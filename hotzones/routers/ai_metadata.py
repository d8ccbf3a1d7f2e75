# hotzones/routers/ai_metadata.py
# AI analysis results per video

from fastapi import APIRouter, Depends, HTTPException, Query

from hotzones.dependencies import get_store
from hotzones.schemas import AIMetadata, AIMetadataResponse
from hotzones.store import DataStore

router = APIRouter()


@router.get("/ai-metadata", response_model=AIMetadataResponse)
def get_ai_metadata(videoId: str = Query(..., min_length=1), store: DataStore = Depends(get_store)):
    """Metadata is null while analysis is pending or when none was requested."""
    if store.videos.get(videoId) is None:
        raise HTTPException(status_code=404, detail="Video not found")

    metadata = store.ai_metadata.get(videoId)
    return AIMetadataResponse(
        status=store.ai_metadata.status(videoId).value,
        metadata=AIMetadata.from_metadata(metadata) if metadata else None,
    )
