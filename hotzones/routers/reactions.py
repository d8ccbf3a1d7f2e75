# hotzones/routers/reactions.py
# Anonymous reactions (eyes / risky / resolved / unclear)

from fastapi import APIRouter, Depends, HTTPException, Query

from hotzones.dependencies import get_store
from hotzones.models import REACTION_TYPES
from hotzones.schemas import Reactions, ReactionRequest, ReactionsResponse
from hotzones.store import DataStore

router = APIRouter()


@router.get("/reactions", response_model=ReactionsResponse)
def get_reactions(videoId: str = Query(..., min_length=1), store: DataStore = Depends(get_store)):
    reactions = store.engagement.get_reactions(videoId)
    if reactions is None:
        raise HTTPException(status_code=404, detail="Video not found or expired")
    return ReactionsResponse(reactions=Reactions.from_counts(reactions))


@router.post("/reactions", response_model=ReactionsResponse)
def add_reaction(request: ReactionRequest, store: DataStore = Depends(get_store)):
    if request.reactionType not in REACTION_TYPES:
        raise HTTPException(status_code=400, detail="Invalid reaction type")

    reactions = store.engagement.add_reaction(request.videoId, request.reactionType)
    if reactions is None:
        raise HTTPException(status_code=404, detail="Video not found or expired")
    return ReactionsResponse(reactions=Reactions.from_counts(reactions))
