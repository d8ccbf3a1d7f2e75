# hotzones/routers/votes.py
# Up/down votes. The client remembers its own vote and reports the previous direction.

from fastapi import APIRouter, Depends, HTTPException, Query

from hotzones.dependencies import get_store
from hotzones.models import VOTE_DIRECTIONS
from hotzones.schemas import Votes, VoteRequest, VotesResponse
from hotzones.store import DataStore

router = APIRouter()


@router.get("/vote", response_model=VotesResponse)
def get_votes(videoId: str = Query(..., min_length=1), store: DataStore = Depends(get_store)):
    return VotesResponse(votes=Votes.from_counts(store.engagement.get_votes(videoId)))


@router.post("/vote", response_model=VotesResponse)
def cast_vote(request: VoteRequest, store: DataStore = Depends(get_store)):
    if request.direction not in VOTE_DIRECTIONS or request.previousDirection not in VOTE_DIRECTIONS:
        raise HTTPException(status_code=400, detail="Invalid vote data")

    votes = store.engagement.cast_vote(request.videoId, request.direction, request.previousDirection)
    if votes is None:
        raise HTTPException(status_code=404, detail="Video not found or expired")
    return VotesResponse(votes=Votes.from_counts(votes))
