# hotzones/routers/comments.py
# Proximity-gated comments
# - POST answers 400 / 403 / 404 / 429 on denial
# - GET never exposes session ids

from fastapi import APIRouter, Depends, Query

from hotzones.dependencies import get_comment_service
from hotzones.schemas import CommentItem, CommentRequest, CommentResponse, CommentsResponse
from hotzones.services import CommentService

router = APIRouter()


@router.get("/comments", response_model=CommentsResponse)
def get_comments(videoId: str = Query(..., min_length=1), service: CommentService = Depends(get_comment_service)):
    return CommentsResponse(comments=[CommentItem.from_comment(c) for c in service.list(videoId)])


@router.post("/comments", response_model=CommentResponse)
def post_comment(request: CommentRequest, service: CommentService = Depends(get_comment_service)):
    """
    Post a comment on a video.

    Allowed only from a check-in made within the freshness window, close to where the
    video was recorded, at most once per rate-limit window per session.
    """
    comment = service.post(request)
    return CommentResponse(comment=CommentItem.from_comment(comment))
