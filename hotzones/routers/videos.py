# hotzones/routers/videos.py
# Video endpoints
# - feed of active videos (optionally per zone)
# - multipart upload
# - serving stored files until the storage TTL runs out

import mimetypes
import os
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse

from hotzones.dependencies import get_feed_service, get_store, get_upload_service
from hotzones.schemas import UploadResponse, VideosResponse
from hotzones.services import FeedService, VideoUploadService
from hotzones.store import DataStore

router = APIRouter()


@router.get("/videos", response_model=VideosResponse)
def get_videos(
    zoneId: Optional[str] = Query(None, description="Only videos assigned to this zone"),
    service: FeedService = Depends(get_feed_service),
):
    return VideosResponse(videos=service.list_videos(zoneId))


@router.post("/upload-video", response_model=UploadResponse)
def upload_video(
    video: UploadFile = File(...),
    sessionId: str = Form(...),
    duration: float = Form(...),
    service: VideoUploadService = Depends(get_upload_service),
):
    stored = service.upload(video, sessionId, duration)
    return UploadResponse(videoId=stored.id, url=f"/api/video/{stored.id}", zoneId=stored.zone_id)


@router.get("/video/{video_id}")
def get_video_file(video_id: str, store: DataStore = Depends(get_store)):
    video = store.videos.get(video_id)
    if video is None:
        raise HTTPException(status_code=404, detail="Video not found")
    if store.videos.is_expired(video):
        raise HTTPException(status_code=410, detail="Video expired")
    if not video.file_path or not os.path.exists(video.file_path):
        raise HTTPException(status_code=404, detail="Video file not found")

    media_type = mimetypes.guess_type(video.file_path)[0] or "video/webm"
    return FileResponse(video.file_path, media_type=media_type, filename=video.filename)
