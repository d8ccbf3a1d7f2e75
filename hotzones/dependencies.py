# hotzones/dependencies.py
# FastAPI dependency providers
# - everything is built once in create_app and kept on app.state

from fastapi import Request

from hotzones.config import Settings
from hotzones.services import CheckInService, CommentService, FeedService, VideoUploadService
from hotzones.store import DataStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DataStore:
    return request.app.state.store


def get_checkin_service(request: Request) -> CheckInService:
    return request.app.state.checkin_service


def get_upload_service(request: Request) -> VideoUploadService:
    return request.app.state.upload_service


def get_feed_service(request: Request) -> FeedService:
    return request.app.state.feed_service


def get_comment_service(request: Request) -> CommentService:
    return request.app.state.comment_service
