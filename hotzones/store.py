# hotzones/store.py
# In-memory data store
# - wires the registries together around one clock and one Settings object
# - constructed once at startup and handed to routers through app.state
# - state is lost on restart

from __future__ import annotations

import logging
from typing import Optional

from hotzones.config import Settings
from hotzones.engagement import AIMetadataStore, EngagementStore
from hotzones.registries import SessionRegistry, VideoRegistry, ZoneRegistry
from hotzones.utils import Clock, now_ms

logger = logging.getLogger(__name__)


class DataStore:
    def __init__(self, settings: Settings, clock: Clock = now_ms):
        self.settings = settings
        self.clock = clock
        self.sessions = SessionRegistry(settings, clock)
        self.zones = ZoneRegistry(settings, clock)
        self.videos = VideoRegistry(self.sessions, self.zones, settings, clock)
        self.engagement = EngagementStore(self.videos, settings, clock)
        self.ai_metadata = AIMetadataStore()

    def now(self) -> int:
        return self.clock()


def initialize_store(settings: Settings, clock: Optional[Clock] = None) -> DataStore:
    """Build the process-wide store and load seed zones if configured."""
    store = DataStore(settings, clock or now_ms)
    if settings.ZONE_SEED_FILE:
        store.zones.seed_from_file(settings.ZONE_SEED_FILE)
    logger.info("Data store ready (%d zones)", len(store.zones.list()))
    return store
