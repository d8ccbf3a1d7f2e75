# hotzones/routers/heatmap.py
# Map data
# - heatmap: zones with read-time decayed intensity and stability
# - heatmap-pulse: per-zone pulse signals from recent uploads
# - proximal-streams: active check-ins near a point

from typing import Optional

from fastapi import APIRouter, Depends, Query

from hotzones.config import Settings
from hotzones.dependencies import get_settings, get_store
from hotzones.geo import decayed_intensity, format_distance, zone_stability
from hotzones.models import GeoLocation
from hotzones.pulse import calculate_pulses
from hotzones.schemas import (
    HeatBubble,
    HeatmapResponse,
    ProximalStreamsResponse,
    Pulse,
    PulseResponse,
    Stream,
)
from hotzones.store import DataStore

router = APIRouter()


@router.get("/heatmap", response_model=HeatmapResponse)
def get_heatmap(store: DataStore = Depends(get_store)):
    now = store.now()
    bubbles = [
        HeatBubble.from_zone(
            zone,
            intensity=decayed_intensity(zone, now),
            stability=zone_stability(zone.last_activity, zone.intensity, now).value,
        )
        for zone in store.zones.list()
    ]
    return HeatmapResponse(bubbles=bubbles)


@router.get("/heatmap-pulse", response_model=PulseResponse)
def get_heatmap_pulse(store: DataStore = Depends(get_store), settings: Settings = Depends(get_settings)):
    signals = calculate_pulses(store.zones, store.videos, settings, store.now())
    return PulseResponse(pulseData=[Pulse.from_signal(s) for s in signals])


@router.get("/proximal-streams", response_model=ProximalStreamsResponse)
def get_proximal_streams(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lng: float = Query(..., ge=-180.0, le=180.0),
    maxDistance: Optional[float] = Query(None, gt=0),
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    max_distance = maxDistance if maxDistance is not None else settings.PROXIMAL_MAX_DISTANCE_M
    streams = store.sessions.nearby(GeoLocation(lat=lat, lng=lng), max_distance, store.now())
    return ProximalStreamsResponse(
        streams=[Stream.from_stream(s, format_distance(s.distance)) for s in streams]
    )
