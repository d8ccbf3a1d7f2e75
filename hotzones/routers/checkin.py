# hotzones/routers/checkin.py
# Check-in endpoint: opens an anonymous session at the caller's location

from fastapi import APIRouter, Depends

from hotzones.dependencies import get_checkin_service
from hotzones.schemas import CheckInRequest, CheckInResponse
from hotzones.services import CheckInService

router = APIRouter()


@router.post("/checkin", response_model=CheckInResponse)
def check_in(request: CheckInRequest, service: CheckInService = Depends(get_checkin_service)):
    """
    Create a check-in session.

    The session is what later grants upload location and comment rights; it is never
    refreshed, so clients check in again to renew.
    """
    session, zone = service.check_in(request)
    return CheckInResponse(sessionId=session.id, token=session.token, zoneId=zone.id)
