"""Single-address geocoding endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import GeocodeRequest, GeocodeResponse
from ...services.geocoding.client import GeocoderClient

router = APIRouter(tags=["geocoding"])


@router.post("/geocode", response_model=GeocodeResponse, status_code=status.HTTP_200_OK)
def geocode(payload: GeocodeRequest) -> GeocodeResponse:
    if not payload.address.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing address")
    try:
        with GeocoderClient() as client:
            result = client.geocode(payload.address)
    except Exception as exc:
        logging.exception(f"Geocode error for '{payload.address}': {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to geocode address: {str(exc)}"
        ) from exc

    if result is None:
        return GeocodeResponse(success=False, error="Address not found")
    return GeocodeResponse(
        success=True,
        lat=result.lat,
        lng=result.lng,
        source=result.source,
        approximate=result.approximate,
    )
