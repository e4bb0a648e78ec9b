"""
Active hazard feed.

Merges two collaborator endpoints of the GreenCommute backend:
- traffic cameras whose latest AI analysis flagged a hazard (sensor)
- community reports that have not been resolved

Both are read-only views over caches refreshed elsewhere, so every read
may be stale.
"""

import asyncio
import logging
from typing import Optional, TypeVar

import httpx
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import ProviderUnavailable
from ..models.commute import HazardOrigin, HazardPoint

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# Severity assigned to community reports by type
REPORT_SEVERITY = {
    "flooding": 7,
    "obstruction": 6,
    "pothole": 5,
    "blocked_bike_lane": 4,
    "broken_charger": 3,
    "other": 4,
}
DEFAULT_REPORT_SEVERITY = 4


class _CameraStatus(BaseModel):
    hazard: bool = True
    type: str
    severity: float = Field(ge=0, le=10)
    gemini_explanation: str = Field(default="", alias="geminiExplanation")


class _Camera(BaseModel):
    cam_id: str = Field(alias="camId")
    location_name: str = Field(default="", alias="locationName")
    lat: float
    lng: float
    current_status: _CameraStatus = Field(alias="currentStatus")


class _Envelope(BaseModel):
    data: list[dict] = []


class _Report(BaseModel):
    report_id: str = Field(alias="reportId")
    type: str
    description: Optional[str] = None
    lat: float
    lng: float
    status: str


class HazardFeedClient:
    """Reads active hazards from the camera and community-report services."""

    PROVIDER = "hazard_feed"

    def __init__(self, base_url: str, timeout: float = 10.0):
        if not base_url:
            raise ValueError("Hazard feed base URL is required")
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout)

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def test_connection(self) -> bool:
        """Test connectivity to both sub-feeds."""
        try:
            await asyncio.gather(self.get_camera_hazards(), self.get_report_hazards())
            return True
        except Exception:
            return False

    async def _get(self, path: str) -> list[dict]:
        try:
            response = await self._client.get(f"{self.base_url}{path}")
            response.raise_for_status()
            return _Envelope.model_validate(response.json()).data
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderUnavailable(self.PROVIDER, f"{path}: {e}") from e

    @staticmethod
    def _parse_records(records: list[dict], model: type[T], source: str) -> list[T]:
        """Validate records one at a time, skipping (and logging) invalid ones."""
        parsed = []
        for index, record in enumerate(records):
            try:
                parsed.append(model.model_validate(record))
            except ValidationError as e:
                logger.warning(
                    f"Skipping invalid {source} record {index}: {e.error_count()} error(s)"
                )
        return parsed

    async def get_camera_hazards(self) -> list[HazardPoint]:
        """Hazards currently flagged by traffic camera analysis."""
        records = await self._get("/api/cameras/hazards/active")
        cameras = self._parse_records(records, _Camera, "camera")

        return [
            HazardPoint(
                id=f"cam-{cam.cam_id}",
                lat=cam.lat,
                lng=cam.lng,
                category=cam.current_status.type,
                severity=round(cam.current_status.severity),
                description=f"{cam.location_name}: {cam.current_status.gemini_explanation}",
                origin=HazardOrigin.SENSOR,
            )
            for cam in cameras
            if cam.current_status.hazard
        ]

    async def get_report_hazards(self) -> list[HazardPoint]:
        """Community reports that are still open (pending or verified)."""
        records = await self._get("/api/reports")
        reports = self._parse_records(records, _Report, "report")

        return [
            HazardPoint(
                id=f"report-{report.report_id}",
                lat=report.lat,
                lng=report.lng,
                category=report.type,
                severity=REPORT_SEVERITY.get(report.type, DEFAULT_REPORT_SEVERITY),
                description=report.description or f"Community report: {report.type}",
                origin=HazardOrigin.COMMUNITY_REPORT,
            )
            for report in reports
            if report.status != "resolved"
        ]

    async def get_active_hazards(self) -> list[HazardPoint]:
        """
        Merge camera and report hazards.

        One failing sub-feed is logged and skipped.

        Raises:
            ProviderUnavailable: only when both sub-feeds fail
        """
        results = await asyncio.gather(
            self.get_camera_hazards(),
            self.get_report_hazards(),
            return_exceptions=True,
        )

        hazards: list[HazardPoint] = []
        failures = []
        for source, result in zip(("cameras", "reports"), results):
            if isinstance(result, ProviderUnavailable):
                logger.warning(f"Hazard sub-feed {source} failed: {result.reason}")
                failures.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                hazards.extend(result)

        if len(failures) == len(results):
            raise ProviderUnavailable(self.PROVIDER, "camera and report feeds both failed")

        return hazards
