"""Built-in sample photos, used in development and when no catalog is available."""

from __future__ import annotations

import random

import structlog

from campusguessr.core.models import LocationImage, Point

log = structlog.get_logger()

SAMPLE_IMAGES: list[dict] = [
    {
        "id": "sample-1",
        "url": "https://images.unsplash.com/photo-1562774053-701939374585?w=800&q=80",
        "correctLocation": {"x": 35, "y": 45},
        "correctFloor": 2,
        "description": "Main hallway near the library",
    },
    {
        "id": "sample-2",
        "url": "https://images.unsplash.com/photo-1541829070764-84a7d30dd3f3?w=800&q=80",
        "correctLocation": {"x": 65, "y": 30},
        "correctFloor": 1,
        "description": "Science building entrance",
    },
    {
        "id": "sample-3",
        "url": "https://images.unsplash.com/photo-1580582932707-520aed937b7b?w=800&q=80",
        "correctLocation": {"x": 80, "y": 60},
        "correctFloor": 1,
        "description": "Gymnasium interior",
    },
    {
        "id": "sample-4",
        "url": "https://images.unsplash.com/photo-1497633762265-9d179a990aa6?w=800&q=80",
        "correctLocation": {"x": 25, "y": 75},
        "correctFloor": 3,
        "description": "Arts center studio",
    },
    {
        "id": "sample-5",
        "url": "https://images.unsplash.com/photo-1519452635265-7b1fbfd1e4e0?w=800&q=80",
        "correctLocation": {"x": 50, "y": 50},
        "correctFloor": 2,
        "description": "Outdoor courtyard view",
    },
]


def _parse_point(data) -> Point | None:
    if not isinstance(data, dict):
        return None
    x, y = data.get("x"), data.get("y")
    if not isinstance(x, (int, float)) or not isinstance(y, (int, float)):
        return None
    return Point(x=float(x), y=float(y))


def parse_catalog_entry(data: dict) -> LocationImage:
    """Parse one catalog entry (the photo document format used by the web app).

    Missing or malformed ground truth is left as None rather than rejected.
    """
    floor = data.get("correctFloor")
    if isinstance(floor, bool) or not isinstance(floor, int):
        floor = None
    return LocationImage(
        image_ref=str(data.get("url") or data.get("id") or ""),
        location=_parse_point(data.get("correctLocation")),
        floor=floor,
        description=str(data.get("description", "")),
    )


class SampleLocationProvider:
    """LocationProvider that picks a random built-in sample photo."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._images = [parse_catalog_entry(entry) for entry in SAMPLE_IMAGES]

    def pick(self) -> LocationImage:
        return self._rng.choice(self._images)

    async def fetch_next_target(self) -> LocationImage:
        image = self.pick()
        log.debug("sample_image_picked", image=image.image_ref)
        return image
