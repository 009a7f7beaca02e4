"""Image API schemas (``image.*`` methods)."""

from __future__ import annotations

from datetime import datetime

from pydantic import Base64Bytes, BaseModel, ConfigDict, Field

from remark_mongo.db.time import ZERO_TIME

from .common import PositionalParams


class SaveRequest(PositionalParams):
    """``[id, base64 data]`` pair sent with ``image.save_with_id``."""

    id: str
    data: Base64Bytes


class ImageIdRequest(PositionalParams):
    """Image id sent as the bare parameter of ``image.load`` and friends."""

    id: str


class CleanupRequest(PositionalParams):
    """Staging TTL in nanoseconds (Go ``time.Duration``)."""

    ttl: int


class StoreInfo(BaseModel):
    """Image store meta information."""

    first_staging_image_ts: datetime = Field(default=ZERO_TIME, alias="FirstStagingImageTS")

    model_config = ConfigDict(populate_by_name=True)
