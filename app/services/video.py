"""
Mux video hosting helpers for chapter videos.
"""

from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import NamedTuple, Protocol

import httpx

from app.core.config import Settings, get_settings
from app.core.error_codes import ErrorCode
from app.core.errors import ApiError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class VideoAssetRef(NamedTuple):
    asset_id: str
    playback_id: str | None


class VideoAssetService(Protocol):
    def create_asset(self, source_url: str) -> VideoAssetRef: ...

    def delete_asset(self, asset_id: str) -> None: ...


class MuxVideoService:
    """Creates and deletes externally hosted video assets on Mux."""

    def __init__(self, settings: Settings, client: httpx.Client | None = None) -> None:
        self._settings = settings
        self._client = client or httpx.Client(
            base_url=settings.mux_base_url,
            auth=(settings.mux_token_id, settings.mux_token_secret),
            timeout=settings.mux_request_timeout,
        )

    def create_asset(self, source_url: str) -> VideoAssetRef:
        """
        Create a public asset from source_url.
        Transport errors and 429/5xx responses are retried with exponential backoff.
        """
        s = self._settings
        payload = {"input": [{"url": source_url}], "playback_policy": ["public"]}
        attempts = max(1, s.video_create_max_attempts)

        for attempt in range(attempts):
            try:
                resp = self._client.post("/video/v1/assets", json=payload)
            except httpx.TransportError as exc:
                if attempt + 1 >= attempts:
                    raise ApiError(ErrorCode.VIDEO_HOST_FAILED) from exc
                logger.warning("Mux asset create failed (%s), retrying", exc)
                self._backoff(attempt)
                continue

            if resp.status_code in RETRYABLE_STATUS and attempt + 1 < attempts:
                logger.warning("Mux asset create returned %s, retrying", resp.status_code)
                self._backoff(attempt)
                continue
            if resp.is_error:
                logger.error("Mux asset create failed: %s %s", resp.status_code, resp.text[:200])
                raise ApiError(ErrorCode.VIDEO_HOST_FAILED)

            data = resp.json().get("data") or {}
            asset_id = data.get("id")
            if not asset_id:
                raise ApiError(ErrorCode.VIDEO_HOST_FAILED, "Video host returned no asset id")
            playback_ids = data.get("playback_ids") or []
            playback_id = playback_ids[0].get("id") if playback_ids else None
            logger.info("Created Mux asset %s", asset_id)
            return VideoAssetRef(asset_id=asset_id, playback_id=playback_id)

        raise ApiError(ErrorCode.VIDEO_HOST_FAILED)

    def delete_asset(self, asset_id: str) -> None:
        """Delete an asset. An asset that is already gone counts as deleted."""
        try:
            resp = self._client.delete(f"/video/v1/assets/{asset_id}")
        except httpx.TransportError as exc:
            raise ApiError(ErrorCode.VIDEO_HOST_FAILED) from exc

        if resp.status_code == 404:
            logger.info("Mux asset %s already deleted", asset_id)
            return
        if resp.is_error:
            logger.error("Mux asset delete failed: %s %s", resp.status_code, resp.text[:200])
            raise ApiError(ErrorCode.VIDEO_HOST_FAILED)
        logger.info("Deleted Mux asset %s", asset_id)

    def _backoff(self, attempt: int) -> None:
        delay = self._settings.video_retry_backoff_seconds * (2**attempt)
        if delay > 0:
            time.sleep(delay)


@lru_cache(maxsize=1)
def get_video_service() -> VideoAssetService:
    return MuxVideoService(get_settings())
