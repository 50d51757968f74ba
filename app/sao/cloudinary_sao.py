from __future__ import annotations

import hashlib
import time
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx
import structlog

from app.core.config import settings

# Parameters Cloudinary excludes from the request signature
_UNSIGNED_PARAMS = {"file", "api_key", "resource_type", "cloud_name", "signature"}


def asset_public_id(image_url: str, folder: Optional[str] = None) -> str:
    """Recover the upload public id from a delivered asset URL.

    ``https://res.cloudinary.com/demo/image/upload/v1/products/abc123.jpg``
    becomes ``products/abc123``.
    """
    folder = folder if folder is not None else settings.asset_folder
    last_segment = urlparse(image_url).path.rstrip("/").split("/")[-1]
    name = last_segment.split(".")[0]
    return f"{folder}/{name}" if folder else name


class CloudinarySAO:
    """Service Access Object for the Cloudinary upload REST API."""

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        request_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._cloud_name = cloud_name or settings.cloudinary_cloud_name
        self._api_key = api_key or settings.cloudinary_api_key
        self._api_secret = api_secret or settings.cloudinary_api_secret
        self._base_url = (base_url or settings.cloudinary_api_base_url).rstrip("/")
        self._timeout = request_timeout or settings.asset_request_timeout
        self._transport = transport
        self._logger = structlog.get_logger().bind(component="CloudinarySAO")

    @property
    def base_url(self) -> str:
        return f"{self._base_url}/{self._cloud_name}/image"

    def sign(self, params: Dict[str, Any]) -> str:
        """SHA-1 signature over the sorted ``key=value`` pairs plus the API secret."""
        to_sign = "&".join(
            f"{key}={params[key]}"
            for key in sorted(params)
            if key not in _UNSIGNED_PARAMS and params[key] not in (None, "")
        )
        return hashlib.sha1(f"{to_sign}{self._api_secret}".encode("utf-8")).hexdigest()

    def _signed_form(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if not (self._cloud_name and self._api_key and self._api_secret):
            raise RuntimeError("Cloudinary credentials are not configured")
        params = {**params, "timestamp": int(time.time())}
        return {**params, "api_key": self._api_key, "signature": self.sign(params)}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def upload(self, file: str, folder: Optional[str] = None) -> Dict[str, Any]:
        """
        Upload an image (data URI, remote URL or base64 payload) into ``folder``.
        Returns the Cloudinary resource description, including ``secure_url``.
        """
        folder = folder or settings.asset_folder
        form = self._signed_form({"folder": folder})
        form["file"] = file

        async with self._client() as client:
            response = await client.post("/upload", data=form)
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                self._logger.error(
                    "Failed to upload asset",
                    folder=folder,
                    status_code=exc.response.status_code,
                    response_body=exc.response.text,
                )
                raise

        result = response.json()
        self._logger.info("Uploaded asset", public_id=result.get("public_id"), folder=folder)
        return result

    async def destroy(self, public_id: str) -> Dict[str, Any]:
        """Delete an uploaded image by its public id."""
        form = self._signed_form({"public_id": public_id})

        async with self._client() as client:
            response = await client.post("/destroy", data=form)
            response.raise_for_status()

        result = response.json()
        if result.get("result") != "ok":
            raise RuntimeError(f"Cloudinary destroy returned {result.get('result')!r} for {public_id}")
        return result


cloudinary_sao = CloudinarySAO()
