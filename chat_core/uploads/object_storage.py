"""Object storage client (Cloudinary signed upload API)."""

import hashlib
import time
from typing import Protocol

import httpx

from ..config import DEFAULT_UPLOAD_FOLDER
from ..errors import UpstreamError

CLOUDINARY_API_URL = "https://api.cloudinary.com/v1_1"


class IObjectStorage(Protocol):
    """Stores uploaded bytes and returns a public URL."""

    async def upload(self, filename: str, content: bytes, mime_type: str) -> str:
        """Upload one file, return its URL."""
        ...


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Cloudinary signature: sha1 over sorted key=value pairs plus the secret."""
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryStorage:
    """Uploads files with resource_type=auto into a fixed folder."""

    def __init__(
        self,
        cloud_name: str | None,
        api_key: str | None,
        api_secret: str | None,
        folder: str = DEFAULT_UPLOAD_FOLDER,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._folder = folder
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def configured(self) -> bool:
        return bool(self._cloud_name and self._api_key and self._api_secret)

    async def upload(self, filename: str, content: bytes, mime_type: str) -> str:
        if not self.configured:
            raise UpstreamError("Object storage is not configured")

        params = {"folder": self._folder, "timestamp": str(int(time.time()))}
        data = {
            **params,
            "api_key": self._api_key,
            "signature": sign_params(params, self._api_secret),
        }
        url = f"{CLOUDINARY_API_URL}/{self._cloud_name}/auto/upload"

        try:
            response = await self._client.post(
                url, data=data, files={"file": (filename, content, mime_type)}
            )
            response.raise_for_status()
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(f"Upload of {filename} failed: {e}") from e

        secure_url = result.get("secure_url")
        if not secure_url:
            raise UpstreamError(f"Upload of {filename} returned no URL")
        return secure_url

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
