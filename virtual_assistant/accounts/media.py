"""
Assistant image upload to Cloudinary.
"""

import hashlib
import logging
import time
from pathlib import Path
from typing import Optional

import httpx

from virtual_assistant.config import MediaConfig

logger = logging.getLogger(__name__)

UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/auto/upload"


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Cloudinary request signature: sha1 of sorted ``k=v`` pairs + secret."""
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1((to_sign + api_secret).encode()).hexdigest()


class MediaUploader:
    """
    Uploads local files to Cloudinary and returns their public URL.

    Usage:
        uploader = MediaUploader(get_config().media)
        url = uploader.upload(Path("/tmp/avatar.png"))
    """

    def __init__(self, config: MediaConfig, client: Optional[httpx.Client] = None):
        self.config = config
        self._client = client or httpx.Client(timeout=config.timeout)

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def upload(self, path: Path) -> Optional[str]:
        """
        Upload a file. The local file is removed whether or not it succeeds.

        Args:
            path: Local file to upload

        Returns:
            Secure URL of the uploaded file, or None on failure
        """
        path = Path(path)
        try:
            if not self.enabled:
                logger.error("Media upload requested but Cloudinary is not configured")
                return None

            params = {"timestamp": str(int(time.time()))}
            data = {
                **params,
                "api_key": self.config.api_key,
                "signature": sign_params(params, self.config.api_secret),
            }
            with open(path, "rb") as f:
                response = self._client.post(
                    UPLOAD_URL.format(cloud_name=self.config.cloud_name),
                    data=data,
                    files={"file": (path.name, f)},
                )
            response.raise_for_status()
            url = response.json().get("secure_url")
            if url:
                logger.info("Uploaded %s", path.name)
            return url
        except (httpx.HTTPError, OSError, ValueError) as e:
            logger.error("Cloudinary upload error: %s", e)
            return None
        finally:
            path.unlink(missing_ok=True)

    def close(self) -> None:
        self._client.close()
