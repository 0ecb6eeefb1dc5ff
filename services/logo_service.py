"""
Template logo loading.

Logos live in Supabase Storage at <bucket>/logos/<template>-logo.png.
Each is downloaded at most once per process; a logo that failed to load
is remembered as missing so the export carries on with a placeholder.
"""

from io import BytesIO
from typing import Optional

import structlog
from PIL import Image, UnidentifiedImageError

from config import get_admin_client, get_supabase_client, settings
from models.order_export import LogoAsset

logger = structlog.get_logger(__name__)


# Storage path and the box (width, height in px) each logo is scaled into
LOGO_CONFIG = {
    "hpi": {"path": "logos/hpi-logo.png", "max_size": (191, 60)},
    "generic": {"path": "logos/generic-logo.png", "max_size": (150, 50)},
}

_EXTENSIONS = {"PNG": "png", "JPEG": "jpeg"}


def has_logo_support(template_type: Optional[str]) -> bool:
    return (template_type or "").strip().lower() in LOGO_CONFIG


def fit_to_box(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """Scale (width, height) to fit the box, keeping the aspect ratio."""
    ratio = min(max_width / width, max_height / height)
    return max(1, round(width * ratio)), max(1, round(height * ratio))


class LogoCache:
    """
    Per-process logo cache.

    Created once at startup and shared by all requests. Two requests
    racing on a cold entry may both download; the result is the same.
    """

    def __init__(self, bucket: Optional[str] = None, client=None):
        self.bucket = bucket or settings.logo_bucket
        self._client = client
        self._entries: dict[str, Optional[LogoAsset]] = {}

    @property
    def client(self):
        if self._client is None:
            self._client = get_admin_client() or get_supabase_client()
        return self._client

    def load(self, template_type: Optional[str]) -> Optional[LogoAsset]:
        """Logo for a template, or None when it has none or can't be read."""
        key = (template_type or "").strip().lower()
        if key not in LOGO_CONFIG:
            return None

        if key in self._entries:
            return self._entries[key]

        logo = self._fetch(key)
        self._entries[key] = logo
        return logo

    def has_logo_support(self, template_type: Optional[str]) -> bool:
        return has_logo_support(template_type)

    def clear(self) -> None:
        self._entries.clear()
        logger.info("logo_cache_cleared")

    def _fetch(self, key: str) -> Optional[LogoAsset]:
        config = LOGO_CONFIG[key]
        try:
            buffer = self.client.storage.from_(self.bucket).download(config["path"])
            with Image.open(BytesIO(buffer)) as image:
                extension = _EXTENSIONS.get(image.format)
                natural_width, natural_height = image.size

            if extension is None:
                logger.warning("logo_format_unsupported", template_type=key, path=config["path"])
                return None

            width, height = fit_to_box(natural_width, natural_height, *config["max_size"])
            logger.info(
                "logo_loaded",
                template_type=key,
                bytes=len(buffer),
                width=width,
                height=height,
            )
            return LogoAsset(buffer=bytes(buffer), extension=extension, width=width, height=height)

        except UnidentifiedImageError:
            logger.warning("logo_unreadable", template_type=key, path=config["path"])
            return None
        except Exception as e:
            logger.warning(
                "logo_load_failed",
                template_type=key,
                path=config["path"],
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
