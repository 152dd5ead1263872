"""Product image storage on local disk, served back under /images."""
import time
from pathlib import Path

from core.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)


class ImageStore:
    """Opaque blob store: takes bytes, returns a public URL."""

    def __init__(self, upload_dir: str | Path, public_base_url: str) -> None:
        self.upload_dir = Path(upload_dir)
        self.public_base_url = public_base_url.rstrip("/")
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def _filename(self, field_name: str, original_name: str | None) -> str:
        suffix = Path(original_name or "").suffix
        return f"{field_name}_{int(time.time() * 1000)}{suffix}"

    def save(self, content: bytes, original_name: str | None, field_name: str = "product") -> str:
        filename = self._filename(field_name, original_name)
        (self.upload_dir / filename).write_bytes(content)
        logger.info("Stored upload %s (%d bytes)", sanitize_string_for_logging(filename), len(content))
        return self.url_for(filename)

    def url_for(self, filename: str) -> str:
        return f"{self.public_base_url}/images/{filename}"
