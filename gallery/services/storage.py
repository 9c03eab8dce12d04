from __future__ import annotations

import asyncio
import logging
import shutil
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class ImageQuality(str, Enum):
	FULL = "full"
	OPTIMIZED = "optimized"
	THUMBNAIL = "thumbnail"


class AlbumStorage:
	"""
	Filesystem layout for uploaded images: <root>/<album_id>/<quality>/<filename>.
	Static file serving reads this tree directly.
	"""

	def __init__(self, root: Path):
		self.root = Path(root)

	def album_dir(self, album_id: int) -> Path:
		return self.root / str(album_id)

	def image_path(self, album_id: int, quality: ImageQuality, filename: str) -> Path:
		return self.album_dir(album_id) / ImageQuality(quality).value / filename

	async def create_album_directory(self, album_id: int) -> None:
		base = self.album_dir(album_id)
		for quality in ImageQuality:
			await asyncio.to_thread((base / quality.value).mkdir, parents=True, exist_ok=True)

	async def save_image(self, data: bytes, filename: str, album_id: int, quality: ImageQuality) -> Path:
		path = self.image_path(album_id, quality, filename)
		await asyncio.to_thread(path.write_bytes, data)
		return path

	async def delete_album_directory(self, album_id: int) -> None:
		path = self.album_dir(album_id)
		if path.exists():
			await asyncio.to_thread(shutil.rmtree, path)

	async def delete_image_files(self, album_id: int, filename: str) -> int:
		"""Remove every quality of one image. Returns how many files were removed."""
		removed = 0
		for quality in ImageQuality:
			path = self.image_path(album_id, quality, filename)
			try:
				await asyncio.to_thread(path.unlink)
				removed += 1
			except FileNotFoundError:
				logger.warning("Image file already missing: %s", path)
		return removed
