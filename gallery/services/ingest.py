from __future__ import annotations

import asyncio
import logging
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from gallery.services.errors import StorageError
from gallery.services.exif import ExifFields, extract_exif_metadata
from gallery.services.filenames import generate_unique_filename
from gallery.services.metadata_store import MetadataStore
from gallery.services.storage import AlbumStorage, ImageQuality
from gallery.services.transcoder import ProcessedImage, process_image

logger = logging.getLogger(__name__)

UploadedImage = Tuple[str, bytes]


@dataclass
class ImageOutcome:
	original_filename: str
	filename: str
	image_id: Optional[int] = None
	error: Optional[str] = None

	@property
	def ok(self) -> bool:
		return self.error is None


@dataclass
class IngestReport:
	album_id: int
	outcomes: List[ImageOutcome] = field(default_factory=list)

	@property
	def processed(self) -> int:
		return sum(1 for o in self.outcomes if o.ok)

	@property
	def failed(self) -> List[ImageOutcome]:
		return [o for o in self.outcomes if not o.ok]


class ImageIngestor:
	"""
	Runs one album's upload batch: every image is written, transcoded and
	recorded independently, then the album's mode metadata is refreshed once.

	Transcoding runs on a bounded pool; file and database I/O are not bounded.
	"""

	def __init__(
		self,
		store: MetadataStore,
		storage: AlbumStorage,
		transcode_pool: Optional[Executor] = None,
		max_workers: Optional[int] = None,
	):
		self.store = store
		self.storage = storage
		self._owns_pool = transcode_pool is None
		self.transcode_pool = transcode_pool or ThreadPoolExecutor(
			max_workers=max_workers, thread_name_prefix="transcode"
		)

	def close(self) -> None:
		if self._owns_pool:
			self.transcode_pool.shutdown(wait=True)

	async def ingest(self, album_id: int, images: Sequence[UploadedImage]) -> int:
		"""Process a batch and return how many images completed every step."""
		report = await self.ingest_with_report(album_id, images)
		return report.processed

	async def ingest_with_report(self, album_id: int, images: Sequence[UploadedImage]) -> IngestReport:
		try:
			await self.storage.create_album_directory(album_id)
		except OSError as e:
			logger.error("Failed to create album directory for album %s: %s", album_id, e)
			raise StorageError(f"Failed to create album directory for album {album_id}: {e}") from e

		start = time.perf_counter()
		outcomes = await asyncio.gather(
			*(self._ingest_one(album_id, name, data) for name, data in images)
		)
		report = IngestReport(album_id=album_id, outcomes=list(outcomes))
		logger.info(
			"Album %s: processed %d/%d images in %.2fs",
			album_id,
			report.processed,
			len(outcomes),
			time.perf_counter() - start,
		)

		await self._refresh_album_metadata(album_id)
		return report

	async def _ingest_one(self, album_id: int, original_filename: str, data: bytes) -> ImageOutcome:
		filename = generate_unique_filename(original_filename)
		outcome = ImageOutcome(original_filename=original_filename, filename=filename)
		written: List[Path] = []
		try:
			exif = extract_exif_metadata(data) or ExifFields.unknown()

			# Keep the original on disk before anything that can fail on pixel data
			written.append(await self.storage.save_image(data, filename, album_id, ImageQuality.FULL))

			processed = await self._transcode(data)

			results = await asyncio.gather(
				self.storage.save_image(processed.optimized, filename, album_id, ImageQuality.OPTIMIZED),
				self.storage.save_image(processed.thumbnail, filename, album_id, ImageQuality.THUMBNAIL),
				return_exceptions=True,
			)
			written.extend(r for r in results if isinstance(r, Path))
			for r in results:
				if isinstance(r, BaseException):
					raise r

			outcome.image_id = await asyncio.to_thread(
				self.store.insert_image, album_id, filename, processed.original_size, exif
			)
		except Exception as e:
			logger.exception("Failed to ingest %s (%s) into album %s", original_filename, filename, album_id)
			outcome.error = str(e) or e.__class__.__name__
			await self._discard(written)
		return outcome

	async def _transcode(self, data: bytes) -> ProcessedImage:
		loop = asyncio.get_running_loop()
		return await loop.run_in_executor(self.transcode_pool, process_image, data)

	async def _discard(self, paths: List[Path]) -> None:
		for path in paths:
			try:
				await asyncio.to_thread(path.unlink, missing_ok=True)
			except OSError as e:
				logger.error("Failed to remove partial upload %s: %s", path, e)

	async def _refresh_album_metadata(self, album_id: int) -> None:
		try:
			await asyncio.to_thread(self.store.recompute_album_mode_metadata, album_id)
		except Exception:
			# Inserted rows stay; mode fields are refreshed on the next successful run
			logger.exception("Failed to update mode metadata for album %s", album_id)
