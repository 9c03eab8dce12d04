from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from gallery.models import Album
from gallery.services.errors import AlbumNotFoundError, ImageNotFoundError, StorageError
from gallery.services.ingest import ImageIngestor, IngestReport, UploadedImage
from gallery.services.metadata_store import MetadataStore
from gallery.services.storage import AlbumStorage

logger = logging.getLogger(__name__)


class AlbumService:
	"""Album lifecycle: rows in the metadata store plus the files under the upload root."""

	def __init__(self, store: MetadataStore, storage: AlbumStorage, ingestor: ImageIngestor):
		self.store = store
		self.storage = storage
		self.ingestor = ingestor

	async def create_album(
		self,
		name: str,
		date: str,
		description: Optional[str],
		images: Sequence[UploadedImage],
	) -> Tuple[Album, IngestReport]:
		album = await asyncio.to_thread(self.store.create_album, name, date, description)
		try:
			report = await self.ingestor.ingest_with_report(album.id, images)
		except StorageError:
			# Nothing was written; do not leave an empty album behind
			await asyncio.to_thread(self.store.delete_album_record, album.id)
			raise
		return await self._reload(album.id), report

	async def update_album(
		self,
		album_id: int,
		name: Optional[str] = None,
		description: Optional[str] = None,
		date: Optional[str] = None,
		images: Sequence[UploadedImage] = (),
		delete_ids: Iterable[int] = (),
	) -> Tuple[Album, IngestReport, List[int]]:
		await self._reload(album_id)

		deleted: List[int] = []
		for image_id in delete_ids:
			image = await asyncio.to_thread(self.store.get_image, image_id)
			if image is None or image.album_id != album_id:
				logger.warning("Skipping delete of image %s: not in album %s", image_id, album_id)
				continue
			await self._remove_image(image.id, image.album_id, image.filename)
			deleted.append(image.id)

		await asyncio.to_thread(self.store.update_album, album_id, name, description, date)
		# Mode metadata is refreshed by the ingestor even when no image was added
		report = await self.ingestor.ingest_with_report(album_id, images)
		return await self._reload(album_id), report, deleted

	async def delete_album(self, album_id: int) -> None:
		await self._reload(album_id)
		await self.storage.delete_album_directory(album_id)
		await asyncio.to_thread(self.store.delete_album_record, album_id)
		logger.info("Deleted album %s", album_id)

	async def delete_image(self, image_id: int) -> Album:
		image = await asyncio.to_thread(self.store.get_image, image_id)
		if image is None:
			raise ImageNotFoundError(image_id)
		await self._remove_image(image.id, image.album_id, image.filename)
		await asyncio.to_thread(self.store.recompute_album_mode_metadata, image.album_id)
		return await self._reload(image.album_id)

	async def _remove_image(self, image_id: int, album_id: int, filename: str) -> None:
		await self.storage.delete_image_files(album_id, filename)
		await asyncio.to_thread(self.store.delete_image, image_id)

	async def _reload(self, album_id: int) -> Album:
		album = await asyncio.to_thread(self.store.get_album, album_id)
		if album is None:
			raise AlbumNotFoundError(album_id)
		return album
