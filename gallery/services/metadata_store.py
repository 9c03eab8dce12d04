"""Database operations for albums and image metadata."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, col, create_engine, select

from gallery.models import Album, Image
from gallery.services.errors import AlbumNotFoundError, ImageNotFoundError, MetadataStoreError
from gallery.services.exif import UNKNOWN, ExifFields

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str) -> Engine:
	connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
	return create_engine(database_url, connect_args=connect_args)


def init_db(engine: Engine) -> None:
	SQLModel.metadata.create_all(engine)


def _mode_camera_model(album_id: int):
	return (
		select(Image.camera_model)
		.where(Image.album_id == album_id)
		.where(col(Image.camera_model).is_not(None), Image.camera_model != UNKNOWN)
		.group_by(Image.camera_model)
		.order_by(func.count().desc(), func.min(Image.id))
		.limit(1)
	)


def _mode_lens_model(album_id: int):
	return (
		select(Image.lens_model)
		.where(Image.album_id == album_id)
		.where(col(Image.lens_model).is_not(None), Image.lens_model != UNKNOWN)
		.group_by(Image.lens_model)
		.order_by(func.count().desc(), func.min(Image.id))
		.limit(1)
	)


def _mode_aperture(album_id: int):
	return (
		select(Image.aperture)
		.where(Image.album_id == album_id)
		.where(col(Image.aperture).is_not(None), Image.aperture != UNKNOWN)
		.group_by(Image.aperture)
		.order_by(func.count().desc(), func.min(Image.id))
		.limit(1)
	)


class MetadataStore:
	"""Persists albums and per-image EXIF metadata."""

	def __init__(self, engine: Engine):
		self.engine = engine

	@contextmanager
	def _session(self) -> Iterator[Session]:
		try:
			with Session(self.engine, expire_on_commit=False) as session:
				yield session
		except SQLAlchemyError as e:
			raise MetadataStoreError(f"Database operation failed: {e}") from e

	def _get_album_or_raise(self, session: Session, album_id: int) -> Album:
		album = session.get(Album, album_id)
		if album is None:
			raise AlbumNotFoundError(album_id)
		return album

	def _refresh_image_count(self, session: Session, album: Album) -> None:
		count = session.exec(
			select(func.count()).select_from(Image).where(Image.album_id == album.id)
		).one()
		album.num_images = count
		session.add(album)

	# Albums

	def create_album(self, name: str, date: str, description: Optional[str] = None) -> Album:
		with self._session() as session:
			album = Album(name=name, description=description, date=date)
			session.add(album)
			session.commit()
			session.refresh(album)
			logger.info("Created album %s (%s)", album.id, name)
			return album

	def get_album(self, album_id: int) -> Optional[Album]:
		with self._session() as session:
			return session.get(Album, album_id)

	def list_albums(self) -> List[Tuple[Album, Optional[str]]]:
		"""Albums newest first, each paired with the filename of its oldest image."""
		cover = (
			select(Image.filename)
			.where(Image.album_id == Album.id)
			.order_by(col(Image.date_created), col(Image.id))
			.limit(1)
			.correlate(Album)
			.scalar_subquery()
		)
		with self._session() as session:
			rows = session.exec(select(Album, cover).order_by(col(Album.date).desc(), col(Album.id).desc())).all()
			return [(album, filename) for album, filename in rows]

	def update_album(
		self,
		album_id: int,
		name: Optional[str] = None,
		description: Optional[str] = None,
		date: Optional[str] = None,
	) -> Album:
		with self._session() as session:
			album = self._get_album_or_raise(session, album_id)
			if name is not None:
				album.name = name
			if description is not None:
				album.description = description
			if date is not None:
				album.date = date
			session.add(album)
			session.commit()
			session.refresh(album)
			return album

	def delete_album_record(self, album_id: int) -> None:
		"""Delete the album row and every image row it owns."""
		with self._session() as session:
			album = self._get_album_or_raise(session, album_id)
			for image in session.exec(select(Image).where(Image.album_id == album_id)).all():
				session.delete(image)
			session.delete(album)
			session.commit()
			logger.info("Deleted album record %s", album_id)

	def get_album_mode_metadata(self, album_id: int) -> Dict[str, Optional[str]]:
		with self._session() as session:
			album = self._get_album_or_raise(session, album_id)
			return {
				"camera_model": album.camera_model,
				"lens_model": album.lens_model,
				"aperture": album.aperture,
			}

	def recompute_album_mode_metadata(self, album_id: int) -> Album:
		"""Store the most frequent camera model, lens model and aperture on the album row."""
		with self._session() as session:
			album = self._get_album_or_raise(session, album_id)
			album.camera_model = session.exec(_mode_camera_model(album_id)).first()
			album.lens_model = session.exec(_mode_lens_model(album_id)).first()
			album.aperture = session.exec(_mode_aperture(album_id)).first()
			session.add(album)
			session.commit()
			session.refresh(album)
			return album

	# Images

	def insert_image(self, album_id: int, filename: str, file_size: int, exif: ExifFields) -> int:
		with self._session() as session:
			album = self._get_album_or_raise(session, album_id)
			image = Image(album_id=album_id, filename=filename, file_size=file_size, **exif.as_dict())
			session.add(image)
			session.flush()
			self._refresh_image_count(session, album)
			session.commit()
			return image.id

	def get_image(self, image_id: int) -> Optional[Image]:
		with self._session() as session:
			return session.get(Image, image_id)

	def list_images(self, album_id: int) -> List[Image]:
		with self._session() as session:
			return list(session.exec(select(Image).where(Image.album_id == album_id).order_by(col(Image.id))).all())

	def delete_image(self, image_id: int) -> Image:
		"""Delete one image row and refresh its album's count. Returns the deleted row."""
		with self._session() as session:
			image = session.get(Image, image_id)
			if image is None:
				raise ImageNotFoundError(image_id)
			session.delete(image)
			session.flush()
			album = session.get(Album, image.album_id)
			if album is not None:
				self._refresh_image_count(session, album)
			session.commit()
			return image
