"""Test configuration for pytest."""

from io import BytesIO
from pathlib import Path
from typing import Callable, Generator, Optional

import piexif
import pytest
from PIL import Image

from gallery.services.ingest import ImageIngestor
from gallery.services.metadata_store import MetadataStore, create_db_engine, init_db
from gallery.services.storage import AlbumStorage


def make_jpeg(
	size=(64, 48),
	color="red",
	make: Optional[str] = None,
	model: Optional[str] = None,
	lens: Optional[str] = None,
	fnumber=None,
	exposure=None,
	focal_length=None,
	iso: Optional[int] = None,
	light_source: Optional[int] = None,
	date_original: Optional[str] = None,
	orientation: Optional[int] = None,
	extra_exif: Optional[dict] = None,
) -> bytes:
	"""Encode a solid-colour JPEG, optionally carrying an EXIF block."""
	zeroth = {}
	exif = {}
	if make:
		zeroth[piexif.ImageIFD.Make] = make.encode()
	if model:
		zeroth[piexif.ImageIFD.Model] = model.encode()
	if orientation:
		zeroth[piexif.ImageIFD.Orientation] = orientation
	if lens:
		exif[piexif.ExifIFD.LensModel] = lens.encode()
	if fnumber:
		exif[piexif.ExifIFD.FNumber] = fnumber
	if exposure:
		exif[piexif.ExifIFD.ExposureTime] = exposure
	if focal_length:
		exif[piexif.ExifIFD.FocalLength] = focal_length
	if iso is not None:
		exif[piexif.ExifIFD.ISOSpeedRatings] = iso
	if light_source is not None:
		exif[piexif.ExifIFD.LightSource] = light_source
	if date_original:
		exif[piexif.ExifIFD.DateTimeOriginal] = date_original.encode()
	if extra_exif:
		exif.update(extra_exif)

	buf = BytesIO()
	img = Image.new("RGB", size, color=color)
	if zeroth or exif:
		img.save(buf, format="JPEG", exif=piexif.dump({"0th": zeroth, "Exif": exif}))
	else:
		img.save(buf, format="JPEG")
	return buf.getvalue()


@pytest.fixture
def jpeg_factory() -> Callable[..., bytes]:
	return make_jpeg


@pytest.fixture
def upload_root(tmp_path: Path) -> Path:
	root = tmp_path / "uploads"
	root.mkdir()
	return root


@pytest.fixture
def storage(upload_root: Path) -> AlbumStorage:
	return AlbumStorage(upload_root)


@pytest.fixture
def store(tmp_path: Path) -> Generator[MetadataStore, None, None]:
	"""Metadata store backed by a temporary SQLite file."""
	engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
	init_db(engine)
	yield MetadataStore(engine)
	engine.dispose()


@pytest.fixture
def ingestor(store: MetadataStore, storage: AlbumStorage) -> Generator[ImageIngestor, None, None]:
	ingestor = ImageIngestor(store, storage, max_workers=2)
	yield ingestor
	ingestor.close()


@pytest.fixture
def album(store: MetadataStore):
	return store.create_album("Holiday", "2024-06-01", "Beach week")
