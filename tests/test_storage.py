"""Tests for the upload directory layout."""

import asyncio
import logging

from gallery.services.storage import ImageQuality


def test_create_album_directory_is_idempotent(storage, upload_root):
	asyncio.run(storage.create_album_directory(7))
	marker = upload_root / "7" / "full" / "keep.jpg"
	marker.write_bytes(b"original")

	asyncio.run(storage.create_album_directory(7))

	for quality in ("full", "optimized", "thumbnail"):
		assert (upload_root / "7" / quality).is_dir()
	assert marker.read_bytes() == b"original"


def test_save_image_uses_deterministic_path(storage, upload_root):
	asyncio.run(storage.create_album_directory(3))

	path = asyncio.run(storage.save_image(b"abc", "x.jpg", 3, ImageQuality.THUMBNAIL))

	assert path == upload_root / "3" / "thumbnail" / "x.jpg"
	assert path.read_bytes() == b"abc"

	asyncio.run(storage.save_image(b"new", "x.jpg", 3, ImageQuality.THUMBNAIL))
	assert path.read_bytes() == b"new"


def test_delete_image_files_removes_all_qualities(storage, upload_root):
	asyncio.run(storage.create_album_directory(1))
	for quality in ImageQuality:
		asyncio.run(storage.save_image(b"data", "a.jpg", 1, quality))
		asyncio.run(storage.save_image(b"data", "b.jpg", 1, quality))

	removed = asyncio.run(storage.delete_image_files(1, "a.jpg"))

	assert removed == 3
	for quality in ImageQuality:
		assert not storage.image_path(1, quality, "a.jpg").exists()
		assert storage.image_path(1, quality, "b.jpg").exists()


def test_delete_image_files_tolerates_missing(storage, caplog):
	asyncio.run(storage.create_album_directory(1))
	asyncio.run(storage.save_image(b"data", "a.jpg", 1, ImageQuality.FULL))

	with caplog.at_level(logging.WARNING, logger="gallery.services.storage"):
		removed = asyncio.run(storage.delete_image_files(1, "a.jpg"))

	assert removed == 1
	assert "already missing" in caplog.text


def test_delete_album_directory(storage, upload_root):
	asyncio.run(storage.create_album_directory(5))
	asyncio.run(storage.save_image(b"data", "a.jpg", 5, ImageQuality.FULL))

	asyncio.run(storage.delete_album_directory(5))
	assert not (upload_root / "5").exists()

	# Absent album is a no-op
	asyncio.run(storage.delete_album_directory(5))
	asyncio.run(storage.delete_album_directory(999))
