"""Tests for album and image persistence."""

import pytest

from gallery.services.errors import AlbumNotFoundError, ImageNotFoundError
from gallery.services.exif import ExifFields


def _insert(store, album_id, filename, **fields):
	return store.insert_image(album_id, filename, 1000, ExifFields(**fields))


def test_insert_image_updates_count(store, album):
	first = _insert(store, album.id, "a.jpg", camera_model="A")
	_insert(store, album.id, "b.jpg", camera_model="B")

	assert store.get_album(album.id).num_images == 2
	image = store.get_image(first)
	assert image.filename == "a.jpg"
	assert image.album_id == album.id
	assert image.file_size == 1000
	assert image.camera_model == "A"


def test_insert_image_into_missing_album(store):
	with pytest.raises(AlbumNotFoundError):
		_insert(store, 12345, "a.jpg")


def test_mode_picks_most_common(store, album):
	for name, model in [("1.jpg", "A"), ("2.jpg", "A"), ("3.jpg", "B")]:
		_insert(store, album.id, name, camera_model=model, lens_model="L1", aperture="f/4")

	updated = store.recompute_album_mode_metadata(album.id)

	assert updated.camera_model == "A"
	assert updated.lens_model == "L1"
	assert updated.aperture == "f/4"
	assert store.get_album_mode_metadata(album.id) == {
		"camera_model": "A",
		"lens_model": "L1",
		"aperture": "f/4",
	}


def test_mode_is_none_without_values(store, album):
	_insert(store, album.id, "1.jpg")
	_insert(store, album.id, "2.jpg")

	updated = store.recompute_album_mode_metadata(album.id)

	assert updated.camera_model is None
	assert updated.lens_model is None
	assert updated.aperture is None


def test_mode_ignores_unknown_sentinel(store, album):
	for i in range(3):
		store.insert_image(album.id, f"u{i}.jpg", 10, ExifFields.unknown())
	_insert(store, album.id, "k.jpg", camera_model="Leica Q2")

	assert store.recompute_album_mode_metadata(album.id).camera_model == "Leica Q2"


def test_mode_tie_prefers_first_inserted(store, album):
	_insert(store, album.id, "1.jpg", lens_model="Zoom")
	_insert(store, album.id, "2.jpg", lens_model="Prime")

	assert store.recompute_album_mode_metadata(album.id).lens_model == "Zoom"


def test_mode_is_per_album(store, album):
	other = store.create_album("Other", "2024-01-01")
	_insert(store, album.id, "1.jpg", camera_model="A")
	_insert(store, other.id, "2.jpg", camera_model="B")
	_insert(store, other.id, "3.jpg", camera_model="B")

	assert store.recompute_album_mode_metadata(album.id).camera_model == "A"


def test_delete_image_refreshes_count(store, album):
	first = _insert(store, album.id, "a.jpg")
	second = _insert(store, album.id, "b.jpg")

	deleted = store.delete_image(first)

	assert deleted.filename == "a.jpg"
	assert store.get_image(first) is None
	assert store.get_image(second) is not None
	assert store.get_album(album.id).num_images == 1

	with pytest.raises(ImageNotFoundError):
		store.delete_image(first)


def test_delete_album_record_removes_images(store, album):
	ids = [_insert(store, album.id, f"{i}.jpg") for i in range(3)]
	other = store.create_album("Keep", "2024-02-02")
	kept = _insert(store, other.id, "keep.jpg")

	store.delete_album_record(album.id)

	assert store.get_album(album.id) is None
	assert all(store.get_image(i) is None for i in ids)
	assert store.get_image(kept) is not None
	with pytest.raises(AlbumNotFoundError):
		store.delete_album_record(album.id)


def test_list_albums_newest_first_with_cover(store, album):
	older = store.create_album("Older", "2020-01-01")
	_insert(store, album.id, "late.jpg", date_created="2024:06:03 10:00:00")
	_insert(store, album.id, "early.jpg", date_created="2024:06:01 09:00:00")

	rows = store.list_albums()

	assert [a.id for a, _ in rows] == [album.id, older.id]
	assert rows[0][1] == "early.jpg"
	assert rows[1][1] is None


def test_update_album_changes_only_given_fields(store, album):
	updated = store.update_album(album.id, name="Renamed")

	assert updated.name == "Renamed"
	assert updated.date == album.date
	assert updated.description == album.description

	with pytest.raises(AlbumNotFoundError):
		store.update_album(999, name="x")


def test_list_images(store, album):
	_insert(store, album.id, "a.jpg")
	_insert(store, album.id, "b.jpg")

	assert [i.filename for i in store.list_images(album.id)] == ["a.jpg", "b.jpg"]
