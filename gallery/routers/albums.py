from __future__ import annotations

import time
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import BaseModel, ValidationError

from gallery.config import Settings
from gallery.deps import get_album_service, get_app_settings, get_metadata_store
from gallery.services.albums import AlbumService
from gallery.services.errors import AlbumNotFoundError, ImageNotFoundError, StorageError
from gallery.services.ingest import IngestReport, UploadedImage
from gallery.services.metadata_store import MetadataStore

router = APIRouter(prefix="/api", tags=["albums"])


class AlbumFields(BaseModel):
	name: Optional[str] = None
	description: Optional[str] = None
	date: Optional[str] = None


def _album_fields(album: Optional[str], name: Optional[str], description: Optional[str], date: Optional[str]) -> AlbumFields:
	# Either a JSON "album" part or separate form fields
	if album:
		try:
			return AlbumFields.model_validate_json(album)
		except ValidationError as e:
			raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid album data format: {e}")
	return AlbumFields(name=name, description=description, date=date)


async def _read_images(files: Optional[List[UploadFile]], max_bytes: int) -> List[UploadedImage]:
	images: List[UploadedImage] = []
	for f in files or []:
		data = await f.read()
		if not data:
			continue
		if len(data) > max_bytes:
			raise HTTPException(
				status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
				detail=f"{f.filename} exceeds maximum allowed size of {max_bytes // 1024 // 1024} MB",
			)
		images.append((f.filename or "unknown.jpg", data))
	return images


def _parse_ids(raw: Optional[str]) -> List[int]:
	ids = []
	for part in (raw or "").split(","):
		part = part.strip()
		if part.isdigit():
			ids.append(int(part))
	return ids


def _failures(report: IngestReport) -> List[dict]:
	return [{"filename": o.original_filename, "error": o.error} for o in report.failed]


@router.post("/albums", summary="Create an album and ingest its images")
async def create_album(
	service: AlbumService = Depends(get_album_service),
	settings: Settings = Depends(get_app_settings),
	images: Optional[List[UploadFile]] = File(None),
	album: Optional[str] = Form(None),
	name: Optional[str] = Form(None),
	description: Optional[str] = Form(None),
	date: Optional[str] = Form(None),
):
	start_total = time.perf_counter()
	fields = _album_fields(album, name, description, date)
	if not fields.name or not fields.date:
		raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing album data")

	start_read = time.perf_counter()
	uploads = await _read_images(images, settings.max_upload_bytes)
	read_duration = time.perf_counter() - start_read

	start_processing = time.perf_counter()
	try:
		created, report = await service.create_album(fields.name, fields.date, fields.description, uploads)
	except StorageError as e:
		raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
	processing_duration = time.perf_counter() - start_processing

	return {
		"status": "success",
		"album_id": created.id,
		"images_processed": report.processed,
		"failed": _failures(report),
		"timings": {
			"multipart_extraction": round(read_duration, 3),
			"image_processing": round(processing_duration, 3),
			"total": round(time.perf_counter() - start_total, 3),
		},
	}


@router.get("/albums", summary="List albums, newest first")
def list_albums(store: MetadataStore = Depends(get_metadata_store)):
	return [
		{**album.model_dump(), "cover_image": cover}
		for album, cover in store.list_albums()
	]


@router.get("/albums/{album_id}", summary="Get one album and its images")
def get_album(album_id: int, store: MetadataStore = Depends(get_metadata_store)):
	album = store.get_album(album_id)
	if album is None:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Album not found")
	return {
		"album": album.model_dump(),
		"images": [image.model_dump() for image in store.list_images(album_id)],
	}


@router.put("/albums/{album_id}", summary="Update album fields, add and remove images")
async def update_album(
	album_id: int,
	service: AlbumService = Depends(get_album_service),
	settings: Settings = Depends(get_app_settings),
	images: Optional[List[UploadFile]] = File(None),
	album: Optional[str] = Form(None),
	name: Optional[str] = Form(None),
	description: Optional[str] = Form(None),
	date: Optional[str] = Form(None),
	deleted_images: Optional[str] = Form(None),
):
	fields = _album_fields(album, name, description, date)
	uploads = await _read_images(images, settings.max_upload_bytes)
	try:
		updated, report, deleted = await service.update_album(
			album_id,
			name=fields.name,
			description=fields.description,
			date=fields.date,
			images=uploads,
			delete_ids=_parse_ids(deleted_images),
		)
	except AlbumNotFoundError:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Album not found")
	except StorageError as e:
		raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
	return {
		"message": "Album updated successfully",
		"album": updated.model_dump(),
		"images_processed": report.processed,
		"failed": _failures(report),
		"deleted_images": deleted,
	}


@router.delete("/albums/{album_id}", summary="Delete an album, its images and files")
async def delete_album(album_id: int, service: AlbumService = Depends(get_album_service)):
	try:
		await service.delete_album(album_id)
	except AlbumNotFoundError:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Album not found")
	return {"message": "Album deleted successfully", "album_id": album_id}


@router.delete("/images/{image_id}", summary="Delete a single image")
async def delete_image(image_id: int, service: AlbumService = Depends(get_album_service)):
	try:
		album = await service.delete_image(image_id)
	except ImageNotFoundError:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")
	return {"message": "Image deleted successfully", "image_id": image_id, "album": album.model_dump()}
