from fastapi import APIRouter, Depends, HTTPException, status

from gallery.deps import get_metadata_store
from gallery.services.errors import AlbumNotFoundError
from gallery.services.metadata_store import MetadataStore

router = APIRouter(prefix="/api", tags=["metadata"])


@router.get("/images/{image_id}/metadata", summary="EXIF metadata of one image")
def image_metadata(image_id: int, store: MetadataStore = Depends(get_metadata_store)):
	image = store.get_image(image_id)
	if image is None:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image metadata not found")
	return {"metadata": image.model_dump()}


@router.get("/albums/{album_id}/mode-metadata", summary="Most common camera, lens and aperture of an album")
def album_mode_metadata(album_id: int, store: MetadataStore = Depends(get_metadata_store)):
	try:
		return store.get_album_mode_metadata(album_id)
	except AlbumNotFoundError:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No metadata found for this album")
