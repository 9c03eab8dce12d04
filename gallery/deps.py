from fastapi import Request

from gallery.config import Settings
from gallery.services.albums import AlbumService
from gallery.services.metadata_store import MetadataStore


def get_album_service(request: Request) -> AlbumService:
	return request.app.state.album_service


def get_metadata_store(request: Request) -> MetadataStore:
	return request.app.state.store


def get_app_settings(request: Request) -> Settings:
	return request.app.state.settings
