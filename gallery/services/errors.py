"""
Exception types raised by the gallery services.
"""


class GalleryError(Exception):
	"""Base exception class for gallery errors."""


class ImageProcessingError(GalleryError):
	"""Raised when an image cannot be decoded, resized or encoded."""


class StorageError(GalleryError):
	"""Raised when the upload directory tree cannot be written."""


class MetadataStoreError(GalleryError):
	"""Raised for database operation errors."""


class AlbumNotFoundError(GalleryError):
	def __init__(self, album_id: int):
		super().__init__(f"Album {album_id} not found")
		self.album_id = album_id


class ImageNotFoundError(GalleryError):
	def __init__(self, image_id: int):
		super().__init__(f"Image {image_id} not found")
		self.image_id = image_id
