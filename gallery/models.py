"""Database models for albums and their images."""

from typing import Optional

from sqlmodel import Field, SQLModel


class Album(SQLModel, table=True):
	__tablename__ = "albums"

	id: Optional[int] = Field(default=None, primary_key=True)
	name: str
	description: Optional[str] = None
	date: str = Field(index=True)
	num_images: int = 0
	# Most common value across the album's images
	camera_model: Optional[str] = None
	lens_model: Optional[str] = None
	aperture: Optional[str] = None


class Image(SQLModel, table=True):
	__tablename__ = "images"

	id: Optional[int] = Field(default=None, primary_key=True)
	album_id: int = Field(foreign_key="albums.id", index=True)
	filename: str = Field(unique=True)
	camera_make: Optional[str] = None
	camera_model: Optional[str] = None
	lens_model: Optional[str] = None
	iso: Optional[str] = None
	aperture: Optional[str] = None
	shutter_speed: Optional[str] = None
	focal_length: Optional[str] = None
	light_source: Optional[str] = None
	date_created: Optional[str] = None
	file_size: int = 0
