from __future__ import annotations
from typing import Tuple
from PIL import ExifTags, Image


def apply_exif_orientation(img: Image.Image, exif) -> Image.Image:
	orientation = None
	if exif:
		tmp = {}
		for tag_id, value in exif.items():
			tag = ExifTags.TAGS.get(tag_id, tag_id)
			tmp[str(tag)] = value
		orientation = tmp.get("Orientation")
	if orientation is None:
		return img
	try:
		o = int(orientation)
	except (TypeError, ValueError):
		return img
	if o == 2:
		return img.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
	if o == 3:
		return img.transpose(Image.Transpose.ROTATE_180)
	if o == 4:
		return img.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
	if o == 5:
		return img.transpose(Image.Transpose.TRANSPOSE)
	if o == 6:
		return img.transpose(Image.Transpose.ROTATE_270)
	if o == 7:
		return img.transpose(Image.Transpose.TRANSVERSE)
	if o == 8:
		return img.transpose(Image.Transpose.ROTATE_90)
	return img


def calculate_dimensions(width: int, height: int, max_size: int) -> Tuple[int, int]:
	"""
	Fit (width, height) inside a max_size box without upscaling.
	The longer edge becomes max_size; the other edge is truncated.
	"""
	if width <= max_size and height <= max_size:
		return (width, height)
	ratio = width / float(height)
	if width > height:
		return (max_size, max(1, int(max_size / ratio)))
	return (max(1, int(max_size * ratio)), max_size)
