from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

from PIL import Image

from gallery.services.errors import ImageProcessingError
from gallery.services.image_utils import apply_exif_orientation, calculate_dimensions

OPTIMIZED_MAX_SIZE = 1920
THUMBNAIL_MAX_SIZE = 400
OPTIMIZED_QUALITY = 85
THUMBNAIL_QUALITY = 95
# Pillow's code for 4:2:0 chroma subsampling
JPEG_SUBSAMPLING = 2


@dataclass
class ProcessedImage:
	optimized: bytes
	thumbnail: bytes
	original_size: int


class _Resizer:
	"""Holds the decoded source so every variant is resized from the same pixels."""

	def __init__(self, source: Image.Image, resample: Image.Resampling = Image.Resampling.LANCZOS):
		self.source = source
		self.resample = resample

	def fit(self, max_size: int) -> Image.Image:
		size = calculate_dimensions(self.source.width, self.source.height, max_size)
		if size == self.source.size:
			return self.source
		return self.source.resize(size, self.resample)


def _decode(data: bytes) -> Image.Image:
	try:
		img = Image.open(BytesIO(data))
		img.load()
	except (OSError, ValueError, Image.DecompressionBombError) as e:
		raise ImageProcessingError(f"Failed to decode image: {e}") from e
	img = apply_exif_orientation(img, img.getexif())
	if img.mode != "RGB":
		img = img.convert("RGB")
	return img


def _encode_jpeg(img: Image.Image, quality: int) -> bytes:
	buf = BytesIO()
	try:
		img.save(buf, format="JPEG", quality=quality, subsampling=JPEG_SUBSAMPLING, optimize=True)
	except (OSError, ValueError) as e:
		raise ImageProcessingError(f"Failed to encode image: {e}") from e
	return buf.getvalue()


def _resize(resizer: _Resizer, max_size: int) -> Image.Image:
	try:
		return resizer.fit(max_size)
	except (OSError, ValueError) as e:
		raise ImageProcessingError(f"Failed to resize image to {max_size}px: {e}") from e


def process_image(data: bytes) -> ProcessedImage:
	"""
	Decode full-resolution bytes and re-encode the optimized and thumbnail variants.
	Blocking; callers run it on the transcoding pool.
	"""
	resizer = _Resizer(_decode(data))
	optimized = _encode_jpeg(_resize(resizer, OPTIMIZED_MAX_SIZE), OPTIMIZED_QUALITY)
	thumbnail = _encode_jpeg(_resize(resizer, THUMBNAIL_MAX_SIZE), THUMBNAIL_QUALITY)
	return ProcessedImage(optimized=optimized, thumbnail=thumbnail, original_size=len(data))
