from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional

import piexif

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"

# EXIF LightSource enumeration
LIGHT_SOURCES = {
	0: "Unknown",
	1: "Daylight",
	2: "Fluorescent",
	3: "Tungsten (incandescent light)",
	4: "Flash",
	9: "Fine weather",
	10: "Cloudy weather",
	11: "Shade",
	12: "Daylight fluorescent",
	13: "Day white fluorescent",
	14: "Cool white fluorescent",
	15: "White fluorescent",
	17: "Standard light A",
	18: "Standard light B",
	19: "Standard light C",
	20: "D55",
	21: "D65",
	22: "D75",
	23: "D50",
	24: "ISO studio tungsten",
	255: "Other light source",
}

# Containers piexif can read from memory; anything else is treated as a path by piexif
_JPEG_MAGIC = b"\xff\xd8"
_TIFF_MAGICS = (b"II*\x00", b"MM\x00*")


@dataclass(frozen=True)
class ExifFields:
	camera_make: Optional[str] = None
	camera_model: Optional[str] = None
	lens_model: Optional[str] = None
	iso: Optional[str] = None
	aperture: Optional[str] = None
	shutter_speed: Optional[str] = None
	focal_length: Optional[str] = None
	light_source: Optional[str] = None
	date_created: Optional[str] = None

	@classmethod
	def unknown(cls) -> "ExifFields":
		return cls(*([UNKNOWN] * 9))

	def as_dict(self) -> Dict[str, Optional[str]]:
		return asdict(self)


def _rational_to_float(x: Any) -> Optional[float]:
	if x is None:
		return None
	# RATIONAL tags with count > 1 come back as a tuple of pairs; use the first
	if isinstance(x, (list, tuple)) and x and isinstance(x[0], (list, tuple)):
		x = x[0]
	if isinstance(x, (list, tuple)) and len(x) == 2:
		num, den = x
		if not den:
			return None
		return float(num) / float(den)
	try:
		return float(x)
	except (TypeError, ValueError):
		return None


def _bytes_to_str(v: Any) -> Optional[str]:
	if v is None:
		return None
	if isinstance(v, bytes):
		v = v.decode("utf-8", errors="ignore")
	s = str(v).strip("\x00 \t\r\n")
	return s or None


def _to_int_safe(v: Any) -> Optional[int]:
	if v is None:
		return None
	if isinstance(v, (list, tuple)):
		if not v:
			return None
		v = v[0]
	try:
		return int(v)
	except (TypeError, ValueError):
		return None


def _format_aperture(v: Any) -> Optional[str]:
	f = _rational_to_float(v)
	if f is None or f <= 0:
		return None
	return f"f/{round(f, 1):g}"


def _format_exposure(v: Any) -> Optional[str]:
	t = _rational_to_float(v)
	if t is None or t <= 0:
		return None
	if t >= 1:
		return f"{round(t, 1):g} s"
	return f"1/{round(1 / t)} s"


def _format_focal_length(v: Any) -> Optional[str]:
	f = _rational_to_float(v)
	if f is None or f <= 0:
		return None
	return f"{round(f, 1):g} mm"


def _format_light_source(v: Any) -> Optional[str]:
	code = _to_int_safe(v)
	if code is None:
		return None
	return LIGHT_SOURCES.get(code, f"Unknown ({code})")


def _render(tag: str, fmt: Callable[[Any], Optional[str]], value: Any) -> Optional[str]:
	if value is None:
		return None
	try:
		return fmt(value)
	except (TypeError, ValueError, ArithmeticError) as e:
		logger.debug("Unreadable EXIF %s value %r: %s", tag, value, e)
		return None


def _format_iso(v: Any) -> Optional[str]:
	iso = _to_int_safe(v)
	return str(iso) if iso is not None else None


def _looks_parseable(data: bytes) -> bool:
	if data[:2] == _JPEG_MAGIC or data[:4] in _TIFF_MAGICS:
		return True
	return data[:4] == b"RIFF" and data[8:12] == b"WEBP"


def extract_exif_metadata(data: bytes) -> Optional[ExifFields]:
	"""
	Parse camera/exposure tags from encoded image bytes.

	Returns None when no EXIF block can be read. Tags missing from an
	otherwise valid block come back as None individually.
	"""
	if not data or not _looks_parseable(data):
		return None
	try:
		ex = piexif.load(data)
	except Exception as e:
		# Corrupt or truncated EXIF segment
		logger.debug("EXIF parse failed: %s", e)
		return None

	zeroth = ex.get("0th") or {}
	exif = ex.get("Exif") or {}
	if not zeroth and not exif:
		return None

	dt = exif.get(piexif.ExifIFD.DateTimeOriginal)
	if not dt:
		dt = zeroth.get(piexif.ImageIFD.DateTime)
	if not dt:
		dt = exif.get(piexif.ExifIFD.DateTimeDigitized)

	iso = exif.get(piexif.ExifIFD.ISOSpeedRatings)
	if iso is None:
		iso = exif.get(piexif.ExifIFD.ISOSpeed)
	if iso is None:
		iso = exif.get(piexif.ExifIFD.StandardOutputSensitivity)

	return ExifFields(
		camera_make=_render("Make", _bytes_to_str, zeroth.get(piexif.ImageIFD.Make)),
		camera_model=_render("Model", _bytes_to_str, zeroth.get(piexif.ImageIFD.Model)),
		lens_model=_render("LensModel", _bytes_to_str, exif.get(piexif.ExifIFD.LensModel)),
		iso=_render("ISO", _format_iso, iso),
		aperture=_render("FNumber", _format_aperture, exif.get(piexif.ExifIFD.FNumber)),
		shutter_speed=_render("ExposureTime", _format_exposure, exif.get(piexif.ExifIFD.ExposureTime)),
		focal_length=_render("FocalLength", _format_focal_length, exif.get(piexif.ExifIFD.FocalLength)),
		light_source=_render("LightSource", _format_light_source, exif.get(piexif.ExifIFD.LightSource)),
		date_created=_render("DateTime", _bytes_to_str, dt),
	)
