from __future__ import annotations

import uuid
from typing import Optional

DEFAULT_EXTENSION = "jpg"


def _extension_of(original_filename: Optional[str]) -> str:
	if not original_filename:
		return DEFAULT_EXTENSION
	# Browsers may send full client paths; only the base name matters
	base = original_filename.replace("\\", "/").rsplit("/", 1)[-1]
	stem, dot, ext = base.rpartition(".")
	if not dot or not stem or not ext or not ext.isalnum():
		return DEFAULT_EXTENSION
	return ext


def generate_unique_filename(original_filename: Optional[str]) -> str:
	"""Return ``"<uuid4 hex>.<ext>"``, keeping the upload's extension (``jpg`` if none)."""
	return f"{uuid.uuid4().hex}.{_extension_of(original_filename)}"
