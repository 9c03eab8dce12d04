from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file, if it exists
load_dotenv()


def _split_csv(value: str) -> List[str]:
	return [part.strip() for part in value.split(",") if part.strip()]


def _default_workers() -> int:
	return os.cpu_count() or 1


@dataclass(frozen=True)
class Settings:
	upload_root: Path = Path("uploads")
	database_url: str = "sqlite:///photo_gallery.db"
	transcode_workers: int = field(default_factory=_default_workers)
	# 100MB per uploaded file
	max_upload_bytes: int = 100 * 1024 * 1024
	log_level: str = "INFO"
	log_file: Optional[str] = None
	cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])

	@classmethod
	def from_env(cls) -> "Settings":
		workers = os.getenv("GALLERY_TRANSCODE_WORKERS")
		max_bytes = os.getenv("GALLERY_MAX_UPLOAD_BYTES")
		origins = os.getenv("GALLERY_CORS_ORIGINS")
		defaults = cls()
		return cls(
			upload_root=Path(os.getenv("GALLERY_UPLOAD_ROOT", str(defaults.upload_root))),
			database_url=os.getenv("GALLERY_DATABASE_URL", defaults.database_url),
			transcode_workers=max(1, int(workers)) if workers else defaults.transcode_workers,
			max_upload_bytes=int(max_bytes) if max_bytes else defaults.max_upload_bytes,
			log_level=os.getenv("GALLERY_LOG_LEVEL", defaults.log_level),
			log_file=os.getenv("GALLERY_LOG_FILE") or None,
			cors_origins=_split_csv(origins) if origins else defaults.cors_origins,
		)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
	return Settings.from_env()
