from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from gallery.config import Settings, get_settings
from gallery.logging_config import setup_logging
from gallery.routers.albums import router as albums_router
from gallery.routers.metadata import router as metadata_router
from gallery.services.albums import AlbumService
from gallery.services.ingest import ImageIngestor
from gallery.services.metadata_store import MetadataStore, create_db_engine, init_db
from gallery.services.storage import AlbumStorage

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
	settings = settings or get_settings()
	setup_logging(settings.log_level, settings.log_file)

	engine = create_db_engine(settings.database_url)
	store = MetadataStore(engine)
	storage = AlbumStorage(settings.upload_root)
	transcode_pool = ThreadPoolExecutor(max_workers=settings.transcode_workers, thread_name_prefix="transcode")
	ingestor = ImageIngestor(store, storage, transcode_pool=transcode_pool)

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		settings.upload_root.mkdir(parents=True, exist_ok=True)
		init_db(engine)
		logger.info(
			"Gallery started: uploads=%s, transcode workers=%d",
			settings.upload_root,
			settings.transcode_workers,
		)
		yield
		transcode_pool.shutdown(wait=True)
		engine.dispose()

	app = FastAPI(title="Photo Gallery API", version="0.1.0", lifespan=lifespan)
	app.state.settings = settings
	app.state.store = store
	app.state.album_service = AlbumService(store, storage, ingestor)

	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_origins,
		allow_credentials=True,
		allow_methods=["GET", "POST", "PUT", "DELETE"],
		allow_headers=["Content-Type", "Authorization"],
	)

	# Routers
	app.include_router(albums_router)
	app.include_router(metadata_router)

	# uploads/<album_id>/<quality>/<filename>
	app.mount("/uploads", StaticFiles(directory=settings.upload_root, check_dir=False), name="uploads")

	return app


app = create_app()


if __name__ == "__main__":
	# Local dev server: uvicorn gallery.main:app --reload
	import uvicorn

	uvicorn.run("gallery.main:app", host="0.0.0.0", port=8080, reload=True)
