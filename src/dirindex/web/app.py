"""FastAPI application exposing the index over HTTP."""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from pathlib import Path
from typing import Any, List

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from dirindex.config import AppConfig
from dirindex.errors import DirIndexError, LockPoisonedError, MetadataError, StorageError
from dirindex.index.catalog import FileCatalog
from dirindex.index.crawler import Crawler
from dirindex.models import FileRecord
from dirindex.utils import files

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="dirindex", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_catalog_lock = threading.Lock()


class CrawlPayload(BaseModel):
    path: str
    exclude: List[str] | None = None


class OpenRequest(BaseModel):
    path: Path


def get_catalog(request: Request) -> FileCatalog:
    """Return the process-wide catalog, opening it on first use."""
    state = request.app.state
    with _catalog_lock:
        catalog = getattr(state, "catalog", None)
        if catalog is None:
            config = getattr(state, "config", None) or AppConfig()
            catalog = FileCatalog.open(config, Path.cwd())
            state.catalog = catalog
    return catalog


def _http_error(exc: DirIndexError) -> HTTPException:
    if isinstance(exc, MetadataError):
        return HTTPException(status_code=404 if exc.not_found else 400, detail=str(exc))
    if isinstance(exc, LockPoisonedError):
        return HTTPException(status_code=503, detail=str(exc))
    if isinstance(exc, StorageError):
        LOGGER.error("Storage failure: %s", exc)
    return HTTPException(status_code=500, detail=str(exc))


async def _run(func, *args) -> Any:
    try:
        return await asyncio.to_thread(func, *args)
    except DirIndexError as exc:
        raise _http_error(exc) from exc


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    catalog = getattr(app.state, "catalog", None)
    if catalog is not None:
        catalog.close()
        app.state.catalog = None


@app.get("/children")
async def list_children(
    dir: str, catalog: FileCatalog = Depends(get_catalog)
) -> dict[str, List[FileRecord]]:
    return {"records": await _run(catalog.list_children, dir)}


@app.get("/search")
async def search_files(
    name: str = "", extension: str = "", catalog: FileCatalog = Depends(get_catalog)
) -> dict[str, List[FileRecord]]:
    return {"records": await _run(catalog.search, name, extension)}


@app.get("/size")
async def directory_size(path: str, catalog: FileCatalog = Depends(get_catalog)) -> dict[str, Any]:
    return {"path": path, "size": await _run(catalog.directory_size, path)}


@app.get("/status")
async def index_status(catalog: FileCatalog = Depends(get_catalog)) -> dict[str, Any]:
    return {
        "has_records": await _run(catalog.has_records),
        "db": str(catalog.store.db_path),
    }


@app.get("/meta")
async def file_metadata(path: str) -> FileRecord:
    return await _run(files.read_metadata, path)


@app.get("/list")
async def list_directory(path: str) -> dict[str, List[FileRecord]]:
    return {"records": await _run(files.list_directory, path)}


@app.post("/crawl")
async def crawl_directory(
    payload: CrawlPayload, catalog: FileCatalog = Depends(get_catalog)
) -> dict[str, Any]:
    clean_path = payload.path.strip().replace("\r", "").replace("\n", "")
    if not clean_path:
        raise HTTPException(status_code=400, detail="No path provided")
    if "\0" in clean_path:
        raise HTTPException(status_code=400, detail="Invalid path: contains null byte")

    root = Path(os.path.expanduser(clean_path))
    if not root.exists():
        raise HTTPException(status_code=404, detail="Path not found: %s" % clean_path)
    if not root.is_dir():
        raise HTTPException(status_code=400, detail="Path must be a directory: %s" % clean_path)

    crawler = catalog.crawler
    if payload.exclude is not None:
        crawler = Crawler(catalog.store, exclude=payload.exclude)

    stats = await _run(crawler.crawl, str(root))
    return {
        "status": "ok",
        "stats": {
            "indexed": stats.indexed,
            "skipped": stats.skipped,
            "failed": stats.failed,
            "excluded": stats.excluded,
        },
    }


@app.post("/open")
async def open_document(payload: OpenRequest) -> dict[str, str]:
    await _run(files.open_path, payload.path)
    return {"status": "ok"}


@app.delete("/records/missing")
async def cleanup_missing_files(catalog: FileCatalog = Depends(get_catalog)) -> dict[str, Any]:
    """Remove records whose files no longer exist on disk."""
    return {"status": "ok", "removed_count": await _run(catalog.prune)}
