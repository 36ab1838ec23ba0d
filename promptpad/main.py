from contextlib import asynccontextmanager
import hashlib
from typing import Optional

from fastapi import Depends, FastAPI, File, HTTPException, Request, Response, UploadFile
from fastapi.responses import JSONResponse

from .config import get_settings
from .errors import RecordNotFoundError, StoreError
from .logging_setup import configure_logging, get_logger
from .models import CategoriesResponse, HealthResponse, ImportResponse, Record, RecordDraft, SortOrder
from .rules import EXPORT_FILENAME, FILE_EXTENSION, MIME_TYPE
from .store import RecordStore

log = get_logger(__name__)

_store: Optional[RecordStore] = None


def get_store() -> RecordStore:
    global _store
    if _store is None:
        _store = RecordStore.from_settings(get_settings())
    return _store


def reset_store() -> None:
    """Drop the cached store (for testing)."""
    global _store
    _store = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(get_settings().log_level)
    yield


app = FastAPI(
    title="promptpad",
    description="Prompt notebook with Excel-friendly CSV import and export",
    version="0.1.0",
    lifespan=lifespan,
)


def _not_found(ex: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(ex))


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, ex: StoreError):
    log.error("store unavailable: %s", ex)
    return JSONResponse(status_code=503, content={"detail": str(ex)})


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/import", response_model=ImportResponse)
async def import_csv(file: UploadFile = File(...), store: RecordStore = Depends(get_store)):
    if not (file.filename or "").lower().endswith(FILE_EXTENSION):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    raw = await file.read()
    with store.saving():
        result = store.import_csv(raw)
    log.info("imported %d records from %s", len(result.records), file.filename)
    return {
        "imported": len(result.records),
        "new_categories": result.new_categories,
        "categories": store.categories,
        "records": result.records,
    }


@app.get("/export")
def export_csv(store: RecordStore = Depends(get_store)):
    body = store.export_csv_bytes()
    if body is None:
        return Response(status_code=204)

    return Response(
        content=body,
        media_type=MIME_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"',
            "ETag": f'"{hashlib.sha256(body).hexdigest()}"',
        },
    )


@app.get("/records", response_model=list[Record])
def list_records(
    q: Optional[str] = None,
    category: Optional[str] = None,
    sort: SortOrder = "newest",
    store: RecordStore = Depends(get_store),
):
    return store.query(search=q, category=category, sort=sort)


@app.post("/records", response_model=Record, status_code=201)
def create_record(draft: RecordDraft, store: RecordStore = Depends(get_store)):
    with store.saving():
        record = store.add(draft)
    return record


@app.get("/records/{record_id}", response_model=Record)
def read_record(record_id: str, store: RecordStore = Depends(get_store)):
    try:
        return store.get(record_id)
    except RecordNotFoundError as ex:
        raise _not_found(ex) from ex


@app.put("/records/{record_id}", response_model=Record)
def update_record(record_id: str, draft: RecordDraft, store: RecordStore = Depends(get_store)):
    try:
        with store.saving():
            record = store.update(record_id, draft)
    except RecordNotFoundError as ex:
        raise _not_found(ex) from ex
    return record


@app.delete("/records/{record_id}", status_code=204)
def delete_record(record_id: str, store: RecordStore = Depends(get_store)):
    try:
        with store.saving():
            store.remove(record_id)
    except RecordNotFoundError as ex:
        raise _not_found(ex) from ex
    return Response(status_code=204)


@app.get("/categories", response_model=CategoriesResponse)
def list_categories(store: RecordStore = Depends(get_store)):
    return {"categories": store.categories}
