from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
import logging
from pydantic import BaseModel, Field

from config.settings import get_settings
from extractor import (
    ExtractionError,
    ImageInputError,
    MissingApiKeyError,
    NoTableFoundError,
    build_model,
    extract_csv,
)
from extractor.core.memory import ResultStore
from extractor.image import ImagePayload, from_bytes, from_data_url
from tables import (
    NothingToExportError,
    TableParseError,
    TableViews,
    ViewFormat,
    build_views,
    copy_content,
    download,
    to_records,
)


settings = get_settings()

logging.basicConfig(level=settings.log_level, format="[%(asctime)s] %(levelname)s - %(message)s")
logger = logging.getLogger("snaptable")

app = FastAPI(title="SnapTable Image-to-Table Extractor", version="1.0.0")

# CORS: allow local frontend during development
if settings.is_dev:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


_store = ResultStore(settings.max_stored_results)


def get_store() -> ResultStore:
    return _store


def get_model_factory() -> Callable[[Optional[str]], Any]:
    return build_model


class PasteRequest(BaseModel):
    data_url: str = Field(..., description="Pasted image as data:image/...;base64,...")
    client_id: str = Field(..., description="Unique identifier for user/session")
    api_key: Optional[str] = Field(None, description="User's own Gemini API key")


class ConvertRequest(BaseModel):
    csv: str = Field(..., description="CSV text to render")
    client_id: Optional[str] = Field(None, description="Store as this client's last result")


class ViewsResponse(BaseModel):
    client_id: Optional[str] = None
    csv: str
    html: str
    json_text: str = Field(..., description="Records as pretty-printed JSON")
    markdown: str
    records: List[Dict[str, Optional[str]]]
    rows: int = Field(..., description="Body rows, header excluded")
    columns: int


def _views_response(views: TableViews, client_id: Optional[str]) -> ViewsResponse:
    table = views.table
    return ViewsResponse(
        client_id=client_id,
        csv=views.csv,
        html=views.html,
        json_text=views.json,
        markdown=views.markdown,
        records=to_records(table),
        rows=len(table.body),
        columns=table.width,
    )


def _to_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ImageInputError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, MissingApiKeyError):
        return HTTPException(status_code=401, detail=str(exc))
    if isinstance(exc, (NoTableFoundError, TableParseError)):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, NothingToExportError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ExtractionError):
        return HTTPException(status_code=502, detail=str(exc))
    logger.exception("Request processing failed: %s", exc)
    return HTTPException(status_code=500, detail=str(exc))


def _run_extraction(
    image: ImagePayload,
    client_id: str,
    api_key: Optional[str],
    store: ResultStore,
    model_factory: Callable[[Optional[str]], Any],
) -> ViewsResponse:
    logger.info(
        "Incoming extraction: client_id=%s mime=%s bytes=%s own_key=%s",
        client_id,
        image.mime_type,
        image.size,
        bool(api_key),
    )
    raw_csv = extract_csv(image, model=model_factory(api_key))
    # Keep the reply even if it does not render
    store.put(client_id, raw_csv)
    views = build_views(raw_csv)
    logger.info(
        "Extracted table for client_id=%s: %s rows x %s columns",
        client_id,
        len(views.table.body),
        views.table.width,
    )
    return _views_response(views, client_id)


@app.post("/extract", response_model=ViewsResponse)
def extract_upload(
    file: UploadFile = File(..., description="Image of a table"),
    client_id: str = Form(...),
    api_key: Optional[str] = Form(None),
    store: ResultStore = Depends(get_store),
    model_factory: Callable[[Optional[str]], Any] = Depends(get_model_factory),
) -> ViewsResponse:
    try:
        # One byte past the limit is enough to reject an oversized upload
        raw = file.file.read(settings.max_image_bytes + 1)
        image = from_bytes(raw, file.content_type, max_bytes=settings.max_image_bytes)
        return _run_extraction(image, client_id, api_key, store, model_factory)
    except Exception as exc:
        raise _to_http_error(exc) from exc


@app.post("/extract/paste", response_model=ViewsResponse)
def extract_paste(
    req: PasteRequest,
    store: ResultStore = Depends(get_store),
    model_factory: Callable[[Optional[str]], Any] = Depends(get_model_factory),
) -> ViewsResponse:
    try:
        image = from_data_url(req.data_url, max_bytes=settings.max_image_bytes)
        return _run_extraction(image, req.client_id, req.api_key, store, model_factory)
    except Exception as exc:
        raise _to_http_error(exc) from exc


@app.post("/convert", response_model=ViewsResponse)
def convert(req: ConvertRequest, store: ResultStore = Depends(get_store)) -> ViewsResponse:
    try:
        raw_csv = req.csv.strip()
        views = build_views(raw_csv)
        if req.client_id:
            store.put(req.client_id, raw_csv)
        return _views_response(views, req.client_id)
    except Exception as exc:
        raise _to_http_error(exc) from exc


def _stored_views(client_id: str, store: ResultStore) -> TableViews:
    raw_csv = store.get(client_id)
    if raw_csv is None:
        raise NothingToExportError(f"No result for client_id={client_id}")
    return build_views(raw_csv)


@app.get("/views/{client_id}", response_class=PlainTextResponse)
def view_content(
    client_id: str,
    format: ViewFormat = Query(ViewFormat.TABLE),
    store: ResultStore = Depends(get_store),
) -> PlainTextResponse:
    try:
        content = copy_content(_stored_views(client_id, store), format)
    except Exception as exc:
        raise _to_http_error(exc) from exc
    return PlainTextResponse(content)


@app.get("/export/{client_id}")
def export_file(
    client_id: str,
    format: ViewFormat = Query(ViewFormat.CSV),
    store: ResultStore = Depends(get_store),
) -> Response:
    try:
        exported = download(_stored_views(client_id, store), format)
    except Exception as exc:
        raise _to_http_error(exc) from exc
    logger.info("Export: client_id=%s format=%s file=%s", client_id, format.value, exported.filename)
    return Response(
        content=exported.content.encode("utf-8"),
        media_type=f"{exported.media_type}; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


@app.get("/health")
def health():
    return {"status": "ok"}
