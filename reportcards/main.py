"""
Diagnostic Report Cards - FastAPI Application

Main application entry point with API endpoints for:
- Report record intake and listing
- Report card rendering (HTML)
- Single-card PDF export
"""
from fastapi import FastAPI, HTTPException, Response
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from datetime import datetime
from typing import List
from urllib.parse import quote
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from reportcards.config import settings
from reportcards.models import ReportRecord, RecommendationResponse, ReportListResponse, HealthResponse
from reportcards.services import ReportCardService, ReportStore
from reportcards.utils import get_logger, setup_logging, ReportCardError, StoreError

setup_logging(settings.log_level, settings.log_file)
logger = get_logger(__name__)


# ---- FastAPI Application ----

app = FastAPI(
    title="Diagnostic Report Cards API",
    description="Per-patient diagnostic report cards with PDF snapshot export",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- In-memory store and card view ----
_store = ReportStore()
_service = ReportCardService.from_settings(settings, store=_store)


# ---- Utility Functions ----

def _content_disposition(filename: str) -> str:
    """Attachment header; non-ASCII or reserved names use RFC 5987 encoding."""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


def _record_to_dict(record: ReportRecord) -> dict:
    return record.model_dump(by_alias=True)


# ---- API Endpoints ----

@app.get("/", response_model=HealthResponse, tags=["Health"])
async def root():
    """API root - health check."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        timestamp=datetime.now().isoformat(),
        components={
            "resolver": "ready",
            "renderer": "ready",
            "exporter": "ready"
        }
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        timestamp=datetime.now().isoformat(),
        components={
            "api": "healthy",
            "store": f"{len(_service.store)} reports",
            "cards": "mounted" if _service.is_mounted else "unmounted"
        }
    )


@app.get("/api/v1/reports", response_model=ReportListResponse, tags=["Reports"])
async def list_reports():
    """List stored report records in store order."""
    records = _service.store.list()
    return ReportListResponse(
        count=len(records),
        reports=[_record_to_dict(r) for r in records]
    )


@app.post("/api/v1/reports", status_code=201, tags=["Reports"])
async def add_report(record: ReportRecord):
    """Add a report record. Mounted cards re-render immediately."""
    try:
        _service.store.add(record)
    except StoreError as e:
        raise HTTPException(status_code=409, detail=e.message)
    return _record_to_dict(record)


@app.put("/api/v1/reports", response_model=ReportListResponse, tags=["Reports"])
async def replace_reports(records: List[ReportRecord]):
    """
    Replace the whole list, as an upstream sync delivers it.

    Ids are not checked for uniqueness here; the last card with a given id
    is the one that gets exported.
    """
    _service.store.replace_all(records)
    return ReportListResponse(
        count=len(records),
        reports=[_record_to_dict(r) for r in records]
    )


@app.get("/api/v1/reports/cards", response_class=HTMLResponse, tags=["Cards"])
async def render_cards():
    """
    Render every stored report as a card and mount the result.

    Exports are taken from the most recently mounted render.
    """
    render_pass = _service.render()
    return HTMLResponse(content=render_pass.html)


@app.delete("/api/v1/reports/{record_id}", tags=["Reports"])
async def delete_report(record_id: str):
    """Remove a report; its card is unmounted by the re-render."""
    try:
        record = _service.store.remove(record_id)
    except StoreError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return _record_to_dict(record)


@app.get(
    "/api/v1/reports/{record_id}/recommendations",
    response_model=RecommendationResponse,
    tags=["Reports"]
)
async def get_recommendations(record_id: str):
    """Resolved diagnosis, confidence and recommendations for one report."""
    try:
        record, resolution = _service.resolve(record_id)
    except StoreError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return RecommendationResponse(id=record.id, **resolution.to_dict())


@app.post("/api/v1/reports/{record_id}/export", tags=["Cards"])
async def export_report(record_id: str):
    """
    Export one mounted card as a PDF attachment.

    Returns 204 with ``X-Export-Status: skipped`` when the card is not
    mounted; nothing is produced in that case.
    """
    try:
        result = await _service.export(record_id)
    except StoreError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ReportCardError as e:
        logger.error(f"Export failed for report {record_id!r}: {e.message}")
        return JSONResponse(status_code=500, content=e.to_dict())

    if result is None:
        return Response(status_code=204, headers={"X-Export-Status": "skipped"})

    return Response(
        content=result.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": _content_disposition(result.filename),
            "X-Export-Status": "exported",
        }
    )


# ---- Application Lifecycle ----

@app.on_event("startup")
async def startup_event():
    """Initialize on startup."""
    logger.info(f"{settings.app_name} API starting up...")
    os.makedirs(settings.reports_dir, exist_ok=True)
    logger.info("API ready to accept requests")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info(f"{settings.app_name} API shutting down...")
    _service.close()


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
