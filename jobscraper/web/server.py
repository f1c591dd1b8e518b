from __future__ import annotations
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
import logging
import os

# Internal imports
from jobscraper.harvest.logging_config import setup_logging
from jobscraper.harvest.service import JobScrapingService

logger = logging.getLogger(__name__)

app = FastAPI(title="TechStars Job Scraper")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_SERVICE: JobScrapingService | None = None


def get_service() -> JobScrapingService:
    global _SERVICE
    if _SERVICE is None:
        _SERVICE = JobScrapingService()
    return _SERVICE


def set_service(service: JobScrapingService | None):
    """Swap the backing service (tests, alternate stores)."""
    global _SERVICE
    _SERVICE = service


def _jobs_payload(jobs) -> list:
    return [j.model_dump(mode="json") for j in jobs]


@app.post("/api/jobs/scrape")
def scrape_jobs(job_function: str = Query(..., alias="jobFunction")):
    resp = get_service().scrape_response(job_function)
    body = resp.model_dump(mode="json", by_alias=True)
    return JSONResponse(body, status_code=200 if resp.success else 500)


@app.get("/api/jobs/functions")
def job_functions():
    return get_service().job_functions()


@app.get("/api/jobs")
def all_jobs():
    try:
        return _jobs_payload(get_service().list_all())
    except Exception:
        logger.exception("Listing jobs failed")
        return JSONResponse([], status_code=500)


@app.get("/api/jobs/function/{job_function}")
def jobs_by_function(job_function: str):
    try:
        return _jobs_payload(get_service().list_by_function(job_function))
    except Exception:
        logger.exception("Listing jobs for %s failed", job_function)
        return JSONResponse([], status_code=500)


@app.get("/api/jobs/export")
def export_sql():
    try:
        return PlainTextResponse(get_service().export_sql())
    except Exception as e:
        logger.exception("SQL export failed")
        return PlainTextResponse(f"Export failed: {e}", status_code=500)


@app.get("/health")
def health():
    counts = get_service().db.counts()
    return {"status": "ok", **counts}


if __name__ == "__main__":
    import uvicorn
    setup_logging()
    port = int(os.environ.get("PORT", "8000"))
    uvicorn.run(app, host="127.0.0.1", port=port)
