"""Scrape the listing page for one labor function and persist the results.

Usage:
  python jobscraper/scripts/run_scrape.py "Software Engineering"
  python jobscraper/scripts/run_scrape.py Marketing --offline     # skip the fetch, use fallback set
  python jobscraper/scripts/run_scrape.py --list-functions
"""
from __future__ import annotations
from pathlib import Path
import sys, argparse, json, logging

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jobscraper.harvest.db import JobDB
from jobscraper.harvest.errors import FetchNetworkError
from jobscraper.harvest.logging_config import setup_logging
from jobscraper.harvest.service import JOB_FUNCTIONS, JobScrapingService
from jobscraper.harvest.settings import SETTINGS


class OfflineSource:
    def fetch(self):
        raise FetchNetworkError("offline mode")


if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="Scrape job postings for a labor function")
    ap.add_argument("function", nargs="?", help="Labor function label, e.g. 'Software Engineering'")
    ap.add_argument("--db", type=Path, default=SETTINGS.db_path, help="sqlite database path")
    ap.add_argument("--offline", action="store_true", help="Do not fetch; exercise the fallback set")
    ap.add_argument("--list-functions", action="store_true")
    ap.add_argument("--json", action="store_true", help="Print the full response as JSON")
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args()
    setup_logging(debug=args.debug)
    logger = logging.getLogger("scrape")

    if args.list_functions:
        print("\n".join(JOB_FUNCTIONS))
        raise SystemExit(0)
    if not args.function:
        ap.error("function is required")

    service = JobScrapingService(JobDB(args.db), source=OfflineSource() if args.offline else None)
    resp = service.scrape_response(args.function)
    if args.json:
        print(json.dumps(resp.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False))
    else:
        logger.info(resp.message)
        for r in resp.records:
            company = r.company.title if r.company else "-"
            print(f"{r.status.value}\t{r.origin.value}\t{company} - {r.title} ({r.location})\t{r.source_url}")
    raise SystemExit(0 if resp.success else 1)
