from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jobscraper.harvest.db import JobDB
from jobscraper.harvest.service import JobScrapingService
from jobscraper.harvest.settings import SETTINGS
import argparse

if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument('--format', choices=['sql', 'csv'], default='sql')
    ap.add_argument('--out', type=Path, help='Output file (default: export dir; SQL goes to stdout when omitted)')
    ap.add_argument('--db', type=Path, default=SETTINGS.db_path)
    args = ap.parse_args()
    service = JobScrapingService(JobDB(args.db))
    if args.format == 'csv':
        path = service.export_csv(args.out)
        if path:
            print(f"Exported: {path}")
        else:
            print("No jobs in database yet.")
    else:
        dump = service.export_sql()
        if args.out:
            args.out.parent.mkdir(parents=True, exist_ok=True)
            args.out.write_text(dump, encoding='utf-8')
            print(f"Exported: {args.out}")
        else:
            sys.stdout.write(dump)
