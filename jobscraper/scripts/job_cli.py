import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jobscraper.harvest.db import JobDB
from jobscraper.harvest.service import JOB_FUNCTIONS

def cmd_list(args):
    db = JobDB(args.db)
    jobs = db.fetch_by_function(args.function) if args.function else db.fetch_all()
    for j in jobs:
        tags = f" [tags={','.join(j.tag_names)}]" if args.show_tags else ""
        company = j.company.title if j.company else "-"
        print(f"{j.id}\t{j.status.value}\t{j.origin.value}\t{j.labor_function}\t{company} - {j.title}{tags}")

def cmd_functions(args):
    for f in JOB_FUNCTIONS:
        print(f)

def cmd_stats(args):
    db = JobDB(args.db)
    print("Store counts:")
    for k, v in db.counts().items():
        print(f"  {k}: {v}")

if __name__ == '__main__':
    ap = argparse.ArgumentParser("job cli")
    ap.add_argument('--db', type=Path, default=None)
    sub = ap.add_subparsers(dest='cmd', required=True)

    lp = sub.add_parser('list')
    lp.add_argument('--function', help='Only jobs for this labor function')
    lp.add_argument('--show-tags', action='store_true', help='Show tag names for each job')
    lp.set_defaults(func=cmd_list)

    fp = sub.add_parser('functions')
    fp.set_defaults(func=cmd_functions)

    stp = sub.add_parser('stats')
    stp.set_defaults(func=cmd_stats)

    args = ap.parse_args()
    args.func(args)
