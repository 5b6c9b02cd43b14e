#!/usr/bin/env python
"""Report (and optionally repair) inconsistent Task <-> Service and Customer -> Service links.

Usage:
    python backend/scripts/reconcile_links.py                 # report only, exit 3 if problems
    python backend/scripts/reconcile_links.py --repair        # clear dangling/foreign task links
    python backend/scripts/reconcile_links.py --technician 7  # limit to one technician
"""
from __future__ import annotations
import os, sys, argparse, json

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from ro_service import create_app, get_db  # type: ignore
from ro_service.services.linkage import find_task_link_problems, find_customer_link_problems, repair_task_links


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Reconcile service link consistency")
    p.add_argument('--repair', action='store_true', help='Clear task links that point nowhere or at a foreign task')
    p.add_argument('--technician', type=int, default=None, help='Only check this technician id')
    p.add_argument('--json', action='store_true', help='Print the report as JSON')
    return p.parse_args(argv)


def run(session, technician_id=None, repair=False):
    report = {
        'task_links': find_task_link_problems(session, technician_id),
        'customer_links': find_customer_link_problems(session, technician_id),
        'repaired': [],
    }
    if repair and report['task_links']:
        report['repaired'] = repair_task_links(session, technician_id)
    return report


def main(argv=None):
    args = parse_args(argv)
    app = create_app()
    with app.app_context():
        report = run(get_db(), args.technician, args.repair)
    if args.json:
        print(json.dumps(report, indent=2, default=str))
    else:
        for p in report['task_links']:
            print(f"[TASK] service={p['service_id']} task={p['task_id']} {p['problem']}")
        for p in report['customer_links']:
            print(f"[CUSTOMER] customer={p['customer_id']} {p['problem']}")
        print(f"[DONE] task problems: {len(report['task_links'])}, customer problems: {len(report['customer_links'])}, repaired: {len(report['repaired'])}")
    unresolved = (not args.repair and report['task_links']) or report['customer_links']
    return 3 if unresolved else 0


if __name__ == '__main__':
    sys.exit(main())
