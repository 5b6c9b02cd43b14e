#!/usr/bin/env python
"""Idempotent seed script for the initial admin account.

Usage:
    python backend/scripts/seed_admin.py             # create tables if needed, ensure admin
    python backend/scripts/seed_admin.py --dry-run   # run logic then rollback (no DB changes)
    python backend/scripts/seed_admin.py --show-perms

Credentials come from SEED_ADMIN_USERNAME / SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD.
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from sqlalchemy import select, text

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from ro_service import create_app, get_db  # type: ignore
from ro_service.models.accounts import Admin, Base
from ro_service.models import audit, bill, complaint, customer, service, task  # noqa: F401
from ro_service.constants.permissions import ROLE_PRESETS


def ensure_schema(session):
    try:
        session.execute(text('SELECT 1 FROM admins LIMIT 1'))
    except Exception:
        session.rollback()
        # Bootstrap only; in real env prefer alembic upgrade
        Base.metadata.create_all(session.get_bind())
    finally:
        session.commit()


def ensure_initial_admin(session):
    username = os.getenv('SEED_ADMIN_USERNAME', 'admin')
    email = os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com')
    existing = session.execute(select(Admin).where(Admin.username==username)).scalar_one_or_none()
    if existing:
        return False
    admin = Admin(username=username, email=email, is_super_admin=True, is_active=True)
    admin.set_password(os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'))
    session.add(admin)
    print(f"[INFO] Created initial admin {username} with temporary password.")
    return True


def print_role_summary():
    name_w = max(len(r) for r in ROLE_PRESETS)
    print(f"{'Role'.ljust(name_w)} | Count | Permissions")
    print('-' * (name_w + 40))
    for name, codes in ROLE_PRESETS.items():
        print(f"{name.ljust(name_w)} | {str(len(codes)).rjust(5)} | {', '.join(sorted(codes))}")


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed the initial admin account",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_admin.py\n  dry run: seed_admin.py --dry-run\n"""),
    )
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--show-perms', action='store_true', help='Print role permission presets')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        ensure_schema(session)
        created = ensure_initial_admin(session)
        if args.dry_run:
            session.rollback()
            print(f"[DRY-RUN] (rolled back) Admin would be created: {created}")
        else:
            session.commit()
            print(f"[DONE] Admin created: {created}")
    if args.show_perms:
        print_role_summary()


if __name__ == '__main__':
    main()
