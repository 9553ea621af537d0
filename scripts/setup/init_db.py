# scripts/setup/init_db.py
"""
Initialize the register store: creates all tables and seeds sample profiles on first start.
Can also export the register to a JSON snapshot file, or restore one.
Usage:
    python scripts/setup/init_db.py
    python scripts/setup/init_db.py --export backup.json
    python scripts/setup/init_db.py --restore backup.json
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from sqlalchemy import inspect

from gate_register.config import settings
from gate_register.services.registry import Registry
from gate_register.utils.exceptions import ValidationError
from gate_register.utils.json_parser import dump_snapshot, load_snapshot


def main():
    parser = argparse.ArgumentParser(description="Initialize, export or restore the gate register")
    parser.add_argument("--database-url", default=settings.DATABASE_URL)
    parser.add_argument("--export", metavar="PATH", help="write a JSON snapshot of the register")
    parser.add_argument("--restore", metavar="PATH", help="replace the register with a JSON snapshot")
    args = parser.parse_args()

    print("🗄️  Gate Register DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {args.database_url}")

    try:
        registry = Registry.open(args.database_url)
    except Exception as e:
        print(f"❌ Cannot open the register store: {e}")
        sys.exit(1)
    print("✅ Tables ready")

    if args.restore:
        with open(args.restore, "rb") as fh:
            try:
                snapshot = load_snapshot(fh.read())
            except ValidationError as e:
                print(f"❌ Invalid snapshot file: {e.message}")
                sys.exit(1)
        result = registry.restore_snapshot(snapshot)
        if not result.success:
            print(f"❌ Restore refused: {result.error}")
            sys.exit(1)
        print(f"♻️  Restored snapshot from {args.restore}")

    if args.export:
        with open(args.export, "w", encoding="utf-8") as fh:
            fh.write(dump_snapshot(registry.export_snapshot()))
        print(f"💾 Snapshot written to {args.export}")

    tables = sorted(inspect(registry.engine).get_table_names())
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    stats = registry.compute_dashboard_stats()
    print(f"\n👥 Profiles: {stats.total_profiles} ({stats.blacklisted_profiles} blacklisted)")
    print(f"🚪 Access logs: {stats.total_access_logs} ({stats.currently_inside} currently inside)")
    registry.close()


if __name__ == "__main__":
    main()
