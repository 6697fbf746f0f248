"""
Idempotent seed script.
Usage:
  python seed.py --reset   # drop and recreate the tables, then load the demo catalog
  python seed.py           # add whatever part of the demo catalog is missing
"""
import argparse

from app import create_app
from extensions import db
from fixtures.demo_catalog import seed_catalog

def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="drop + create + full seed (demo)")
    parser.add_argument("--no-schedules", action="store_true", help="reference entities only")
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        if args.reset:
            db.drop_all()
        db.create_all()
        created = seed_catalog(with_schedules=not args.no_schedules)
        mode = "reset+seed" if args.reset else "soft seed"
        print(f"[seed] {mode} complete, {created} rows created")

if __name__ == "__main__":
    main()
