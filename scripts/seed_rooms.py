#!/usr/bin/env python3
"""Script to create the tables and load the demo rooms and sample bookings."""
import argparse
import logging

from common.database import Base, SessionLocal, engine
from common.seed import seed_rooms


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--no-bookings", action="store_true", help="only create the rooms")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        rooms = seed_rooms(db, with_bookings=not args.no_bookings)
    print(f"Created {len(rooms)} rooms.")


if __name__ == "__main__":
    main()
