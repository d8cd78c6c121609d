#!/usr/bin/env python3
"""Run one of the services with uvicorn on its configured port."""
import argparse

import uvicorn

from common.config import get_settings

SERVICES = {
    "rooms": ("services.rooms.app:app", "rooms_service_port"),
    "bookings": ("services.bookings.app:app", "bookings_service_port"),
}


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("service", choices=sorted(SERVICES))
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    target, port_setting = SERVICES[args.service]
    uvicorn.run(target, host=args.host, port=getattr(get_settings(), port_setting), reload=args.reload)


if __name__ == "__main__":
    main()
