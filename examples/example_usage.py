"""Example: using the service layer without Flask.

Validates a coordinate against a company's geofences and prints the user's
recent attendance, using the same container the web app builds.
"""
from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.geo_attendance.geo_attendance.container import build_container


def main(company_id: str, user_id: str, latitude: float, longitude: float) -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    check = container.geofence_service.validate_location(company_id, latitude, longitude)
    print(check.to_dict())

    for record in container.attendance_recorder.get_history(user_id, company_id, limit=5):
        print(record.to_dict())


if __name__ == "__main__":
    if len(sys.argv) != 5:
        raise SystemExit("usage: example_usage.py COMPANY_ID USER_ID LAT LNG")
    main(sys.argv[1], sys.argv[2], float(sys.argv[3]), float(sys.argv[4]))
