"""Example: use the service layer directly (no Flask).

Recomputes the rollup of one project and prints its oversight row. Controllers
are thin; the rules live in the services.
"""

import importlib
import sys

from config import get_settings_module

from src.progress_monitor.progress_monitor.container import build_container
from src.progress_monitor.progress_monitor.core.logging_setup import setup_logging


def main(officer_code: str, project_id: str):
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", None))
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    result = container.rollup_service.recompute_project(project_id)
    print(f"physical={result.project_physical_percent:.1f}% financial={result.project_financial_percent:.1f}%")

    overview = container.oversight_service.project_overview(officer_code, project_id)
    print(f"risk={overview.row.risk.value} reasons={list(overview.row.reasons)}")


if __name__ == "__main__":
    if len(sys.argv) != 3:
        sys.exit("usage: python -m examples.example_usage OFFICER_CODE PROJECT_ID")
    main(sys.argv[1], sys.argv[2])
