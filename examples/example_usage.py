"""Example: run one finalization pass through the service layer (no Flask).

The HTTP controller and the scheduler are thin wrappers over the same orchestrator.
"""

import importlib
import logging

from config import get_settings_module

from src.attendance_finalization.attendance_finalization.container import build_container


def main():
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, finalization_config=settings.FINALIZATION)
    try:
        print(container.orchestrator.day_status())
        print(container.orchestrator.finalize_day().as_dict())
    finally:
        container.dispatcher.shutdown()


if __name__ == "__main__":
    main()
