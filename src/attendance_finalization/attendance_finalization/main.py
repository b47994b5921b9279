from __future__ import annotations

import atexit
import importlib
import logging
import os

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container
from .finalization.controller import register as register_finalization

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    container = build_container(db_config=db_config, finalization_config=getattr(settings, "FINALIZATION", None))
    app.extensions["attendance_finalization"] = container

    register_finalization(app, container)

    # The reloader parent process must not run the job as well.
    reloader_parent = app.config["DEBUG"] and os.environ.get("WERKZEUG_RUN_MAIN") != "true"
    if container.settings.scheduler_enabled and not reloader_parent:
        container.scheduler.start()
        atexit.register(container.scheduler.stop)
    atexit.register(container.dispatcher.shutdown)

    return app
