"""
Flask application factory.

The application exposes no HTTP routes; it wires configuration, logging,
the database schema and the management commands
(``flask --app hospital.main <command>``).
"""

import logging
import os
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask

# Only load from .env when DATABASE_URL is not already defined by the environment
if not os.getenv("DATABASE_URL"):
    load_dotenv()


def create_app(test_config: Optional[Mapping[str, Any]] = None) -> Flask:
    from hospital.cli import register_commands
    from hospital.core.config import (
        get_database_url,
        get_log_json,
        get_log_level,
        get_log_to_file,
        log_database_config,
        log_params_config,
    )
    from hospital.core.logging_config import setup_logging
    from hospital.db.session import create_tables
    from hospital.services.merge_notifier import MergeEventNotifier, log_merge_event

    app = Flask(__name__)
    app.config.from_mapping(
        DATABASE_URL=get_database_url(),
        LOG_LEVEL=get_log_level(),
        LOG_JSON=get_log_json(),
        LOG_TO_FILE=get_log_to_file(),
        CREATE_TABLES=True,
    )
    if test_config:
        app.config.update(test_config)

    # Keep db.session.get_engine() in line with the app configuration
    os.environ["DATABASE_URL"] = app.config["DATABASE_URL"]

    setup_logging(
        app=app,
        log_level=app.config["LOG_LEVEL"],
        log_to_file=app.config["LOG_TO_FILE"],
        use_json_format=app.config["LOG_JSON"],
    )
    logger = logging.getLogger(__name__)

    log_database_config()
    log_params_config()

    if app.config["CREATE_TABLES"]:
        create_tables()
        logger.info("Database tables ensured")

    # One listener registry per application; merges started from the CLI
    # dispatch to it.
    notifier = MergeEventNotifier()
    notifier.register(log_merge_event)
    app.extensions["merge_notifier"] = notifier

    register_commands(app)
    return app
