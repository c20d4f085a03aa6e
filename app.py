"""
Vazifa maintenance application factory.

Maintenance jobs run inside ``create_app().app_context()`` so models and the
Flask-SQLAlchemy session are bound to the configured database.
"""

import os
import logging
from typing import Optional

from flask import Flask

from models import db
from utils.startup_validation import require_database_url

logger = logging.getLogger(__name__)


def create_app(database_url: Optional[str] = None) -> Flask:
    """
    Create the Flask app and bind the database.

    Args:
        database_url: overrides DATABASE_URL; when omitted the environment is
            validated and a missing DATABASE_URL raises ConfigurationError
    """
    if database_url is None:
        database_url = require_database_url()

    app = Flask(__name__)
    app.config.update(
        SQLALCHEMY_DATABASE_URI=database_url,
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        SQLALCHEMY_ENGINE_OPTIONS={"pool_pre_ping": True},
        ENV_NAME=os.getenv("FLASK_ENV", "development"),
    )

    db.init_app(app)
    logger.debug(f"App created for {app.config['ENV_NAME']} environment")
    return app
