"""
Sample Flask server demonstrating the recognize.im client.
"""

import logging
from typing import Callable, Dict

from flask import Blueprint, Flask

from ..api.client import RecognizeClient
from . import handlers

logger = logging.getLogger(__name__)

# Path to handler table
ROUTES: Dict[str, Callable] = {
    "/": handlers.start,
    "/start": handlers.start,
    "/recognize": handlers.recognize,
    "/status": handlers.status,
    "/build": handlers.build,
    "/list": handlers.image_list,
    "/imageInsert": handlers.image_insert,
}


def build_blueprint() -> Blueprint:
    """Register every entry of the route table on a blueprint."""
    blueprint = Blueprint("sample", __name__)
    for path, handler in ROUTES.items():
        blueprint.add_url_rule(path, endpoint=path.strip("/") or "index",
                               view_func=handler, methods=["GET", "POST"])
    return blueprint


def create_app(client: RecognizeClient) -> Flask:
    """
    Create the sample server application.

    Args:
        client: Configured recognize.im client used by all handlers

    Returns:
        Flask application with the sample routes registered
    """
    app = Flask(__name__)
    app.config["RECOGNIZE_CLIENT"] = client
    # Multi mode accepts query images up to 3500KB
    app.config["MAX_CONTENT_LENGTH"] = 4 * 1024 * 1024
    app.register_blueprint(build_blueprint())

    logger.info(f"Sample server created with {len(ROUTES)} routes")
    return app
