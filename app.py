import logging
import sys

from flask import Flask, jsonify

from config import Config
from extensions import db, socketio
from decodex.errors import DecodexError
from decodex.routes import register_routes
from decodex.sockets import register_sockets

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def setup_logging(level=None):
    lvl = (level or "INFO").upper().strip()
    if lvl not in LOG_LEVELS:
        lvl = "INFO"

    logging.basicConfig(
        level=getattr(logging, lvl),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    logging.getLogger("decodex").setLevel(getattr(logging, lvl))


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    setup_logging(app.config.get("LOG_LEVEL"))

    db.init_app(app)
    socketio.init_app(app, cors_allowed_origins="*", async_mode="threading")

    register_routes(app)
    register_sockets(socketio)

    @app.errorhandler(DecodexError)
    def handle_decodex_error(error):
        return jsonify(error.to_dict()), error.status_code

    with app.app_context():
        # Models must be imported before create_all sees them
        from decodex import models  # noqa: F401
        from decodex.services.settings_service import get_settings

        db.create_all()
        get_settings()

    return app


if __name__ == "__main__":
    app = create_app()
    print("DECODEX READY ON 0.0.0.0:5000")
    socketio.run(app, host="0.0.0.0", port=5000, debug=False, allow_unsafe_werkzeug=True)
