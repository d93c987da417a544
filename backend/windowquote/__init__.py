from __future__ import annotations
from flask import Flask, jsonify
from .routes import api_bp


def create_app() -> Flask:
    app = Flask(__name__)

    # API
    app.register_blueprint(api_bp)

    # Index route
    @app.get("/")
    def index():
        return jsonify({"service": "windowquote", "api": "/api"})

    app.logger.debug("WindowQuote app created")
    return app
