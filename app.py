"""Flask application entry point."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from flask import Flask

load_dotenv()

from api.routes import api_bp
from svg_sanitizer.validator import MAX_TEMPLATE_SIZE


def create_app(config: dict | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Optional config dict to override defaults.

    Returns:
        Configured Flask app instance.
    """
    app = Flask(__name__)

    # Defaults
    app.config["TEMPLATE_REGISTRY_PATH"] = os.environ.get(
        "TEMPLATE_REGISTRY_PATH", "config/template_registry.yaml"
    )
    # Room for a maximum-size template wrapped in JSON with every byte escaped
    app.config["MAX_CONTENT_LENGTH"] = MAX_TEMPLATE_SIZE * 6 + 1024

    # Apply overrides
    if config:
        app.config.update(config)

    # Register blueprints
    app.register_blueprint(api_bp)

    return app


if __name__ == "__main__":
    application = create_app()
    application.run(debug=True, port=5010)
