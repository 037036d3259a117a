"""Flask application factory."""

from flask import Flask

from ..config import Config
from ..feed.preview import PreviewSink


def create_app(config_path: str = "config.yaml", config: Config | None = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__, template_folder="templates")

    cfg = config or Config.from_yaml(config_path)
    app.config["APP_CONFIG"] = cfg
    app.config["PREVIEW_SINK"] = PreviewSink(cfg.viewer_endpoint)

    # Register routes
    from . import routes

    app.register_blueprint(routes.bp)

    @app.template_filter("credit_class")
    def credit_class(credit_text: str | None) -> str:
        """CSS modifier for cards with a credit highlight."""
        return "document-card--credits" if credit_text else ""

    return app
