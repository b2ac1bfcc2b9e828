import logging

import click
from dotenv import load_dotenv
from flasgger import Swagger
from flask import Flask
from flask.logging import default_handler

from .config import Config
from .errors import StoreError, register_error_handlers
from .extensions import db, migrate, ma, mail
from .middleware.request_id import init_request_id
from .services import Services
from .swagger_config import swagger_template

load_dotenv()

LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(request_id)s] %(name)s: %(message)s"


def create_app(config_class=Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)

    default_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    ma.init_app(app)
    mail.init_app(app)
    Swagger(app, template=swagger_template(app))

    # Middleware + errors
    init_request_id(app)
    register_error_handlers(app)

    services = Services.init_app(app)

    # Blueprint imports
    from .api.auth.routes import auth_bp
    from .api.users.routes import users_bp
    from .api.poll.routes import polls_bp, options_bp
    from .api.voting.routes import voting_bp

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(users_bp, url_prefix="/api/users")
    app.register_blueprint(polls_bp, url_prefix="/api/polls")
    app.register_blueprint(options_bp, url_prefix="/api/options")
    app.register_blueprint(voting_bp, url_prefix="/api/votes")

    @app.after_request
    def disable_caching(response):
        # Responses depend on the session cookie
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, private"
        return response

    # Health check
    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    @app.cli.command("init-db")
    def init_db_command():
        """Create all tables."""
        db.create_all()
        click.echo("Initialized the database.")

    @app.cli.command("prune")
    def prune_command():
        """Run one pruning sweep (expired tokens, stale unverified users)."""
        services.scheduler.sweep()
        click.echo("Pruned expired records.")

    if app.config["PRUNE_ON_STARTUP"]:
        try:
            services.scheduler.start()
        except StoreError:
            # Tables may not exist yet (first `flask init-db`); the periodic sweep retries
            app.logger.exception("Startup prune sweep failed")

    return app
