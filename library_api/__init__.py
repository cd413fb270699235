from flask import Flask, jsonify
from library_api.config import Config
from library_api.extensions import db, migrate, jwt, cors, cache

from library_api.db_sqlite import configure_sqlite
from library_api.errors import register_error_handlers
from library_api.utils.converters import IdConverter
from library_api.utils.request_logging import register_request_logging


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    app.url_map.strict_slashes = False
    app.url_map.converters["id"] = IdConverter

    # 1) db init first (db.engine / db.session need it)
    db.init_app(app)

    # 2) dialect specific engine setup, before any connection is opened
    configure_sqlite(app)

    # 3) remaining extensions
    migrate.init_app(app, db)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/*": {"origins": app.config["CORS_ORIGIN"]}}, supports_credentials=True)
    cache.init_app(app)

    register_error_handlers(app)
    register_request_logging(app)

    # 4) API blueprints
    from library_api.controllers.auth_controller import auth_bp
    from library_api.controllers.book_controller import book_bp
    from library_api.controllers.borrowing_controller import borrowing_bp
    from library_api.controllers.user_controller import user_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(user_bp, url_prefix="/users")
    app.register_blueprint(book_bp, url_prefix="/books")
    app.register_blueprint(borrowing_bp, url_prefix="/borrowings")

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    from library_api.cli import register_cli
    register_cli(app)

    return app
