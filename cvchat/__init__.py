import os

from flask import Flask
from config import Config
from pymysql import connect
from .extensions import *
from .models import *
from .errors import register_error_handlers
from .routes.upload_routes import upload_bp
from .routes.chat_routes import chat_bp
from .routes.cv_routes import cv_bp
from .routes.public_routes import public_bp
from .routes.auth_routes import auth_bp
from .routes.track_routes import track_bp
from .services.auth import register_jwt_callbacks
from .utils.logger import configure_logging, get_logger
from cvchat.database.seed.seed_all import seed_all

logger = get_logger(__name__)


def create_app(config_class=Config, rate_limiter=None, image_store=None):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config["UPLOAD_FOLDER"] = os.path.abspath(app.config["UPLOAD_FOLDER"])
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Allow CORS from the frontend
    cors.init_app(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("mysql"):
        create_database_if_not_exists(app.config)

    # extensions initialization
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    bcrypt.init_app(app)
    rate_limit.init_app(app, limiter=rate_limiter)
    if image_store is not None:
        app.extensions["image_store"] = image_store

    register_jwt_callbacks(jwt)
    register_error_handlers(app)

    app.register_blueprint(upload_bp, url_prefix="/api")
    app.register_blueprint(chat_bp, url_prefix="/api")
    app.register_blueprint(cv_bp, url_prefix="/api/cv")
    app.register_blueprint(public_bp, url_prefix="/api")
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(track_bp, url_prefix="/api")

    app.cli.add_command(seed_all)

    return app


def create_database_if_not_exists(config):
    host_parts = config["DB_HOST"].split(":")
    host = host_parts[0]
    port = int(host_parts[1]) if len(host_parts) > 1 else 3306

    logger.info("Ensuring database '%s' exists on %s:%s as '%s'", config["DB_NAME"], host, port, config["DB_USER"])

    conn = connect(
        host=host,
        port=port,
        user=config["DB_USER"],
        password=config["DB_PASSWORD"] or ""
    )
    try:
        with conn.cursor() as cursor:
            cursor.execute(f"CREATE DATABASE IF NOT EXISTS `{config['DB_NAME']}`")
        conn.commit()
    finally:
        conn.close()
