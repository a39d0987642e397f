# fitquest/__init__.py

from flask import Flask, jsonify
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException

from config import Config

db = SQLAlchemy()
jwt = JWTManager()


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)

    # Cookies carry the session, so CORS must allow credentials
    CORS(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        supports_credentials=True,
    )

    from .errors import FitQuestError
    from .payments import get_payment_collector
    from .storage import create_store

    store = create_store(app.config["STORAGE_BACKEND"])
    app.extensions["fitquest_store"] = store
    app.extensions["fitquest_payments"] = get_payment_collector(app)
    # random.Random used by the spin wheel; None -> system randomness
    app.extensions["fitquest_spin_rng"] = None

    # -----------------------------
    # JWT error handlers
    # -----------------------------
    @jwt.unauthorized_loader
    def unauthorized_callback(reason):
        return (
            jsonify(
                {
                    "message": "Unauthorized",
                    "error": reason,
                }
            ),
            401,
        )

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        return (
            jsonify(
                {
                    "message": "Invalid session",
                    "error": reason,
                }
            ),
            401,
        )

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"message": "Session has expired"}), 401

    # -----------------------------
    # Core error translation
    # -----------------------------
    @app.errorhandler(FitQuestError)
    def handle_core_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        if isinstance(err, HTTPException):
            return jsonify({"message": err.description}), err.code
        if app.config["STORAGE_BACKEND"] == "sql":
            db.session.rollback()
        app.logger.exception(f"Unhandled error: {err}")
        return jsonify({"message": "Internal server error"}), 500

    # -----------------------------
    # IMPORT BLUEPRINTS (all routes)
    # -----------------------------
    from .routes.auth_routes import auth_bp
    from .routes.profile_routes import profile_bp
    from .routes.challenge_routes import challenges_bp
    from .routes.workout_routes import workouts_bp
    from .routes.rewards_routes import rewards_bp
    from .routes.spin_routes import spins_bp
    from .routes.social_routes import social_bp

    # -----------------------------
    # REGISTER BLUEPRINTS
    # -----------------------------
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(profile_bp, url_prefix="/api/profile")
    app.register_blueprint(challenges_bp, url_prefix="/api/challenges")
    app.register_blueprint(workouts_bp, url_prefix="/api/workouts")
    app.register_blueprint(rewards_bp, url_prefix="/api/rewards")
    app.register_blueprint(spins_bp, url_prefix="/api/spins")
    app.register_blueprint(social_bp, url_prefix="/api/social")

    @app.route("/api/health")
    def health():
        return {"status": "ok"}

    # -----------------------------
    # DB init + reward catalog
    # -----------------------------
    from .services.rewards import seed_reward_catalog

    with app.app_context():
        if app.config["STORAGE_BACKEND"] == "sql":
            from . import models  # noqa: F401  (register tables)
            db.create_all()
        seed_reward_catalog(store)

    return app
