"""
Flask application factory for the verification API.
"""
from dataclasses import dataclass

from flask import Flask, current_app

from liveguard import config
from liveguard.attendance import AttendanceRecorder, SessionOrchestrator
from liveguard.database import DatabaseManager
from liveguard.inference import GalleryStore, IdentityMatcher
from liveguard.logging_config import LivenessAuditLogger, setup_logging
from liveguard.vision import SpoofHeuristic


@dataclass
class Services:
    database: DatabaseManager
    gallery: GalleryStore
    recorder: AttendanceRecorder
    orchestrator: SessionOrchestrator
    audit: LivenessAuditLogger


def get_services() -> Services:
    return current_app.extensions['liveguard']


def _init_services(app):
    database = DatabaseManager(app.config['DATABASE_PATH'])
    gallery = GalleryStore(
        database=database,
        embedding_size=app.config.get('EMBEDDING_SIZE'),
        logger=app.logger,
    )
    recorder = AttendanceRecorder(database, logger=app.logger)
    audit = LivenessAuditLogger()
    orchestrator = SessionOrchestrator(
        gallery_provider=gallery.load_gallery,
        matcher=IdentityMatcher(threshold=app.config['MATCH_THRESHOLD']),
        liveness_config=config.build_liveness_config(),
        spoof_heuristic=SpoofHeuristic(config.build_spoof_config()),
        spoof_frame_ratio=config.SPOOF_FRAME_RATIO,
        max_seconds=config.SESSION_MAX_SECONDS,
        consumer=recorder,
        audit=audit,
        logger=app.logger,
    )
    app.logger.info("[STARTUP] Gallery ready: %s", gallery.describe())
    return Services(
        database=database,
        gallery=gallery,
        recorder=recorder,
        orchestrator=orchestrator,
        audit=audit,
    )


def create_app(overrides=None):
    """Build the Flask app; ``overrides`` is merged into ``app.config``."""
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=config.SECRET_KEY,
        MAX_CONTENT_LENGTH=config.MAX_CONTENT_LENGTH,
        DATABASE_PATH=config.DATABASE_PATH,
        MATCH_THRESHOLD=config.MATCH_THRESHOLD,
        EMBEDDING_SIZE=config.EMBEDDING_SIZE,
        LOG_DIR=str(config.LOG_DIR),
        SETUP_LOGGING=True,
    )
    if overrides:
        app.config.update(overrides)

    if app.config['SETUP_LOGGING']:
        setup_logging(app, log_dir=app.config['LOG_DIR'])

    app.extensions['liveguard'] = _init_services(app)

    from liveguard.web.routes import register_blueprints
    register_blueprints(app)

    return app
