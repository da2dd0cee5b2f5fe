"""
SEO Analyzer Web API - Flask Application
"""

import asyncio
import logging
import threading
from pathlib import Path

from flask import Flask, jsonify, request
from flask_socketio import SocketIO, emit

from auditor.config import load_config
from auditor.exceptions import JobNotFound, PersistenceError, ValidationError
from auditor.factory import build_service
from auditor.jobs.models import Job
from auditor.jobs.service import AnalysisService
from auditor.logging_setup import setup_logging

logger = logging.getLogger(__name__)

socketio = SocketIO(cors_allowed_origins="*")

# Base paths
BASE_DIR = Path(__file__).parent.parent
CONFIG_PATH = BASE_DIR / "config.json"

REQUEST_TIMEOUT = 30  # Seconds a request waits on the analysis loop


class EventLoopThread:
    """Background event loop the analysis service lives on; Flask threads submit to it"""

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_forever, name="analysis-loop", daemon=True
        )
        self._thread.start()

    def _run_forever(self):
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def run(self, coro, timeout: float | None = REQUEST_TIMEOUT):
        """Run a coroutine on the loop and block for its result"""
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def stop(self):
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout=5)


def create_app(
    service: AnalysisService | None = None,
    config_path: str | Path = CONFIG_PATH,
    loop_thread: EventLoopThread | None = None,
) -> Flask:
    """
    Build the Flask app around an AnalysisService.

    Without a service one is built from config_path and restart recovery runs
    before the first request.
    """
    app = Flask(__name__)
    app.config["SECRET_KEY"] = "seo-analyzer-secret-key"

    loop_thread = loop_thread or EventLoopThread()
    if service is None:
        config = load_config(config_path)
        setup_logging(config.logging.log_file, config.logging.level)
        service = build_service(config)
        recovered = loop_thread.run(service.start())
        if recovered:
            logger.info(f"Recovered {len(recovered)} interrupted analyses")

    def push_update(job: Job) -> None:
        socketio.emit("job_update", job.status_dict())

    service.jobs.add_listener(push_update)
    app.extensions["analysis_service"] = service
    app.extensions["analysis_loop"] = loop_thread

    def call(coro):
        return loop_thread.run(coro)

    # ==================== Errors ====================

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        return jsonify({"error": e.message, "field": e.field}), 400

    @app.errorhandler(JobNotFound)
    def handle_not_found(e: JobNotFound):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(e: PersistenceError):
        logger.error(f"Job store unavailable: {e}")
        return jsonify({"error": "Analysis storage is unavailable"}), 503

    # ==================== Analysis API ====================

    @app.route("/api/analyze", methods=["POST"])
    def submit_analysis():
        """Start an analysis; returns immediately with the analysis id"""
        data = request.get_json(silent=True) or {}
        job = call(service.submit(data.get("url"), data.get("prompts")))
        return jsonify({"analysisId": job.id, "status": job.status.value}), 202

    @app.route("/api/analyze", methods=["GET"])
    def list_analyses():
        limit = request.args.get("limit", default=20, type=int)
        jobs = call(service.list_jobs(request.args.get("status"), limit))
        return jsonify({"analyses": [job.status_dict() for job in jobs]})

    @app.route("/api/analyze/<analysis_id>", methods=["GET"])
    def get_analysis(analysis_id):
        job = call(service.get_result(analysis_id))
        return jsonify(job.to_dict())

    @app.route("/api/analyze/<analysis_id>/status", methods=["GET"])
    def get_analysis_status(analysis_id):
        return jsonify(call(service.get_status(analysis_id)))

    @app.route("/api/analyze/<analysis_id>", methods=["DELETE"])
    def cancel_analysis(analysis_id):
        job = call(service.cancel(analysis_id))
        return jsonify({"analysisId": job.id, "status": job.status.value})

    @app.route("/api/prompts", methods=["GET"])
    def list_prompts():
        defaults = {spec.id for spec in service.catalog.list_default()}
        return jsonify({
            "prompts": [
                {**spec.to_dict(), "default": spec.id in defaults}
                for spec in service.catalog.list_all()
            ]
        })

    socketio.init_app(app)
    return app


@socketio.on("connect")
def handle_connect():
    """Client connected"""
    emit("connected", {"message": "Connected"})
