"""Flask HTTP interface over the system logger: query and purge recent logs."""

import logging

from flask import Flask, jsonify, request

from system_logger.config import Config, load_config
from system_logger.errors import InvalidDate, StorageUnavailable
from system_logger.store import SystemLogger, get_system_logger

logger = logging.getLogger(__name__)


def create_app(config: Config | None = None, store: SystemLogger | None = None) -> Flask:
    """Flask application factory."""
    app = Flask(__name__)

    if config is None:
        config = load_config()
    if store is None:
        store = get_system_logger(config)

    app.config["components"] = {
        "config": config,
        "store": store,
    }

    @app.errorhandler(InvalidDate)
    def invalid_date(error):
        return jsonify({"success": False, "error": str(error)}), 400

    @app.errorhandler(StorageUnavailable)
    def storage_unavailable(error):
        logger.error("Log archive unavailable: %s", error)
        return jsonify({"success": False, "error": str(error)}), 503

    @app.route("/health")
    def health():
        return jsonify({"status": "healthy", **store.get_stats()})

    @app.route("/api/logs", methods=["GET"])
    def get_logs():
        source = request.args.get("source", "memory")
        day = request.args.get("date")

        if source == "file":
            if not day:
                dates = store.get_available_dates()
                return jsonify({
                    "success": True,
                    "dates": [d.isoformat() for d in dates],
                })

            logs = store.read_logs_from_file(day)
            return jsonify({
                "success": True,
                "date": day,
                "count": len(logs),
                "logs": [entry.to_dict() for entry in logs],
            })

        if source == "memory":
            logs = store.get_logs()
            return jsonify({
                "success": True,
                "source": "memory",
                "count": len(logs),
                "logs": [entry.to_dict() for entry in logs],
            })

        return jsonify({"success": False, "error": f"Unknown source {source!r}"}), 400

    @app.route("/api/logs", methods=["DELETE"])
    def delete_logs():
        category = request.args.get("category")
        level = request.args.get("level")

        if category:
            deleted = store.delete_logs_by_category(category)
            return jsonify({
                "success": True,
                "deleted": deleted,
                "message": f'{deleted} logs in category "{category}" deleted',
            })
        if level:
            deleted = store.delete_logs_by_level(level)
            return jsonify({
                "success": True,
                "deleted": deleted,
                "message": f'{deleted} logs with level "{level}" deleted',
            })

        store.clear_logs()
        return jsonify({"success": True, "message": "In-memory logs cleared"})

    return app
