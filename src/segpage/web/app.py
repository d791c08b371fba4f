"""Flask application factory for the simulator web API.

The ``create_app`` function builds one engine from a configuration and
returns a Flask app wired to it.  All requests share that engine, so a
sequence of POSTs behaves exactly like a batch run.
"""

from __future__ import annotations

import dataclasses
from typing import Any

from flask import Flask, Response, jsonify, request

from segpage.config import SimulatorConfig, build_engine
from segpage.logging import Logger, LogLevel
from segpage.memory.engine import Access, TranslationError

_HTTP_BAD_REQUEST = 400
_HTTP_UNPROCESSABLE = 422
_FIELDS = ("segment", "page", "offset", "access")
_ACCESS_NAMES = {"read": Access.READ, "write": Access.WRITE, "r": Access.READ, "w": Access.WRITE}


def _parse_access(raw: Any) -> Access | None:
    """Accept "read"/"write" (any case, or R/W) or the batch flags 0/1."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return Access.WRITE if raw else Access.READ
    if isinstance(raw, str):
        return _ACCESS_NAMES.get(raw.lower())
    return None


def create_app(config: SimulatorConfig | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Simulator settings; defaults to ``SimulatorConfig()``.

    Returns:
        A configured Flask application ready to serve.

    """
    config = config or SimulatorConfig()
    logger = Logger()
    engine = build_engine(config, logger=logger)

    app = Flask(__name__)

    @app.route("/api/translate", methods=["POST"])
    def translate() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Translate one request.

        Expects JSON body: ``{"segment", "page", "offset", "access"}``

        Returns:
            JSON with ``ok`` plus ``address``/``latency`` on success or
            ``fault``/``reason`` (HTTP 422) on failure.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or any(field not in data for field in _FIELDS):
            return jsonify({"error": f"Expected fields: {', '.join(_FIELDS)}"}), _HTTP_BAD_REQUEST
        numbers = [data["segment"], data["page"], data["offset"]]
        if any(isinstance(n, bool) or not isinstance(n, int) for n in numbers):
            msg = "segment, page and offset must be integers"
            return jsonify({"error": msg}), _HTTP_BAD_REQUEST
        access = _parse_access(data["access"])
        if access is None:
            return jsonify({"error": "access must be read, write, 0 or 1"}), _HTTP_BAD_REQUEST

        result = engine.translate(*numbers, access)
        try:
            result.raise_for_fault()
        except TranslationError as exc:
            body = {"ok": False, "fault": str(result.fault), "reason": str(exc)}
            return jsonify(body), _HTTP_UNPROCESSABLE
        return jsonify({"ok": True, "address": result.address, "latency": result.latency})

    @app.route("/api/metrics")
    def metrics() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the engine counters."""
        snapshot = engine.metrics
        body = dataclasses.asdict(snapshot)
        body["average_latency"] = snapshot.average_latency
        body["utilization"] = engine.pool.utilization()
        return jsonify(body)

    @app.route("/api/memory-map")
    def memory_map() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the full memory map."""
        return jsonify(engine.snapshot())

    @app.route("/api/log")
    def log() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the failure log, oldest first."""
        failures = logger.filter(min_level=LogLevel.WARNING)
        return jsonify({"entries": [str(entry) for entry in failures]})

    return app


def main() -> None:
    """Run the web API development server.

    This is the ``segpage-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
