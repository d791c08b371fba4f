"""JSON web API for the simulator.

This package provides a Flask application that exposes one engine over
HTTP.  It is an **optional** extra. Install with::

    pip install segpage[web]

The ``create_app`` factory in ``app.py`` builds an engine and serves:

- ``POST /api/translate``: translate one request and return JSON.
- ``GET /api/metrics``: counters, utilization, and average latency.
- ``GET /api/memory-map``: the full memory map as nested JSON.
- ``GET /api/log``: the failure log, oldest first.
"""
