import time

from flask import g, request


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[-1].strip()
    return request.remote_addr or ""


def register_request_logging(app):
    @app.before_request
    def _log_incoming():
        g.request_started = time.perf_counter()
        app.logger.info(f"[request] Incoming {request.method} {request.path} ip={_client_ip()}")

    @app.after_request
    def _log_end(response):
        started = g.get("request_started")
        duration_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        app.logger.info(
            f"[request] End {request.method} {request.path} status={response.status_code} "
            f"duration={duration_ms:.1f}ms"
        )
        return response
