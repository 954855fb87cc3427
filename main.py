import logging

import functions_framework
from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from config import Settings
from gemini_proxy import GeminiProxy
from service_worker import render_service_worker

# ----------------------
# Configuration
# ----------------------
settings = Settings.from_env()

# Logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("pronunciation-proxy")


# ----------------------
# App Setup
# ----------------------
def create_app(app_settings: Settings = None, proxy: GeminiProxy = None) -> Flask:
    app_settings = app_settings or settings
    app = Flask(__name__)
    CORS(app, origins=[app_settings.frontend_origin])
    gemini = proxy or GeminiProxy(app_settings)

    @app.route("/", methods=["GET"])
    def health_check():
        return jsonify({"status": "proxy-running"}), 200

    @app.route("/callGeminiApi", methods=["POST", "OPTIONS"])
    def call_gemini_api():
        return gemini.handle(request)

    @app.route("/sw.js", methods=["GET"])
    def service_worker():
        response = Response(render_service_worker(), mimetype="application/javascript")
        response.headers["Service-Worker-Allowed"] = "/"
        response.headers["Cache-Control"] = "no-cache"
        return response

    return app


app = create_app()
_proxy = GeminiProxy(settings)


# ----------------------
# Cloud Functions entry point
# ----------------------
@functions_framework.http
def call_gemini_api(req):
    return _proxy.handle(req)


if __name__ == "__main__":
    logger.info("Starting proxy on port %s", settings.port)
    app.run(host="0.0.0.0", port=settings.port)
