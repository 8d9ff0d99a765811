"""
Flask backend – LLM4Art artwork analysis API

Endpoints
1. GET  /api/health   → liveness + configured provider
2. POST /api/analyze  → {"imageDataUrl": "data:<mime>;base64,..."} → art-analysis report (JSON)

Notes
- Provider (Gemini / OpenAI) is chosen once at start-up via PROVIDER
- LLM calls run on the request thread; LLM_TIMEOUT is handed to the SDK client
- Non-JSON model output is returned as 200 {"error", "raw"} so the caller can inspect it
"""
import logging

from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from providers import build_provider
from report import InvalidDataUrl, parse_data_url
from settings import MAX_BODY_SIZE, Settings

SERVICE_NAME = "llm4art-backend"

logger = logging.getLogger(__name__)


# ── Flask ----------------------------------------------------------------------
def create_app(settings=None, provider=None) -> Flask:
    """
    Build the app. `provider` pins a ready-made adapter (tests); otherwise one
    is built per request from `settings`, so a missing API key surfaces as a
    500 on /api/analyze instead of a start-up crash.
    """
    settings = settings or Settings.from_env()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = MAX_BODY_SIZE
    CORS(
        app,
        resources={r"/api/*": {"origins": "*"}},
        supports_credentials=False,
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=86400,
    )

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_e):
        return jsonify({"error": "Request body too large"}), 413

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.route("/api/health")
    def health():
        return jsonify({
            "ok": True,
            "service": SERVICE_NAME,
            "provider": settings.provider.value,
        })

    @app.route("/api/analyze", methods=["POST"])
    def analyze():
        body = request.get_json(silent=True)
        image_data_url = body.get("imageDataUrl") if isinstance(body, dict) else None
        if not image_data_url or not isinstance(image_data_url, str):
            return jsonify({"error": "imageDataUrl is required"}), 400

        try:
            image = parse_data_url(image_data_url)
        except InvalidDataUrl as e:
            logger.info("rejected imageDataUrl: %s", e)
            return jsonify({"error": "imageDataUrl must be data:<mimeType>;base64,<data> with a base64 payload"}), 400

        try:
            adapter = provider or build_provider(settings)
            result = adapter.analyze(image)
        except Exception as e:
            logger.exception("analyze failed (provider=%s)", settings.provider.value)
            return jsonify({"error": "Backend failure", "detail": str(e)}), 500

        # {error, raw} on non-JSON model output: still 200
        return jsonify(result), 200

    return app


# ── entry point ---------------------------------------------------------------
def main():
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    app = create_app(settings)
    logger.info("LLM4Art backend on http://%s:%d (provider=%s)",
                settings.host, settings.port, settings.provider.value)
    app.run(host=settings.host, port=settings.port, threaded=True)


if __name__ == "__main__":
    main()
