import os
import logging
from flask import Flask, request, jsonify
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.routing import Rule
import requests

# ----------------------
# Configuration
# ----------------------
DEFAULT_BACKEND_URL = "http://localhost:5000"
# Unset means the outbound call waits as long as the platform lets it.
BACKEND_TIMEOUT = float(os.getenv("BACKEND_TIMEOUT")) if os.getenv("BACKEND_TIMEOUT") else None
RATE_LIMIT = os.getenv("RATE_LIMIT")
RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
}

FORM_MIMETYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

# Logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger("student-proxy")

# ----------------------
# App Setup
# ----------------------
app = Flask(__name__)


@app.after_request
def add_cors_headers(response):
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    return response


@app.before_request
def short_circuit_preflight():
    if request.method == "OPTIONS":
        return "", 200
    return None

# ----------------------
# Rate Limiter
# ----------------------
def client_key_func():
    """Rate limit by student id if present, otherwise by IP."""
    student_id = (request.view_args or {}).get("student_id")
    if student_id:
        return f"student:{student_id}"
    return get_remote_address()


def is_preflight():
    return request.method == "OPTIONS"


limiter = Limiter(
    key_func=client_key_func,
    app=app,
    default_limits=[RATE_LIMIT] if RATE_LIMIT else [],
    default_limits_exempt_when=is_preflight,
    storage_uri=RATELIMIT_STORAGE_URI,
)

# ----------------------
# Helpers
# ----------------------
def get_backend_url() -> str:
    """Backend base URL, read per request so deployments can swap it live."""
    return (os.getenv("BACKEND_URL") or DEFAULT_BACKEND_URL).rstrip("/")


def is_empty_body(body) -> bool:
    """True for values a JS truthiness check would drop: null, false, 0 and ""."""
    return body is None or (not isinstance(body, (dict, list)) and body in (False, 0, ""))


def read_inbound_body():
    """
    Decode the inbound body the way the serverless runtime hands it to a handler:
    JSON for JSON requests, a dict for form posts, plain text otherwise.
    Returns None when there is nothing to forward.
    """
    if request.is_json:
        body = request.get_json(silent=True)
        if body is None:
            body = request.get_data(as_text=True)
            # A literal null decodes to None too; that is an empty body, not text.
            if body.strip() == "null":
                body = None
    elif request.mimetype in FORM_MIMETYPES:
        body = request.form.to_dict()
    else:
        body = request.get_data(as_text=True)
    return None if is_empty_body(body) else body


def forward(method: str, url: str, body=None) -> requests.Response:
    kwargs = {}
    if body is not None:
        kwargs["json"] = body
    return requests.request(
        method,
        url,
        headers={"Content-Type": "application/json"},
        timeout=BACKEND_TIMEOUT,
        **kwargs,
    )

# ----------------------
# Endpoints
# ----------------------
@app.route("/", methods=["GET"])
def health_check():
    return jsonify({"status": "proxy-running"}), 200


# No methods list on the rule: every verb, including non-standard ones, is forwarded.
app.url_map.add(Rule("/api/student/<student_id>", endpoint="student_proxy"))


@app.endpoint("student_proxy")
def student_proxy(student_id):
    # Preflight is answered in short_circuit_preflight before we get here.
    try:
        url = f"{get_backend_url()}/api/student/{student_id}"
        resp = forward(request.method, url, read_inbound_body())
        data = resp.json()
        logger.info("%s %s -> %s", request.method, url, resp.status_code)
        return jsonify(data), resp.status_code
    except Exception as e:
        logger.exception("Student data error: %s", e)
        return jsonify({
            "error": "Failed to fetch student data",
            "message": str(e),
        }), 500


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8080")))
