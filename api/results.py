"""Vercel serverless function for computing event results."""

import json
import logging
import sys
from pathlib import Path
from urllib.parse import urlparse

import httpx

# Add the project root to the path so we can import hackvote modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from hackvote.results import ResultsError, analyze_source

logger = logging.getLogger(__name__)

CORS_PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class BadRequest(Exception):
    """The request carries no usable event export."""
    pass


def handler(request):
    """Handle incoming requests to compute event results.

    Accepts:
    - POST with JSON body: {"url": "https://..."} pointing at an event export
    - POST with JSON body: {"snapshot": {...}} holding the export inline
    - POST with multipart form: file upload with 'file' field and optional 'filename' field

    Returns JSON with phase 1 and final results.
    """
    if request.method == "OPTIONS":
        return create_response("", status=204, headers=CORS_PREFLIGHT_HEADERS)

    if request.method != "POST":
        return create_response({"error": "Method not allowed. Use POST."}, status=405)

    try:
        source, content = read_export(request)
        results = analyze_source(source, content)
    except (BadRequest, ResultsError) as e:
        return create_response({"error": str(e)}, status=400)
    except json.JSONDecodeError as e:
        return create_response({"error": f"Invalid JSON: {e}"}, status=400)
    except Exception as e:
        logger.exception("Unhandled error computing results")
        return create_response({"error": f"Internal error: {e}"}, status=500)

    return create_response(results.to_dict())


def read_export(request) -> tuple[str, bytes]:
    """Pull the export out of a request.

    Returns (source_identifier, content_bytes). The source name is what the
    loaders use to guess the format, so inline snapshots are named *.json.
    """
    content_type = request.headers.get("content-type", "")

    if "application/json" in content_type:
        data = json.loads(request.body.decode("utf-8"))
        if not isinstance(data, dict):
            raise BadRequest("Request body needs a 'url' or a 'snapshot'")

        # Export embedded in the request
        if "snapshot" in data:
            return "snapshot.json", json.dumps(data["snapshot"]).encode("utf-8")
        # Export hosted elsewhere, e.g. a storage bucket link
        if data.get("url"):
            return fetch_url(data["url"])
        raise BadRequest("Request body needs a 'url' or a 'snapshot'")

    if "multipart/form-data" in content_type:
        # Vercel's request object has already parsed the form
        upload = request.files.get("file")
        if not upload:
            raise BadRequest("Missing 'file' in form data")
        return request.form.get("filename", upload.filename or "upload"), upload.read()

    raise BadRequest(f"Unsupported content type: {content_type}")


def fetch_url(url: str) -> tuple[str, bytes]:
    """Fetch an event export from a URL.

    Returns (source_identifier, content_bytes).
    """
    scheme = urlparse(url).scheme
    if scheme not in ("http", "https"):
        raise ResultsError(f"Invalid URL scheme: {scheme}")

    try:
        with httpx.Client(follow_redirects=True, timeout=30.0) as client:
            response = client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ResultsError(f"Export URL answered with HTTP {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise ResultsError(f"Could not download the export: {e}") from e

    return url, response.content


def create_response(body, status: int = 200, headers: dict = None):
    """Build the response dict the Vercel Python runtime expects."""
    response_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }
    if headers:
        response_headers.update(headers)

    # Team emoji and non-ASCII names are written unescaped
    if isinstance(body, dict):
        body = json.dumps(body, ensure_ascii=False)

    return {
        "statusCode": status,
        "headers": response_headers,
        "body": body,
    }
