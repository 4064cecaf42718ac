from __future__ import annotations

import logging
import os
import uuid
from io import BytesIO

from flask import Flask, g, jsonify, request, send_file
from werkzeug.exceptions import RequestEntityTooLarge

from .ase_parser import DecodeOptions, parse_ase_bytes
from .errors import ASEParseError, PreviewLimitError
from .preview import preview_data_url, preview_png_bytes
from .swatch_tree import SwatchTree

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_MB = 32


def create_app(max_upload_bytes: int | None = None) -> Flask:
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = max_upload_bytes or _max_upload_from_env()

    @app.before_request
    def bind_trace_id() -> None:
        g.trace_id = uuid.uuid4().hex

    def json_response(payload: dict[str, object], status: int = 200):
        out = dict(payload)
        out["trace_id"] = str(getattr(g, "trace_id", ""))
        response = jsonify(out)
        response.status_code = status
        response.headers["X-Trace-Id"] = out["trace_id"]
        return response

    def decode_upload() -> tuple[str, SwatchTree]:
        file = request.files.get("file")
        if file is None:
            raise _UploadError("Missing file field: file")

        data = file.read()
        if not data:
            raise _UploadError("Uploaded file is empty")

        filename = file.filename or "upload.ase"
        options = DecodeOptions(
            nested_groups=not _parse_bool(request.form.get("flat_groups")),
            strict_lengths=_parse_bool(request.form.get("strict_lengths")),
            decode_gray=_parse_bool(request.form.get("decode_gray")),
        )
        return filename, parse_ase_bytes(data, source=filename, options=options)

    @app.get("/api/health")
    @app.get("/api/v1/health")
    def health():
        return json_response({"status": "ok", "service": "ase-json"})

    @app.post("/api/convert")
    @app.post("/api/v1/convert")
    def convert():
        try:
            filename, tree = decode_upload()
        except _UploadError as exc:
            return json_response({"error": str(exc)}, 400)
        except ASEParseError as exc:
            logger.info("rejected upload: %s", exc)
            return json_response({"error": str(exc), "error_code": type(exc).__name__}, 422)

        payload: dict[str, object] = {
            "filename": filename,
            "header": tree.header.to_dict(),
            "color_count": tree.color_count(),
            "swatches": tree.to_dict(),
        }
        if _parse_bool(request.form.get("preview")):
            try:
                payload["preview"] = preview_data_url(tree)
            except PreviewLimitError as exc:
                return json_response({"error": str(exc), "error_code": type(exc).__name__}, 422)
        return json_response(payload)

    @app.post("/api/preview")
    @app.post("/api/v1/preview")
    def preview():
        try:
            _filename, tree = decode_upload()
        except _UploadError as exc:
            return json_response({"error": str(exc)}, 400)
        except ASEParseError as exc:
            return json_response({"error": str(exc), "error_code": type(exc).__name__}, 422)

        columns = _parse_int(request.form.get("columns"), 8)
        try:
            png = preview_png_bytes(tree, columns=columns)
        except PreviewLimitError as exc:
            return json_response({"error": str(exc), "error_code": type(exc).__name__}, 422)
        return send_file(BytesIO(png), mimetype="image/png")

    @app.errorhandler(RequestEntityTooLarge)
    def handle_file_too_large(_exc: RequestEntityTooLarge):
        return json_response(
            {
                "error": "Uploaded file exceeds the server size limit.",
                "error_code": "REQUEST_ENTITY_TOO_LARGE",
            },
            413,
        )

    return app


class _UploadError(Exception):
    pass


def _max_upload_from_env() -> int:
    try:
        megabytes = float(os.getenv("ASE_MAX_UPLOAD_MB", "") or DEFAULT_MAX_UPLOAD_MB)
    except ValueError:
        megabytes = DEFAULT_MAX_UPLOAD_MB
    return int(max(1.0, megabytes) * 1024 * 1024)


def _parse_bool(value, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_int(value, default: int) -> int:
    try:
        return max(1, int(value))
    except (TypeError, ValueError):
        return default
