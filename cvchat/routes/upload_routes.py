# cvchat/routes/upload_routes.py
from flask import Blueprint, current_app, jsonify, request

from cvchat.errors import ValidationError
from cvchat.services.auth import get_session_user
from cvchat.services.ingestion import UploadBundle, ingest_upload
from cvchat.services.rate_limit import rate_limited
from cvchat.utils.logger import get_logger

logger = get_logger(__name__)

upload_bp = Blueprint("upload", __name__)

PDF_MIMETYPE = "application/pdf"


def _megabytes(limit):
    return f"{limit // 1_000_000}MB"


def _read_pdfs(field_name, label, max_count, max_bytes):
    files = [f for f in request.files.getlist(field_name) if f and f.filename]
    if len(files) > max_count:
        raise ValidationError(f"Too many {label} (max {max_count})")

    payloads = []
    for file in files:
        if file.mimetype != PDF_MIMETYPE:
            raise ValidationError(f"{label.capitalize()} must be PDF files")
        data = file.read()
        if len(data) > max_bytes:
            raise ValidationError(f"Each {label[:-1]} must be smaller than {_megabytes(max_bytes)}")
        payloads.append(data)
    return payloads


def _read_text_field(field_name, label, max_chars):
    value = request.form.get(field_name)
    if value is not None and len(value) > max_chars:
        raise ValidationError(f"{label} too long (max {max_chars} chars)")
    return value


def _read_upload_bundle():
    config = current_app.config

    cv_file = request.files.get("cv")
    if not cv_file or not cv_file.filename:
        raise ValidationError("CV file is required")
    if cv_file.mimetype != PDF_MIMETYPE:
        raise ValidationError("CV must be a PDF file")
    cv_pdf = cv_file.read()
    if len(cv_pdf) > config["MAX_CV_BYTES"]:
        raise ValidationError(f"CV must be smaller than {_megabytes(config['MAX_CV_BYTES'])}")

    image, image_mimetype = None, None
    image_file = request.files.get("image")
    if image_file and image_file.filename:
        if not (image_file.mimetype or "").startswith("image/"):
            raise ValidationError("Profile image must be an image")
        image = image_file.read()
        if len(image) > config["MAX_IMAGE_BYTES"]:
            raise ValidationError(f"Profile image must be smaller than {_megabytes(config['MAX_IMAGE_BYTES'])}")
        image_mimetype = image_file.mimetype

    return UploadBundle(
        cv_pdf=cv_pdf,
        certificate_pdfs=_read_pdfs("certificates", "certificates", config["MAX_CERTIFICATES"], config["MAX_CERTIFICATE_BYTES"]),
        reference_pdfs=_read_pdfs("references", "references", config["MAX_REFERENCES"], config["MAX_CERTIFICATE_BYTES"]),
        image=image,
        image_mimetype=image_mimetype,
        additional_text=_read_text_field("additionalText", "Additional text", config["MAX_ADDITIONAL_TEXT"]),
        project_placeholder=_read_text_field("projectPlaceholder", "Project text", config["MAX_ADDITIONAL_TEXT"]),
    )


@upload_bp.route("/upload", methods=["POST"])
@rate_limited("upload", limit=30, window_seconds=60)
def upload():
    """
    Multipart upload: `cv` (required PDF), `certificates` and `references` (PDF lists),
    `image`, `additionalText`, `projectPlaceholder`. Returns the new profile token.
    """
    bundle = _read_upload_bundle()
    user = get_session_user()

    cv = ingest_upload(bundle, user_id=user.id if user else None)
    return jsonify({"token": cv.token}), 200
