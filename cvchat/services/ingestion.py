"""Upload pipeline: PDF text extraction, schema-constrained parsing, then one persistence step."""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from flask import current_app

from cvchat.services import evidence_store
from cvchat.services.document_extractor import extract_pdf_text
from cvchat.services.image_store import get_image_store
from cvchat.services.schema_parser import ROLE_CERTIFICATE, ROLE_CV, parse_document
from cvchat.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class UploadBundle:
    """Validated upload payload (sizes, MIME types and counts already checked)."""
    cv_pdf: bytes
    certificate_pdfs: List[bytes] = field(default_factory=list)
    reference_pdfs: List[bytes] = field(default_factory=list)
    image: Optional[bytes] = None
    image_mimetype: Optional[str] = None
    additional_text: Optional[str] = None
    project_placeholder: Optional[str] = None


def ingest_upload(bundle: UploadBundle, user_id: Optional[str] = None):
    """
    Turn an upload into a stored profile and return it.

    Every document is extracted and parsed before anything is written. Certificates
    are parsed one at a time and the first failure stops the run, so a failed
    upload leaves neither a profile nor any of its certificates behind.

    Raises UnreadableDocument, ParsingUnavailable or MalformedModelOutput.
    """
    cv_text = extract_pdf_text(bundle.cv_pdf, min_chars=current_app.config.get("MIN_READABLE_CHARS", 100))
    certificate_texts = [
        extract_pdf_text(pdf, error_message="Certificate PDF contains no readable text")
        for pdf in bundle.certificate_pdfs
    ]
    reference_texts = [
        extract_pdf_text(pdf, error_message="Reference PDF contains no readable text")
        for pdf in bundle.reference_pdfs
    ]

    cv_data = parse_document(cv_text, ROLE_CV)

    certificates = []
    for index, text in enumerate(certificate_texts):
        logger.info("Parsing certificate %d/%d", index + 1, len(certificate_texts))
        certificates.append((parse_document(text, ROLE_CERTIFICATE), text))

    token = str(uuid.uuid4())
    image_url = None
    if bundle.image:
        image_url = get_image_store().save_profile_image(bundle.image, bundle.image_mimetype, token)

    return evidence_store.create_profile(
        cv_data,
        image_url=image_url,
        user_id=user_id,
        certificates=certificates,
        references=reference_texts,
        additional_text=evidence_store.compose_additional_text(bundle.additional_text, bundle.project_placeholder),
        token=token,
    )
