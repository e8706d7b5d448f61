import io
import json
import os

from cvchat.errors import DependencyFailure
from cvchat.models import AdditionalText, CV, CVMeta, Certificate, ReferenceDocument
from cvchat.services.evidence_store import PROJECT_PLACEHOLDER_MARKER
from tests.conftest import CV_TEXT, SAMPLE_CERTIFICATE, make_pdf, pdf_file

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def post_upload(client, cv=None, certificates=(), references=(), image=None, headers=None, **fields):
    data = dict(fields)
    if cv is not None:
        data["cv"] = cv
    if certificates:
        data["certificates"] = list(certificates)
    if references:
        data["references"] = list(references)
    if image is not None:
        data["image"] = image
    return client.post("/api/upload", data=data, content_type="multipart/form-data", headers=headers or {})


def test_upload_creates_profile_and_meta(app, client, fake_llm, cv_json):
    fake_llm.queue(cv_json)

    response = post_upload(client, cv=pdf_file(make_pdf(CV_TEXT), "cv.pdf"))

    assert response.status_code == 200, response.get_json()
    token = response.get_json()["token"]
    assert len(fake_llm.calls) == 1
    assert "John Doe" in fake_llm.calls[0]["prompt"]

    with app.app_context():
        cv = CV.query.filter_by(token=token).one()
        assert cv.user_id is None
        assert cv.data["person"]["name"] == "John Doe"
        assert cv.meta.to_dict() == {
            "name": "John Doe",
            "position": "Software Engineer",
            "summary": "Backend engineer focused on Python services.",
            "imageUrl": None,
        }


def test_upload_stores_all_evidence(app, client, fake_llm, cv_json):
    fake_llm.queue(cv_json, json.dumps(SAMPLE_CERTIFICATE), json.dumps({"title": "Scrum Master"}))

    response = post_upload(
        client,
        cv=pdf_file(make_pdf(CV_TEXT), "cv.pdf"),
        certificates=[
            pdf_file(make_pdf("AWS Certified Developer, Amazon Web Services, 2022"), "aws.pdf"),
            pdf_file(make_pdf("Professional Scrum Master I"), "scrum.pdf"),
        ],
        references=[pdf_file(make_pdf("John was a reliable colleague."), "reference.pdf")],
        image=(io.BytesIO(PNG_BYTES), "me.png", "image/png"),
        additionalText="Volunteer mentor at a coding club.",
        projectPlaceholder="Side project: a CLI for invoices.",
    )

    assert response.status_code == 200, response.get_json()
    token = response.get_json()["token"]

    with app.app_context():
        certificates = {c.data["title"]: c for c in Certificate.query.filter_by(cv_token=token)}
        assert set(certificates) == {"AWS Certified Developer", "Scrum Master"}
        assert certificates["Scrum Master"].data == {"title": "Scrum Master", "issuer": "", "date": ""}
        assert "Amazon Web Services" in certificates["AWS Certified Developer"].raw_text

        references = ReferenceDocument.query.filter_by(cv_token=token).all()
        assert ["reliable colleague" in r.raw_text for r in references] == [True]

        additional = AdditionalText.query.filter_by(cv_token=token).one()
        assert additional.content == (
            f"Volunteer mentor at a coding club.\n\n{PROJECT_PLACEHOLDER_MARKER}\nSide project: a CLI for invoices."
        )

        image_url = CVMeta.query.filter_by(cv_token=token).one().image_url

    assert image_url == f"/api/media/{token}/profile.png"
    assert os.path.exists(os.path.join(app.config["UPLOAD_FOLDER"], token, "profile.png"))
    media = client.get(image_url)
    assert media.status_code == 200
    assert media.data == PNG_BYTES


def test_short_cv_text_is_rejected_before_any_model_call(app, client, fake_llm):
    response = post_upload(client, cv=pdf_file(make_pdf("Only forty characters of text live here.")))

    assert response.status_code == 400
    assert response.get_json() == {"error": "CV PDF contains no readable text (scanned PDFs not supported)"}
    assert fake_llm.calls == []
    with app.app_context():
        assert CV.query.count() == 0


def test_unreadable_certificate_is_rejected(client, fake_llm):
    response = post_upload(
        client,
        cv=pdf_file(make_pdf(CV_TEXT)),
        certificates=[pdf_file(make_pdf(""), "blank.pdf")],
    )

    assert response.status_code == 400
    assert response.get_json() == {"error": "Certificate PDF contains no readable text"}
    assert fake_llm.calls == []


def test_request_validation(client, fake_llm):
    missing = post_upload(client, additionalText="no cv here")
    assert missing.status_code == 400
    assert missing.get_json() == {"error": "CV file is required"}

    wrong_type = post_upload(client, cv=pdf_file(b"hello", "cv.txt", "text/plain"))
    assert wrong_type.status_code == 400
    assert wrong_type.get_json() == {"error": "CV must be a PDF file"}

    pdf = make_pdf(CV_TEXT)
    too_many = post_upload(client, cv=pdf_file(pdf), certificates=[pdf_file(pdf, f"c{i}.pdf") for i in range(21)])
    assert too_many.status_code == 400
    assert too_many.get_json() == {"error": "Too many certificates (max 20)"}

    not_image = post_upload(client, cv=pdf_file(pdf), image=(io.BytesIO(b"%PDF"), "me.pdf", "application/pdf"))
    assert not_image.status_code == 400

    assert fake_llm.calls == []


def test_model_unavailable_returns_502_and_stores_nothing(app, client, fake_llm):
    fake_llm.queue(DependencyFailure(detail="timed out"))

    response = post_upload(client, cv=pdf_file(make_pdf(CV_TEXT)))

    assert response.status_code == 502
    assert response.get_json() == {"error": "AI parsing failed"}
    with app.app_context():
        assert CV.query.count() == 0


def test_malformed_model_output_returns_500(app, client, fake_llm):
    fake_llm.queue("I am not JSON")

    response = post_upload(client, cv=pdf_file(make_pdf(CV_TEXT)))

    assert response.status_code == 500
    assert response.get_json() == {"error": "AI parsing failed"}
    with app.app_context():
        assert CV.query.count() == 0


def test_certificate_failure_stops_the_run_and_leaves_nothing_behind(app, client, fake_llm, cv_json):
    fake_llm.queue(cv_json, json.dumps(SAMPLE_CERTIFICATE), DependencyFailure(detail="timed out"))
    certificate = make_pdf("AWS Certified Developer, Amazon Web Services, 2022")

    response = post_upload(
        client,
        cv=pdf_file(make_pdf(CV_TEXT)),
        certificates=[pdf_file(certificate, f"c{i}.pdf") for i in range(3)],
    )

    assert response.status_code == 502
    # cv, first certificate, failing second certificate; the third is never sent
    assert len(fake_llm.calls) == 3
    with app.app_context():
        assert CV.query.count() == 0
        assert Certificate.query.count() == 0


def test_signed_in_upload_is_owned_by_the_user(app, client, fake_llm, cv_json, register):
    user, headers = register()
    fake_llm.queue(cv_json)

    response = post_upload(client, cv=pdf_file(make_pdf(CV_TEXT)), headers=headers)

    assert response.status_code == 200
    with app.app_context():
        assert CV.query.filter_by(token=response.get_json()["token"]).one().user_id == user["id"]


def test_oversized_request_is_rejected_with_413(app, client, fake_llm):
    app.config["MAX_CONTENT_LENGTH"] = 10_000

    response = post_upload(client, cv=pdf_file(b"%PDF-1.4\n" + b"0" * 20_000))

    assert response.status_code == 413
    assert response.get_json() == {"error": "Upload too large (max 50MB)"}
    assert fake_llm.calls == []
