"""
Tests for the Flask routes.
"""

import pytest

from conftest import FAKE_PDF
from resumechat.models import ResumeDraft

USER = {"X-User-Id": "u1"}


@pytest.fixture
def saved_resume(store, sample_latex):
    return store.save_resume(
        ResumeDraft(title="Backend at Acme", job_description="Backend role", latex_content=sample_latex),
        "u1",
    )


def test_index(client):
    response = client.get("/")
    assert response.status_code == 200
    assert b"Resume Chat" in response.data


def test_index_has_profile_new_resume_and_editor_forms(client):
    page = client.get("/").get_data(as_text=True)

    for element_id in ("pf-name", "pf-email", "pf-honors_and_awards", "saveProfileBtn",
                       "newTitle", "newJob", "createBtn",
                       "editor", "editTitle", "editLatex"):
        assert f'id="{element_id}"' in page
    assert "api('/profile', {method: 'PUT'" in page
    assert "api('/resumes', {method: 'POST'" in page
    assert "api('/preview', {method: 'POST'" in page
    assert "'/compile', {method: 'POST'}" in page
    assert "{method: 'PUT', body: JSON.stringify({" in page


def test_profile_form_payload(client):
    form = {
        "name": "Jane", "email": None, "phone": "555", "headline": "Engineer",
        "summary": "", "skills": "Go", "experience": "Acme", "education": "",
        "projects": "", "extracurriculars": "", "honors_and_awards": "Dean's list",
    }

    response = client.put("/profile", json=form, headers=USER)

    assert response.status_code == 200
    profile = response.get_json()["profile"]
    assert profile["email"] is None
    assert profile["honors_and_awards"] == "Dean's list"


def test_user_id_is_required(client):
    response = client.get("/profile")
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_profile_defaults_and_update(client):
    profile = client.get("/profile", headers=USER).get_json()["profile"]
    assert profile["uid"] == "u1"
    assert profile["name"] == "John Doe"

    response = client.put("/profile", json={"name": "Jane", "skills": "Python"}, headers=USER)
    assert response.status_code == 200
    assert response.get_json()["profile"]["skills"] == "Python"
    assert client.get("/profile?uid=u1").get_json()["profile"]["name"] == "Jane"


@pytest.mark.parametrize("payload", [{"email": "not-an-email"}, ["not", "an", "object"]])
def test_profile_update_rejects_bad_input(client, payload):
    response = client.put("/profile", json=payload, headers=USER)
    assert response.status_code == 400


def test_chat_reply(client, ai):
    ai.queue_json({"reply": "Hello!"})

    response = client.post("/chat", json={"prompt": "hi", "history": []}, headers=USER)

    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert data["reply"] == "Hello!"


def test_chat_requires_prompt(client):
    assert client.post("/chat", json={"prompt": "  "}, headers=USER).status_code == 400


def test_chat_rejects_bad_history(client):
    response = client.post("/chat", json={"prompt": "hi", "history": [{"role": "system", "content": "x"}]}, headers=USER)
    assert response.status_code == 400


def test_chat_model_failure(client, ai):
    ai.queue("garbage")

    response = client.post("/chat", json={"prompt": "hi"}, headers=USER)

    assert response.status_code == 500
    assert response.get_json() == {
        "error": "Failed to generate a response. Please try again.",
        "success": False,
    }


def test_chat_resume_request_is_saved(client, ai, sample_latex):
    ai.queue_json({"is_resume_request": True, "job_description": "Backend role", "title": "Backend at Acme"})
    ai.queue(sample_latex)

    data = client.post("/chat", json={"prompt": "resume for this job"}, headers=USER).get_json()

    assert data["resume_content"] == sample_latex
    resumes = client.get("/resumes", headers=USER).get_json()["resumes"]
    assert [r["id"] for r in resumes] == [data["resume_id"]]
    assert resumes[0]["has_pdf"] is True
    assert "latex_content" not in resumes[0]


def test_create_resume(client, ai, sample_latex):
    ai.queue(sample_latex)

    response = client.post("/resumes", json={"title": "Backend at Acme", "job_description": "Backend role"}, headers=USER)

    assert response.status_code == 201
    resume = response.get_json()["resume"]
    assert resume["user_id"] == "u1"
    assert resume["pdf_data_uri"].startswith("data:application/pdf;base64,")


def test_create_resume_validation(client):
    response = client.post("/resumes", json={"title": "", "job_description": "Backend role"}, headers=USER)
    assert response.status_code == 400


def test_create_resume_compile_failure(client, ai, pdf, sample_latex):
    ai.queue(sample_latex)
    pdf.fail = True

    response = client.post("/resumes", json={"title": "CV", "job_description": "Backend role"}, headers=USER)

    assert response.status_code == 502
    assert client.get("/resumes", headers=USER).get_json()["resumes"] == []


def test_get_resume_is_scoped_to_owner(client, saved_resume):
    assert client.get(f"/resumes/{saved_resume.id}", headers=USER).status_code == 200
    assert client.get(f"/resumes/{saved_resume.id}", headers={"X-User-Id": "u2"}).status_code == 404
    assert client.get("/resumes/missing", headers=USER).status_code == 404


def test_update_resume(client, saved_resume, sample_latex):
    edited = sample_latex.replace("Jane Smith", "J. Smith")

    response = client.put(f"/resumes/{saved_resume.id}", json={"latex_content": edited}, headers=USER)

    assert response.status_code == 200
    assert response.get_json()["resume"]["latex_content"] == edited
    empty = client.put(f"/resumes/{saved_resume.id}", json={"latex_content": ""}, headers=USER)
    assert empty.status_code == 400


def test_compile_resume(client, saved_resume):
    response = client.post(f"/resumes/{saved_resume.id}/compile", headers=USER)
    assert response.status_code == 200
    assert response.get_json()["resume"]["has_pdf"] is True


def test_delete_resume(client, saved_resume):
    assert client.delete(f"/resumes/{saved_resume.id}", headers=USER).status_code == 200
    assert client.get(f"/resumes/{saved_resume.id}", headers=USER).status_code == 404
    assert client.delete(f"/resumes/{saved_resume.id}", headers=USER).status_code == 404


def test_previews(client, saved_resume):
    html = client.get(f"/resumes/{saved_resume.id}/preview", headers=USER).get_json()["html"]
    assert '<h1 class="resume-name">Jane Smith</h1>' in html

    posted = client.post("/preview", json={"latex": r"\textbf{Draft}"}).get_json()
    assert posted["html"] == "<p><strong>Draft</strong></p>"


def test_download_tex(client, saved_resume, sample_latex):
    response = client.get(f"/resumes/{saved_resume.id}/download.tex", headers=USER)

    assert response.status_code == 200
    assert response.data.decode("utf-8") == sample_latex
    assert 'filename="backend_at_acme.tex"' in response.headers["Content-Disposition"]


def test_download_pdf(client, saved_resume):
    response = client.get(f"/resumes/{saved_resume.id}/download.pdf?uid=u1")

    assert response.status_code == 200
    assert response.mimetype == "application/pdf"
    assert response.data == FAKE_PDF
    assert "backend_at_acme.pdf" in response.headers["Content-Disposition"]
