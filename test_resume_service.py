"""
Tests for resume generation and the resume lifecycle.
"""

import pytest

from conftest import FAKE_PDF
from resumechat.exceptions import PdfCompilationError, ResumeGenerationError, ResumeNotFoundError
from resumechat.models import ResumeDraft
from resumechat.services.pdf_service import PDF_DATA_URI_PREFIX
from resumechat.services.resume_service import ResumeService, clean_latex_output
from resumechat.utils.latex_template import LATEX_TEMPLATE, TEMPLATE_COMMANDS


def test_clean_latex_output_strips_wrapping():
    raw = (
        "Here is the generated resume:\n"
        "```latex\n"
        "\\documentclass{article}\n"
        "\\begin{document}Hi\\end{document}\n"
        "```\n"
        "Good luck with the application!"
    )
    assert clean_latex_output(raw) == "\\documentclass{article}\n\\begin{document}Hi\\end{document}"


def test_clean_latex_output_keeps_partial_documents():
    assert clean_latex_output("\\section{Skills} Python") == "\\section{Skills} Python"
    assert clean_latex_output("") == ""


def test_generate_resume_prompt(resume_service, ai, sample_latex):
    ai.queue(sample_latex)

    latex = resume_service.generate_resume_from_profile("Name: Jane", "Backend role at Acme")

    assert latex == sample_latex
    prompt = ai.calls[0]["messages"][-1]["content"]
    assert "Name: Jane" in prompt
    assert "Backend role at Acme" in prompt
    assert "\\resumeheader" in prompt
    assert "\\singlelineentry" in prompt
    assert "available commands: " + ", ".join(TEMPLATE_COMMANDS) + "." in prompt
    assert ai.calls[0]["temperature"] == 0.3
    assert ai.calls[0]["json_mode"] is False


def test_generate_resume_empty_output_raises(resume_service, ai):
    ai.queue("```latex\n```")
    with pytest.raises(ResumeGenerationError):
        resume_service.generate_resume_from_profile("Name: Jane", "Backend role")


def test_create_resume_generates_compiles_and_saves(resume_service, ai, pdf, store, sample_latex):
    ai.queue(sample_latex)

    resume = resume_service.create_resume("u1", "Backend at Acme", "Backend role")

    assert resume.title == "Backend at Acme"
    assert resume.job_description == "Backend role"
    assert resume.latex_content == sample_latex
    assert resume.pdf_data_uri.startswith(PDF_DATA_URI_PREFIX)
    assert pdf.compiled == [sample_latex]
    assert store.get_resume(resume.id) == resume
    # the default profile is what the model saw
    assert "Name: John Doe" in ai.calls[0]["messages"][-1]["content"]


def test_create_resume_compile_failure_saves_nothing(resume_service, ai, pdf, store, sample_latex):
    ai.queue(sample_latex)
    pdf.fail = True

    with pytest.raises(PdfCompilationError):
        resume_service.create_resume("u1", "Backend at Acme", "Backend role")
    assert store.list_resumes("u1") == []


def test_create_resume_without_pdf(resume_service, ai, pdf, sample_latex):
    ai.queue(sample_latex)

    resume = resume_service.create_resume("u1", "Draft", "Backend role", compile_pdf=False)

    assert resume.pdf_data_uri is None
    assert pdf.compiled == []


def test_save_generated_resume_tolerates_compile_failure(resume_service, pdf, sample_latex):
    pdf.fail = True

    resume = resume_service.save_generated_resume("u1", None, "Backend role", sample_latex)

    assert resume.title == "Untitled Resume"
    assert resume.pdf_data_uri is None


def test_update_resume(resume_service, store, pdf, sample_latex):
    resume = store.save_resume(ResumeDraft(title="Old", latex_content=sample_latex), "u1")
    edited = sample_latex.replace("Jane Smith", "Jane Q. Smith")

    updated = resume_service.update_resume(resume.id, title="New", latex_content=edited, recompile=True)

    assert updated.title == "New"
    assert updated.latex_content == edited
    assert updated.pdf_data_uri.startswith(PDF_DATA_URI_PREFIX)
    assert pdf.compiled == [edited]


def test_update_resume_rejects_empty_latex(resume_service, store, sample_latex):
    resume = store.save_resume(ResumeDraft(title="Old", latex_content=sample_latex), "u1")
    with pytest.raises(ValueError):
        resume_service.update_resume(resume.id, latex_content="   ")


def test_update_missing_resume(resume_service):
    with pytest.raises(ResumeNotFoundError):
        resume_service.update_resume("missing", title="x")


def test_get_and_delete(resume_service, store, sample_latex):
    resume = store.save_resume(ResumeDraft(title="CV", latex_content=sample_latex), "u1")

    assert resume_service.get_resume(resume.id) == resume
    assert resume_service.list_resumes("u1") == [resume]

    resume_service.delete_resume(resume.id)
    with pytest.raises(ResumeNotFoundError):
        resume_service.get_resume(resume.id)
    with pytest.raises(ResumeNotFoundError):
        resume_service.delete_resume(resume.id)


def test_export_filenames(store, sample_latex):
    resume = store.save_resume(ResumeDraft(title="Software Engineer at Google", latex_content=sample_latex), "u1")

    assert ResumeService.tex_filename(resume) == "software_engineer_at_google.tex"
    assert ResumeService.pdf_filename(resume) == "software_engineer_at_google.pdf"


def test_pdf_bytes_compiles_on_demand(resume_service, store, sample_latex):
    resume = store.save_resume(ResumeDraft(title="CV", latex_content=sample_latex), "u1")

    assert resume_service.pdf_bytes(resume) == FAKE_PDF
    assert store.get_resume(resume.id).pdf_data_uri.startswith(PDF_DATA_URI_PREFIX)


def test_pdf_bytes_unreadable_data(resume_service, store, sample_latex):
    resume = store.save_resume(
        ResumeDraft(title="CV", latex_content=sample_latex, pdf_data_uri="data:application/pdf;base64,!!!"),
        "u1",
    )
    with pytest.raises(PdfCompilationError):
        resume_service.pdf_bytes(resume)


def test_template_defines_every_advertised_command():
    for command in TEMPLATE_COMMANDS:
        assert command in LATEX_TEMPLATE
