"""
Resume service: LaTeX generation from a profile and the resume lifecycle.
"""

import re
from typing import List, Optional

from resumechat.config import Settings
from resumechat.exceptions import PdfCompilationError, ResumeGenerationError, ResumeNotFoundError
from resumechat.models import Resume, ResumeDraft
from resumechat.services.ai_service import AIService
from resumechat.services.pdf_service import PdfService, decode_data_uri, to_data_uri
from resumechat.services.profile_service import ProfileService
from resumechat.services.storage_service import DocumentStore
from resumechat.utils.file_utils import safe_filename
from resumechat.utils.latex_template import LATEX_TEMPLATE, TEMPLATE_COMMANDS
from resumechat.utils.logger import get_logger, log_banner

logger = get_logger(__name__)

_CODE_FENCE_RE = re.compile(r"^```(?:latex|tex)?\s*$", re.MULTILINE)
_DOCUMENTCLASS_RE = re.compile(r"\\documentclass")
_END_DOCUMENT = r"\end{document}"


RESUME_PROMPT = r"""You are an expert resume writer. Your task is to generate a professional resume in LaTeX format.
You will be provided with a base LaTeX template and the user's profile data and a job description.
Your response should ONLY contain the LaTeX code for the resume, starting with \documentclass and ending with \end{{document}}.

Here is the LaTeX template you MUST use. Pay close attention to the available commands: {commands}.

Template:
{template}

Now, take the following user profile and job description and generate a complete, tailored resume in LaTeX format.
Make sure to replace the placeholder content in the template with the user's actual information.
The user's contact details (email, phone, website, etc.) should go in the \resumecontact section.
The user's name should go in the \resumeheader section.
The user's professional summary, skills, experience, education, and projects should be organized into appropriate sections using the \section, \entry, \singlelineentry, \desc, and \bullets commands.
Escape LaTeX special characters (%, &, $, #, _) in the user's text.

User Profile Data:
{profile_data}

Job Description:
{job_description}

Generate the full LaTeX code for the resume now."""


def clean_latex_output(raw: str) -> str:
    """
    Strip what models wrap around a LaTeX document.

    Removes code fences and commentary, and anything before
    ``\\documentclass`` or after ``\\end{document}`` when both are present.
    """
    text = _CODE_FENCE_RE.sub("", raw or "")
    text = AIService.clean_ai_commentary(text)
    start = _DOCUMENTCLASS_RE.search(text)
    if start:
        text = text[start.start():]
    end = text.rfind(_END_DOCUMENT)
    if end != -1:
        text = text[:end + len(_END_DOCUMENT)]
    return text.strip()


class ResumeService:
    """Generate, store, edit and export resumes."""

    def __init__(
        self,
        settings: Settings,
        ai_service: AIService,
        pdf_service: PdfService,
        profile_service: ProfileService,
        store: DocumentStore
    ):
        """
        Initialize resume service.

        Args:
            settings: Application settings
            ai_service: AI service used for generation
            pdf_service: LaTeX compiler
            profile_service: Source of the user's profile
            store: Document store for resumes
        """
        self.settings = settings
        self.ai_service = ai_service
        self.pdf_service = pdf_service
        self.profile_service = profile_service
        self.store = store

        logger.info("Resume service initialized")

    def generate_resume_from_profile(self, profile_data: str, job_description: str) -> str:
        """
        Generate a tailored LaTeX resume.

        Args:
            profile_data: Profile as text or JSON
            job_description: Target job description

        Returns:
            LaTeX source

        Raises:
            ResumeGenerationError: If the model returned no LaTeX
        """
        log_banner(logger, f"🤖 GENERATING RESUME ({self.ai_service.provider}/{self.ai_service.model})")
        logger.info(f"Job description: {len(job_description)} chars, profile: {len(profile_data)} chars")

        prompt = RESUME_PROMPT.format(
            template=LATEX_TEMPLATE,
            commands=", ".join(TEMPLATE_COMMANDS),
            profile_data=profile_data,
            job_description=job_description,
        )
        response = self.ai_service.generate_completion(
            prompt,
            temperature=self.settings.ai_settings.resume_temperature,
        )
        latex = clean_latex_output(response)

        if not latex:
            logger.error("❌ AI returned no LaTeX content")
            raise ResumeGenerationError("AI failed to generate resume content.")
        if _END_DOCUMENT not in latex:
            logger.warning("⚠️ Generated LaTeX has no \\end{document}; it may be truncated")

        logger.info(f"✅ Resume generated ({len(latex)} characters)")
        return latex

    def create_resume(self, user_id: str, title: str, job_description: str, compile_pdf: bool = True) -> Resume:
        """
        Generate, compile and save a resume for ``user_id``.

        A compile failure aborts the whole operation.

        Raises:
            ResumeGenerationError: If no LaTeX was generated
            PdfCompilationError: If ``compile_pdf`` and the PDF could not be built
        """
        profile = self.profile_service.get_profile(user_id)
        latex = self.generate_resume_from_profile(profile.to_prompt_text(), job_description)

        pdf_data_uri = self.pdf_service.generate_pdf_from_latex(latex) if compile_pdf else None

        resume = self.store.save_resume(
            ResumeDraft(
                title=title,
                job_description=job_description,
                latex_content=latex,
                pdf_data_uri=pdf_data_uri,
            ),
            user_id,
        )
        logger.info(f"💾 Saved resume {resume.id} for {user_id}: {title}")
        return resume

    def save_generated_resume(self, user_id: str, title: str, job_description: str, latex: str) -> Resume:
        """
        Persist LaTeX that was already generated (e.g. by the chat flow).

        The PDF is compiled best effort; a failure leaves ``pdf_data_uri`` empty.
        """
        pdf_base64 = self.pdf_service.compile_latex(latex)
        draft = ResumeDraft(
            title=title or "Untitled Resume",
            job_description=job_description,
            latex_content=latex,
            pdf_data_uri=self._data_uri_or_none(pdf_base64),
        )
        resume = self.store.save_resume(draft, user_id)
        logger.info(f"💾 Saved chat resume {resume.id} for {user_id}")
        return resume

    def update_resume(
        self,
        resume_id: str,
        title: Optional[str] = None,
        latex_content: Optional[str] = None,
        recompile: bool = False
    ) -> Resume:
        """
        Apply a manual edit.

        Raises:
            ValueError: If ``latex_content`` is given but empty
            ResumeNotFoundError: If the resume does not exist
            PdfCompilationError: If ``recompile`` and compilation failed
        """
        data = {}
        if title is not None:
            data["title"] = title
        if latex_content is not None:
            if not latex_content.strip():
                raise ValueError("LaTeX content cannot be empty.")
            data["latex_content"] = latex_content

        if recompile:
            source = latex_content if latex_content is not None else self.get_resume(resume_id).latex_content
            data["pdf_data_uri"] = self.pdf_service.generate_pdf_from_latex(source)

        resume = self.store.update_resume(resume_id, data)
        logger.info(f"Resume {resume_id} updated: {sorted(data)}")
        return resume

    def compile_resume(self, resume_id: str) -> Resume:
        """Recompile the stored LaTeX and save the new PDF."""
        return self.update_resume(resume_id, recompile=True)

    def get_resume(self, resume_id: str) -> Resume:
        """
        Raises:
            ResumeNotFoundError: If the resume does not exist
        """
        resume = self.store.get_resume(resume_id)
        if resume is None:
            raise ResumeNotFoundError(resume_id)
        return resume

    def list_resumes(self, user_id: str) -> List[Resume]:
        return self.store.list_resumes(user_id)

    def delete_resume(self, resume_id: str) -> None:
        if not self.store.delete_resume(resume_id):
            raise ResumeNotFoundError(resume_id)
        logger.info(f"🗑️ Deleted resume {resume_id}")

    # ----------------------------------------------------------- export --

    @staticmethod
    def tex_filename(resume: Resume) -> str:
        return safe_filename(resume.title, "tex")

    @staticmethod
    def pdf_filename(resume: Resume) -> str:
        return safe_filename(resume.title, "pdf")

    def pdf_bytes(self, resume: Resume) -> bytes:
        """
        Return the resume's PDF, compiling it first if it was never built.

        Raises:
            PdfCompilationError: If there is no PDF and compiling failed
        """
        if not resume.pdf_data_uri:
            resume = self.compile_resume(resume.id)
        try:
            return decode_data_uri(resume.pdf_data_uri)
        except ValueError as e:
            raise PdfCompilationError(f"Stored PDF for {resume.id} is unreadable") from e

    @staticmethod
    def _data_uri_or_none(pdf_base64: str) -> Optional[str]:
        return to_data_uri(pdf_base64) if pdf_base64 else None
