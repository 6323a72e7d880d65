"""
LaTeX -> PDF compilation through a remote HTTP service or a local TeX engine.
"""

import base64
import binascii
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

import requests

from resumechat.config import Settings
from resumechat.exceptions import PdfCompilationError
from resumechat.utils.logger import get_logger

logger = get_logger(__name__)

PDF_DATA_URI_PREFIX = "data:application/pdf;base64,"


def to_data_uri(pdf_base64: str) -> str:
    """Wrap base64 PDF data in a ``data:`` URI."""
    return f"{PDF_DATA_URI_PREFIX}{pdf_base64}"


def decode_data_uri(data_uri: Optional[str]) -> bytes:
    """
    Decode a PDF data URI (or bare base64) back to bytes.

    Raises:
        ValueError: If there is nothing to decode or it is not base64
    """
    if not data_uri:
        raise ValueError("No PDF data")
    payload = data_uri.split(",", 1)[1] if data_uri.startswith("data:") else data_uri
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid PDF data: {e}") from e


class PdfService:
    """Compile LaTeX documents to PDF."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine = settings.compiler.engine
        self.url = settings.compiler.url
        self.timeout = settings.compiler.timeout
        self.local_binary = settings.compiler.local_binary
        logger.info(f"PDF service ready ({self.engine} engine)")

    def compile_latex(self, latex: str) -> str:
        """
        Compile LaTeX and return the PDF as base64.

        Every failure is logged and turned into an empty string; callers that
        need a hard failure use :meth:`generate_pdf_from_latex`.
        """
        if not latex or not latex.strip():
            logger.warning("⚠️ Nothing to compile: empty LaTeX")
            return ""
        try:
            if self.engine == "local":
                pdf_bytes = self._compile_local(latex)
            else:
                pdf_bytes = self._compile_remote(latex)
            return base64.b64encode(pdf_bytes).decode("ascii")
        except Exception as e:
            logger.error(f"❌ Error compiling LaTeX: {e}")
            return ""

    def generate_pdf_from_latex(self, latex: str) -> str:
        """
        Compile LaTeX and return a PDF data URI.

        Raises:
            PdfCompilationError: If compilation produced nothing
        """
        pdf_base64 = self.compile_latex(latex)
        if not pdf_base64:
            raise PdfCompilationError(
                "PDF generation failed. The compiler returned an empty response."
            )
        logger.info(f"✅ PDF compiled ({len(pdf_base64)} base64 chars)")
        return to_data_uri(pdf_base64)

    def _compile_remote(self, latex: str) -> bytes:
        """POST the source to the compile service."""
        response = requests.post(self.url, json={"latex": latex}, timeout=self.timeout)

        if not response.ok:
            raise RuntimeError(
                f"PDF compilation failed with status {response.status_code}: {response.text[:500]}"
            )

        if response.headers.get("Content-Type", "").startswith("application/pdf"):
            return response.content

        pdf = response.json().get("pdf")
        if not pdf:
            raise RuntimeError("Compile service response has no 'pdf' field")
        return decode_data_uri(pdf)

    def _compile_local(self, latex: str) -> bytes:
        """Run the configured TeX binary in a scratch directory."""
        binary_path = shutil.which(self.local_binary)
        if not binary_path:
            raise RuntimeError(f"LaTeX engine not found on PATH: {self.local_binary}")

        with tempfile.TemporaryDirectory(prefix="resumechat-tex-") as tmpdir:
            tex_path = Path(tmpdir) / "resume.tex"
            tex_path.write_text(latex, encoding="utf-8")

            if Path(binary_path).name.startswith("tectonic"):
                cmd = [binary_path, "--chatter", "minimal", "--outdir", tmpdir, tex_path.name]
            else:
                cmd = [binary_path, "-interaction=nonstopmode", "-halt-on-error", tex_path.name]

            result = subprocess.run(
                cmd,
                cwd=tmpdir,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout,
            )
            pdf_path = tex_path.with_suffix(".pdf")
            if result.returncode != 0 or not pdf_path.exists():
                tail = (result.stdout or result.stderr or "")[-500:]
                raise RuntimeError(f"{Path(binary_path).name} exited with {result.returncode}: {tail}")
            return pdf_path.read_bytes()
