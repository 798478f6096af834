"""
Local LaTeX compilation backend.

Runs a LaTeX compiler (pdflatex by default) on the document inside a scoped
scratch file, so the .tex source, the PDF and every auxiliary file are removed
once the PDF bytes have been read, whatever the outcome.
"""

import os
import re
import shutil
import subprocess
from pathlib import Path
from typing import List, Tuple

from tailor.contexts.rendering.backends import BackendFailure, BackendReply
from tailor.contexts.rendering.logger import _log_debug, log_compiler_output
from tailor.utils.scratch import scoped_file

# Produced next to the source in addition to the standard auxiliary files
COMPILER_OUTPUT_EXTENSIONS = [".pdf", ".out", ".toc"]

MAX_REPORTED_ERRORS = 3


def parse_latex_log(log_content: str) -> Tuple[List[str], List[str]]:
    """
    Parse LaTeX log output for errors and warnings.

    Args:
        log_content: Content of the .log file (or compiler stdout)

    Returns:
        Tuple of (errors, warnings)
    """
    errors = []
    warnings = []

    # LaTeX error pattern: "! Error message"
    error_pattern = re.compile(r"^! (.+)$", re.MULTILINE)
    for match in error_pattern.finditer(log_content):
        errors.append(match.group(1).strip())

    # file:line:error style (-file-line-error)
    file_line_pattern = re.compile(r"^[^\s:]+\.tex:\d+: (.+)$", re.MULTILINE)
    for match in file_line_pattern.finditer(log_content):
        message = match.group(1).strip()
        if message not in errors:
            errors.append(message)

    # Additional error patterns that don't start with "!"
    additional_error_patterns = [
        r"Undefined control sequence",
        r"File ended while scanning use of",
        r"Emergency stop",
    ]
    for pattern in additional_error_patterns:
        match = re.search(rf"({pattern}.*?)$", log_content, re.MULTILINE)
        if match and not any(match.group(1) in err for err in errors):
            errors.append(match.group(1))

    warning_patterns = [
        r"LaTeX Warning: (.+)",
        r"Package \w+ Warning: (.+)",
        r"Overfull \\hbox \((.+)\)",
        r"Underfull \\hbox \((.+)\)",
    ]
    for pattern in warning_patterns:
        for match in re.finditer(pattern, log_content, re.MULTILINE):
            warnings.append(match.group(1).strip())

    return errors, warnings


class LocalLatexBackend:
    """
    Callable backend that compiles the document with a local LaTeX install.

    Args:
        compiler: Executable name or path (default: pdflatex)
        scratch_dir: Directory for the scoped source file
        num_passes: Compiler passes (2 resolves cross-references)
        timeout_s: Per-pass timeout

    Calling the instance returns a BackendReply with the PDF bytes, or raises
    BackendFailure naming the first compiler errors.
    """

    def __init__(
        self,
        compiler: str = "pdflatex",
        scratch_dir: Path = Path("outs/scratch"),
        num_passes: int = 2,
        timeout_s: float = 60.0,
    ):
        self.compiler = compiler
        self.scratch_dir = Path(scratch_dir)
        self.num_passes = num_passes
        self.timeout_s = timeout_s

    @property
    def available(self) -> bool:
        return shutil.which(self.compiler) is not None

    def _environment(self) -> dict:
        env = os.environ.copy()
        # Paranoid TeX I/O: read and write only below the working directory, no shell escape
        env.setdefault("openout_any", "p")
        env.setdefault("openin_any", "p")
        env.setdefault("shell_escape", "f")
        env.setdefault("max_print_line", "1000")
        return env

    def __call__(self, document: str) -> BackendReply:
        executable = shutil.which(self.compiler)
        if executable is None:
            raise BackendFailure(f"{self.compiler} not found in PATH")

        with scoped_file(
            self.scratch_dir, "resume_", document, extra_extensions=COMPILER_OUTPUT_EXTENSIONS
        ) as tex_path:
            workdir = tex_path.parent
            _log_debug(f"Compiling {tex_path.name} in {workdir} ({self.num_passes} passes)")

            cmd = [
                executable,
                "-interaction=nonstopmode",
                "-halt-on-error",
                "-file-line-error",
                "-no-shell-escape",
                tex_path.name,
            ]

            stdout_parts = []
            for _ in range(self.num_passes):
                try:
                    result = subprocess.run(
                        cmd,
                        cwd=workdir,
                        capture_output=True,
                        text=True,
                        encoding="utf-8",
                        errors="replace",
                        timeout=self.timeout_s,
                        env=self._environment(),
                    )
                except subprocess.TimeoutExpired:
                    raise BackendFailure(
                        f"{self.compiler} timed out after {self.timeout_s:.0f}s"
                    ) from None

                stdout_parts.append(result.stdout)
                if result.returncode != 0:
                    break

            stdout = "\n".join(stdout_parts)
            log_file = tex_path.with_suffix(".log")
            # pdflatex writes log files in latin-1 (font metadata is not UTF-8)
            log_content = log_file.read_text(encoding="latin-1") if log_file.exists() else stdout
            errors, warnings = parse_latex_log(log_content)

            pdf_path = tex_path.with_suffix(".pdf")
            if not pdf_path.exists() or errors:
                log_compiler_output(stdout, result.stderr)
                reported = "; ".join(errors[:MAX_REPORTED_ERRORS]) or "PDF file was not generated"
                raise BackendFailure(f"{self.compiler}: {reported}")

            _log_debug(f"{self.compiler} finished with {len(warnings)} warnings")
            return BackendReply(
                status_code=200, content=pdf_path.read_bytes(), content_type="application/pdf"
            )
