"""
resume-tailor - job-targeted LaTeX resume rewriting and rendering

Takes a job description (or a keyword list), asks a text-generation provider to
rewrite a LaTeX resume template for it, and renders the result through an
ordered chain of LaTeX compilation backends.

Architecture:
- Intake Context: Task normalization and instruction building
- Generation Context: Provider calls with retry/backoff and output sanitizing
- Rendering Context: Bookend validation, backend fallback, artifact detection
"""

__version__ = "0.1.0"
