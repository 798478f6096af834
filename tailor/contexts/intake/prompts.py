"""
Instruction templates for the generation provider.

Each builder renders a Jinja2 template into the opaque instruction string the
generation context sends to its provider. The resume itself is inserted as a
variable, so LaTeX braces and macro parameters in it are never interpreted by
Jinja.
"""

from typing import Iterable, List, Optional

from jinja2 import Environment, StrictUndefined

from tailor.contexts.intake.task_input import KeywordInput, require_description, require_keywords

_ENV = Environment(
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
)

FORMATTING_RULES = """\
LATEX FORMATTING RULES:
- NEVER break LaTeX syntax or commands
- Maintain all existing LaTeX structure and formatting
- Keep document class, packages, and formatting commands unchanged
- Only modify the CONTENT within LaTeX commands, not the commands themselves
- Ensure every opening brace has a matching closing brace
- Never add empty braces after commands that do not take them
- For \\resumeProjectHeading, always pass exactly two arguments: the heading and an empty pair

CRITICAL OUTPUT REQUIREMENTS:
- Return ONLY the complete modified LaTeX code
- Do NOT wrap the code in markdown code fences
- Do NOT include explanations or introductory text before or after the code
- The response must start with \\documentclass and end with \\end{document}
"""

DESCRIPTION_TEMPLATE = _ENV.from_string(
    """\
You are an expert resume tailor and LaTeX specialist. Modify the provided LaTeX \
resume to better match the job description while keeping the LaTeX compilable.

JOB DESCRIPTION:
{{ description }}

ORIGINAL LATEX RESUME:
{{ resume }}

INSTRUCTIONS:
1. Extract hard skills, soft skills, domain knowledge and methodologies from the job description.
2. Integrate them naturally into the Summary, Experience, Projects and Skills sections.
3. Keep changes realistic: do not change dates, employers, titles or invent experience.
4. Do not oversaturate with keywords; favor quality over quantity.
{% if excluded %}
5. Do NOT add or emphasize these terms:
{% for term in excluded %}
   - {{ term }}
{% endfor %}
{% endif %}

{{ rules }}"""
)

KEYWORDS_TEMPLATE = _ENV.from_string(
    """\
You are an expert LaTeX resume editor. Insert the EXACT provided keywords into \
the resume, focusing on the Summary and Skills sections.

KEYWORDS (exact terms to include):
{% for keyword in keywords %}
- {{ keyword }}
{% endfor %}

ORIGINAL LATEX RESUME:
{{ resume }}

STRICT RULES:
- Do NOT invent new keywords beyond the provided list.
- If a keyword (or a close variation) already exists, REPLACE it with the EXACT provided term.
- Prioritize adding into: 1) Summary (as natural phrases) 2) Skills (under fitting bullets).
- Keep additions concise and natural; avoid repetition.

{{ rules }}"""
)


def build_description_instruction(
    description: str,
    resume: str,
    excluded: Optional[Iterable[str]] = None,
) -> str:
    """
    Build the instruction for job-description mode.

    Args:
        description: Free-text job description (must not be blank)
        resume: Original LaTeX resume
        excluded: Terms the provider must not add (optional)

    Raises:
        InputError: If the description is empty or whitespace-only
    """
    description = require_description(description)
    return DESCRIPTION_TEMPLATE.render(
        description=description.strip(),
        resume=resume,
        excluded=list(excluded or []),
        rules=FORMATTING_RULES,
    )


def build_keywords_instruction(keywords: KeywordInput, resume: str) -> str:
    """
    Build the instruction for keyword mode.

    Raises:
        InputError: If no keywords survive normalization
    """
    normalized: List[str] = require_keywords(keywords)
    return KEYWORDS_TEMPLATE.render(keywords=normalized, resume=resume, rules=FORMATTING_RULES)
