"""Unit tests for task intake: keyword normalization, task resolution, instructions."""

import pytest

from tailor.contexts.intake.prompts import (
    FORMATTING_RULES,
    build_description_instruction,
    build_keywords_instruction,
)
from tailor.contexts.intake.task_input import (
    AMBIGUOUS_TASK,
    NO_TASK,
    normalize_keywords,
    resolve_task,
)
from tailor.exceptions import InputError


class TestNormalizeKeywords:
    """Tests for normalize_keywords()."""

    @pytest.mark.unit
    def test_comma_separated_string(self):
        assert normalize_keywords(" Go, Kubernetes ,, gRPC ") == ["Go", "Kubernetes", "gRPC"]

    @pytest.mark.unit
    def test_list_input(self):
        assert normalize_keywords(["  Python ", "SQL"]) == ["Python", "SQL"]

    @pytest.mark.unit
    def test_empty_and_none_entries_dropped(self):
        assert normalize_keywords(["Go", "", None, "   ", "Rust"]) == ["Go", "Rust"]

    @pytest.mark.unit
    def test_order_and_duplicates_preserved(self):
        assert normalize_keywords("b, a, b") == ["b", "a", "b"]

    @pytest.mark.unit
    def test_none(self):
        assert normalize_keywords(None) == []

    @pytest.mark.unit
    def test_multiword_keywords_kept_whole(self):
        assert normalize_keywords("machine learning, CI/CD") == ["machine learning", "CI/CD"]


class TestResolveTask:
    """Tests for resolve_task()."""

    @pytest.mark.unit
    def test_description_mode(self):
        task = resolve_task(task_description="Data engineer")
        assert task.mode == "description"
        assert task.description == "Data engineer"
        assert task.keywords == []

    @pytest.mark.unit
    def test_keyword_mode(self):
        task = resolve_task(keywords="Go, Rust")
        assert task.mode == "keywords"
        assert task.keywords == ["Go", "Rust"]

    @pytest.mark.unit
    def test_both_given(self):
        with pytest.raises(InputError) as exc_info:
            resolve_task(task_description="Data engineer", keywords=["Go"])
        assert exc_info.value.reason == AMBIGUOUS_TASK

    @pytest.mark.unit
    def test_neither_given(self):
        with pytest.raises(InputError) as exc_info:
            resolve_task()
        assert exc_info.value.reason == NO_TASK

    @pytest.mark.unit
    @pytest.mark.parametrize("description", ["", "  \n "])
    def test_blank_description(self, description):
        with pytest.raises(InputError) as exc_info:
            resolve_task(task_description=description)
        assert exc_info.value.reason == NO_TASK

    @pytest.mark.unit
    @pytest.mark.parametrize("keywords", [[], "", ",,", [None, ""]])
    def test_blank_keywords(self, keywords):
        with pytest.raises(InputError) as exc_info:
            resolve_task(keywords=keywords)
        assert exc_info.value.reason == NO_TASK


class TestInstructions:
    """Tests for instruction rendering."""

    @pytest.mark.unit
    def test_description_instruction_contents(self, minimal_document):
        instruction = build_description_instruction("  Backend engineer, Go  ", minimal_document)

        assert "JOB DESCRIPTION:\nBackend engineer, Go\n" in instruction
        assert minimal_document in instruction
        assert FORMATTING_RULES.strip() in instruction
        assert "Do NOT add or emphasize" not in instruction

    @pytest.mark.unit
    def test_description_instruction_with_exclusions(self, minimal_document):
        instruction = build_description_instruction(
            "Backend engineer", minimal_document, excluded=["Java", "PHP"]
        )

        assert "Do NOT add or emphasize these terms:" in instruction
        assert "   - Java\n" in instruction
        assert "   - PHP\n" in instruction

    @pytest.mark.unit
    def test_latex_in_resume_is_not_interpreted(self):
        resume = "\\newcommand{\\x}[1]{#1} {{ not_a_variable }} {% raw %}"
        instruction = build_keywords_instruction(["Go"], resume)
        assert resume in instruction

    @pytest.mark.unit
    def test_keyword_instruction_lists_normalized_keywords(self, minimal_document):
        instruction = build_keywords_instruction(" Go ,,Rust", minimal_document)
        assert "- Go\n- Rust\n" in instruction

    @pytest.mark.unit
    def test_empty_description_rejected(self, minimal_document):
        with pytest.raises(InputError):
            build_description_instruction("   ", minimal_document)
