"""Tests for template extraction, auto-apply and rendering."""

from varmatch.config import MatchingConfig
from varmatch.matching.semantic import CandidateMatch
from varmatch.templates import (
    INSTRUCTIONS,
    TemplateVariable,
    apply_matches,
    extract_variables,
    prepare_variables,
    preferences_from_variables,
    render_prompt,
)


class TestExtractVariables:
    def test_order_and_duplicates(self):
        text = "Hi {{ name }}, greetings from {{location}}. Bye {{name}}!"
        assert extract_variables(text) == ["name", "location"]

    def test_no_variables(self):
        assert extract_variables("plain text with {single} braces") == []

    def test_blank_placeholder_ignored(self):
        assert extract_variables("{{   }} and {{tone}}") == ["tone"]


class TestApplyMatches:
    def test_applies_above_threshold(self):
        variables = [TemplateVariable("target_audience"), TemplateVariable("tone")]
        matches = [
            CandidateMatch("target_audience", "audience", 0.9),
            CandidateMatch("tone", "voice_notes", 0.75),
        ]
        prefs = {"audience": "developers", "voice_notes": "dry"}

        updated = apply_matches(variables, prefs, matches, threshold=0.8)
        assert updated[0] == TemplateVariable("target_audience", "developers", True)
        assert updated[1] == TemplateVariable("tone", "", False)

    def test_first_match_wins(self):
        variables = [TemplateVariable("brand")]
        matches = [
            CandidateMatch("brand", "company_name", 1.0),
            CandidateMatch("brand", "product_name", 0.9),
        ]
        prefs = {"company_name": "Acme", "product_name": "Widget"}
        assert apply_matches(variables, prefs, matches)[0].value == "Acme"


class TestPrepareVariables:
    def test_exact_and_suggested(self):
        text = "Email for {{product_name}} aimed at {{target_audience}} about {{topic}}"
        prefs = {"product_name": "Widget", "audience": "developers"}

        variables = prepare_variables(text, prefs)
        assert variables == [
            TemplateVariable("product_name", "Widget", False),
            TemplateVariable("target_audience", "developers", True),
            TemplateVariable("topic", "", False),
        ]

    def test_reserved_preferences_not_suggested(self):
        prefs = {"__llm_provider": "ChatGPT"}
        variables = prepare_variables("Use {{llm_provider}}", prefs)
        assert variables == [TemplateVariable("llm_provider", "", False)]

    def test_auto_apply_threshold_from_config(self):
        config = MatchingConfig(auto_apply_threshold=0.95)
        variables = prepare_variables("For {{target_audience}}", {"audience": "developers"}, config)
        assert variables == [TemplateVariable("target_audience", "", False)]


class TestRenderPrompt:
    def test_inlines_values(self):
        variables = [TemplateVariable("name", "Ada"), TemplateVariable("city", "")]
        rendered = render_prompt("Hi {{ name }} from {{city}}", variables)
        assert rendered == INSTRUCTIONS + "Hi ((name:Ada)) from {{city}}"

    def test_nothing_filled(self):
        assert render_prompt("Hi {{name}}", [TemplateVariable("name")]) == "Hi {{name}}"

    def test_value_with_backslashes(self):
        rendered = render_prompt("Path: {{dir}}", [TemplateVariable("dir", r"C:\temp\1")])
        assert rendered.endswith(r"Path: ((dir:C:\temp\1))")

    def test_preferences_from_variables(self):
        variables = [TemplateVariable("name", "Ada"), TemplateVariable("city", "")]
        assert preferences_from_variables(variables) == {"name": "Ada"}
