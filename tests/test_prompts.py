import os

import pytest

from prompts import PromptTemplate, load_prompt_template, render_prompt

PERSONA_VALUES = {
    "brand": "ByeBro",
    "party": "bachelor party",
    "destinations": "Ibiza, Prague",
    "origin_cities": "Rome, Milan",
}


def _reset_prompt_cache():
    load_prompt_template.cache_clear()


@pytest.fixture(autouse=True)
def clear_prompt_overrides():
    prefix = "PARTY_PLANNER_PROMPT_"
    for key in list(os.environ.keys()):
        if key.startswith(prefix):
            os.environ.pop(key)
    _reset_prompt_cache()
    yield
    _reset_prompt_cache()


def test_persona_prompt_keeps_the_core_rules():
    template = load_prompt_template("persona")
    assert template.placeholders == frozenset(PERSONA_VALUES)

    rendered = template.format(**PERSONA_VALUES)
    assert "ByeBro" in rendered
    assert "DESTINATIONS: Ibiza, Prague" in rendered
    assert "NEVER assume the departure city" in rendered
    assert "YYYY-MM-DD" in rendered
    assert "unlock_checkout" in rendered


def test_missing_values_are_reported_together():
    with pytest.raises(KeyError) as excinfo:
        load_prompt_template("persona").format(brand="ByeBride")
    message = str(excinfo.value)
    assert "destinations" in message and "origin_cities" in message


def test_render_prompt_shortcut():
    assert render_prompt("persona", **PERSONA_VALUES) == load_prompt_template("persona").format(**PERSONA_VALUES)


def test_environment_override_prefers_file(tmp_path, monkeypatch):
    override_file = tmp_path / "custom_prompt.txt"
    override_file.write_text("Custom prompt for {brand}", encoding="utf-8")
    monkeypatch.setenv("PARTY_PLANNER_PROMPT_PERSONA", str(override_file))

    template = load_prompt_template("persona")
    assert template.text == "Custom prompt for {brand}"
    assert template.format(brand="ByeBride") == "Custom prompt for ByeBride"


def test_environment_override_accepts_literal_text(monkeypatch):
    monkeypatch.setenv("PARTY_PLANNER_PROMPT_PERSONA", "Be brief.")
    assert load_prompt_template("persona") == PromptTemplate("persona", "Be brief.")


def test_unknown_prompt_raises():
    with pytest.raises(FileNotFoundError):
        load_prompt_template("does_not_exist")
