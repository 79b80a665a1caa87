"""
Tests for prompt templating, the industry panels and the editable prompt store.
"""
from types import SimpleNamespace

from prbuild import prompts
from prbuild import storage
from prbuild.drafter import generation_input, format_release_date

from conftest import RELEASE_BODY


class TestFillTemplate:

    def test_replaces_every_occurrence(self):
        out = prompts.fill_template("{{a}} and {{a}} then {{b}}", {"a": "x", "b": 2})
        assert out == "x and x then 2"

    def test_unknown_placeholders_are_left(self):
        assert prompts.fill_template("Hi {{name}} {{other}}", {"name": "Ann"}) == "Hi Ann {{other}}"

    def test_none_becomes_empty(self):
        assert prompts.fill_template("[{{x}}]", {"x": None}) == "[]"


class TestFormatters:

    def test_core_facts_are_numbered(self):
        assert prompts.format_core_facts(["one", "two"]) == "1. one\n2. two"
        assert prompts.format_core_facts([]) == ""

    def test_quote_sources(self):
        out = prompts.format_quote_sources([
            {"name": "Jane Doe", "title": "CEO", "quote": "Hello"},
            {"name": "Sam Roe", "title": "CTO"},
        ])
        assert out.splitlines()[0] == '- Jane Doe, CEO: "Hello"'
        assert out.splitlines()[1] == "- Sam Roe, CTO (please create suggested quote)"

    def test_missing_quotes_ask_for_suggestions(self):
        assert "suggested quotes" in prompts.format_quote_sources(None)

    def test_supporting_context(self):
        assert prompts.format_supporting_context("") == ""
        assert "Background doc" in prompts.format_supporting_context("Background doc")

    def test_release_date_formatting(self):
        assert format_release_date("2025-03-04") == "March 4, 2025"
        assert format_release_date("next week") == "next week"
        assert format_release_date(None) == ""


class TestGenerationPrompt:

    def test_intake_fields_land_in_user_prompt(self):
        release = dict(RELEASE_BODY)
        system, user = prompts.pr_generation_prompts(generation_input(release))
        assert system == prompts.PR_GENERATION_SYSTEM_PROMPT
        assert "Acme Corp" in user
        assert "AUSTIN, TX, March 4, 2025" in user
        assert "1. Cuts handling costs by 48 percent" in user
        assert '- Jane Doe, CEO: "Warehouses deserve better tools."' in user
        assert "{{companyName}}" not in user

    def test_boilerplate_fallback(self):
        variables = prompts.generation_variables({"company_name": "Acme"})
        assert "boilerplate" in variables["boilerplate"]


class TestPanels:

    def test_industry_panel(self):
        prompt = prompts.build_panel_system_prompt("finance")
        assert "former WSJ financial editor" in prompt
        assert "Step 3: Contrarian Recommendation" in prompt

    def test_unknown_industry_uses_general(self):
        assert prompts.build_panel_system_prompt("aerospace") == prompts.build_panel_system_prompt("general")

    def test_default_panel_prompt_follows_industry(self):
        system, user = prompts.panel_critique_prompts("HEADLINE: X\n\nBody", "retail")
        assert "former Retail Week editor" in system
        assert "HEADLINE: X" in user


class TestPromptStore:

    def test_list_seeds_defaults(self):
        rows = prompts.list_prompts()
        assert {r["prompt_key"] for r in rows} == set(prompts.DEFAULT_PROMPTS)
        by_key = {r["prompt_key"]: r for r in rows}
        assert by_key["panel_critique"]["variables"] == ["pressRelease"]
        assert prompts.list_prompts() and len(storage.list_prompt_configs()) == 3

    def test_stored_prompt_overrides_default(self):
        prompts.list_prompts()
        row = prompts.update_prompt("rewrite_from_feedback", system_prompt="Be brief.",
                                    user_prompt_template="Draft: {{originalDraft}}")
        assert row["version"] == 2
        system, user = prompts.rewrite_prompts("Old draft", "synthesis", "issues")
        assert system == "Be brief."
        assert user == "Draft: Old draft"

    def test_reset_restores_default(self):
        prompts.list_prompts()
        prompts.update_prompt("pr_generation", system_prompt="Custom")
        row = prompts.reset_prompt("pr_generation")
        assert row["system_prompt"] == prompts.PR_GENERATION_SYSTEM_PROMPT

    def test_reset_unknown_key(self):
        assert prompts.reset_prompt("nope") is None

    def test_cache_serves_stale_until_cleared(self):
        prompts.list_prompts()
        assert prompts.prompt_store.get("pr_generation")["version"] == 1
        storage.update_prompt_config("pr_generation", system_prompt="Changed directly")
        assert prompts.prompt_store.get("pr_generation")["system_prompt"] != "Changed directly"
        prompts.prompt_store.clear()
        assert prompts.prompt_store.get("pr_generation")["system_prompt"] == "Changed directly"

    def test_each_key_expires_on_its_own(self, monkeypatch):
        clock = [1000.0]
        monkeypatch.setattr(prompts, "time", SimpleNamespace(time=lambda: clock[0]))
        prompts.list_prompts()
        store = prompts.PromptStore(ttl=60)

        assert store.get("pr_generation")["version"] == 1
        clock[0] = 1050.0
        store.get("panel_critique")
        storage.update_prompt_config("pr_generation", system_prompt="Changed directly")

        clock[0] = 1059.0
        assert store.get("pr_generation")["system_prompt"] != "Changed directly"
        clock[0] = 1090.0
        assert store.get("pr_generation")["system_prompt"] == "Changed directly"


class TestPromptEditorAPI:

    def test_admin_only(self, client, user_headers):
        assert client.get("/api/prompts", headers=user_headers).status_code == 403

    def test_edit_and_reset(self, client, admin_headers):
        rows = client.get("/api/prompts", headers=admin_headers).json()
        assert len(rows) == 3

        res = client.patch("/api/prompts/pr_generation", json={"system_prompt": "Write tersely."},
                           headers=admin_headers)
        assert res.status_code == 200
        assert res.json()["version"] == 2
        assert prompts.prompt_store.get("pr_generation")["system_prompt"] == "Write tersely."

        res = client.post("/api/prompts/pr_generation/reset", headers=admin_headers)
        assert res.json()["system_prompt"] == prompts.PR_GENERATION_SYSTEM_PROMPT
        assert res.json()["version"] == 3

    def test_empty_and_unknown(self, client, admin_headers):
        client.get("/api/prompts", headers=admin_headers)
        assert client.patch("/api/prompts/pr_generation", json={}, headers=admin_headers).status_code == 400
        assert client.patch("/api/prompts/nope", json={"system_prompt": "x"},
                            headers=admin_headers).status_code == 404
