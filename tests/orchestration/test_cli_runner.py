import httpx
import pytest
import yaml

import config
import orchestration.cli_runner as cli_runner
from core.enhancement_gateway import HttpEnhancementGateway
from models.letter_models import EnhancementField


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli_runner, "setup_logging", lambda: None)


def _write_draft(tmp_path, data) -> str:
    path = tmp_path / "draft.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return str(path)


def _patch_gateway(monkeypatch, handler):
    def factory():
        return HttpEnhancementGateway(
            base_url="http://backend.test",
            api_key="k",
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

    monkeypatch.setattr(cli_runner, "HttpEnhancementGateway", factory)


def test_missing_draft_returns_2(tmp_path):
    assert cli_runner.run(str(tmp_path / "missing.yaml")) == 2


def test_successful_run_applies_everything(tmp_path, monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "enhancedLetter": {
                    "title": "Learn Spanish Fluently",
                    "goal": "Reach B2",
                    "content": "Dear future me",
                },
                "suggestedMilestones": [],
            },
        )

    _patch_gateway(monkeypatch, handler)
    monkeypatch.setattr(config.settings, "APPLY_FIELD_DELAY_SECONDS", 0.0)
    rendered_applied: list[set] = []
    render = cli_runner.render_suggestions

    def recording_render(draft, result, applied=None, from_cache=False):
        rendered_applied.append(set(applied or ()))
        return render(draft, result, applied=applied, from_cache=from_cache)

    monkeypatch.setattr(cli_runner, "render_suggestions", recording_render)
    path = _write_draft(tmp_path, {"title": "Spanish", "goal": "Learn Spanish"})

    assert cli_runner.run(path, apply_all=True) == 0
    assert rendered_applied == [set(), set(EnhancementField)]


def test_failed_enhancement_returns_1(tmp_path, monkeypatch):
    _patch_gateway(monkeypatch, lambda request: httpx.Response(500))
    path = _write_draft(tmp_path, {"goal": "Learn Spanish"})

    assert cli_runner.run(path) == 1
