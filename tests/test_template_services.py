import asyncio
import json

import pytest

from gridlogic.core.config import settings
from gridlogic.core.exceptions import DifficultyNotFoundError, TemplateDefinitionError, TemplateLoadError
from gridlogic.services.template_services import TemplateServices


def test_loads_packaged_bank_once():
    services = TemplateServices(settings.TEMPLATES_PATH)

    first = asyncio.run(services.load())
    second = asyncio.run(services.load())
    assert first is second

    easy = asyncio.run(services.get_templates_by_difficulty("easy"))
    assert len(easy) >= 5
    assert asyncio.run(services.get_difficulties()) == ["easy", "medium", "hard"]


def test_unknown_difficulty():
    services = TemplateServices(settings.TEMPLATES_PATH)
    with pytest.raises(DifficultyNotFoundError) as exc_info:
        asyncio.run(services.get_templates_by_difficulty("impossible"))
    assert exc_info.value.difficulty == "impossible"


def test_missing_file_is_a_load_error(tmp_path):
    services = TemplateServices(tmp_path / "missing.json")
    with pytest.raises(TemplateLoadError):
        asyncio.run(services.load())


def test_malformed_json_is_a_load_error(tmp_path):
    path = tmp_path / "templates.json"
    path.write_text('{"easy": [', encoding="utf-8")
    with pytest.raises(TemplateLoadError):
        asyncio.run(TemplateServices(path).load())


def test_invalid_definition_is_an_authoring_error(tmp_path):
    path = tmp_path / "templates.json"
    path.write_text(json.dumps({
        "easy": [{
            "placeholders": {"shape": {"type": "shape"}},
            "statement": {"text": "{shape}", "fol": "{shape}"},
            "rules": [{"type": "teleport"}],
        }],
    }), encoding="utf-8")
    with pytest.raises(TemplateDefinitionError):
        asyncio.run(TemplateServices(path).load())


def test_failed_load_is_retried(tmp_path):
    path = tmp_path / "templates.json"
    services = TemplateServices(path)
    with pytest.raises(TemplateLoadError):
        asyncio.run(services.load())

    path.write_text(settings.TEMPLATES_PATH.read_text(encoding="utf-8"), encoding="utf-8")
    assert "hard" in asyncio.run(services.load())
