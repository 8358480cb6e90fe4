import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from gridlogic.core.config import settings
from gridlogic.core.exceptions import DifficultyNotFoundError, TemplateDefinitionError, TemplateLoadError
from gridlogic.engine.template import LogicTemplate
from gridlogic.schemas.template_schema import TemplateDefinition

logger = logging.getLogger(__name__)

TemplateBank = TypeAdapter(Dict[str, List[TemplateDefinition]])


def load_definitions(path: Path) -> Dict[str, List[TemplateDefinition]]:
    """Read and validate the template bank file"""
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise TemplateLoadError(f"Failed to load templates from {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise TemplateLoadError(f"Template file {path} is not valid JSON: {exc}") from exc

    try:
        return TemplateBank.validate_python(data)
    except ValidationError as exc:
        raise TemplateDefinitionError(f"Invalid template definition in {path}: {exc}") from exc


class TemplateServices:
    """Loads the template bank once and serves it by difficulty for the process lifetime"""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._templates: Optional[Dict[str, Tuple[LogicTemplate, ...]]] = None
        self._lock = asyncio.Lock()

    async def load(self) -> Dict[str, Tuple[LogicTemplate, ...]]:
        if self._templates is not None:
            return self._templates

        # concurrent first callers share one load
        async with self._lock:
            if self._templates is None:
                definitions = await asyncio.to_thread(load_definitions, self.path)
                self._templates = {
                    difficulty: tuple(LogicTemplate(definition) for definition in tier)
                    for difficulty, tier in definitions.items()
                }
                counts = {difficulty: len(tier) for difficulty, tier in self._templates.items()}
                logger.info(f"Loaded template bank from {self.path}: {counts}")
        return self._templates

    async def get_templates_by_difficulty(self, difficulty: str) -> Tuple[LogicTemplate, ...]:
        """Templates of one tier; raises DifficultyNotFoundError for an unknown tier"""
        templates = await self.load()
        if difficulty not in templates:
            raise DifficultyNotFoundError(difficulty)
        return templates[difficulty]

    async def get_difficulties(self) -> List[str]:
        templates = await self.load()
        return list(templates)


template_services = TemplateServices(settings.TEMPLATES_PATH)
