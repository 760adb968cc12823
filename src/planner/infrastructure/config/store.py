from __future__ import annotations

import logging
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from src.planner.domain.models.workspace import TrackerConfig, WorkspaceConfig
from src.planner.domain.repositories import TrackerConfigRepository, WorkspaceConfigRepository

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class JsonConfigStore(Generic[ModelT]):
    """Small JSON record on disk. A missing or unreadable file means "not configured"."""

    def __init__(self, path: Path, model: type[ModelT]) -> None:
        self._path = path
        self._model = model

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> ModelT | None:
        if not self._path.exists():
            return None
        try:
            return self._model.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            logger.warning(
                "Ignoring unreadable config record",
                extra={"path": str(self._path), "error": str(exc)},
            )
            return None

    def set(self, config: ModelT) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(config.model_dump_json(indent=2), encoding="utf-8")

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)


class TrackerConfigStore(JsonConfigStore[TrackerConfig], TrackerConfigRepository):
    def __init__(self, config_dir: Path) -> None:
        super().__init__(config_dir / "tracker.json", TrackerConfig)


class WorkspaceConfigStore(JsonConfigStore[WorkspaceConfig], WorkspaceConfigRepository):
    def __init__(self, config_dir: Path) -> None:
        super().__init__(config_dir / "workspace.json", WorkspaceConfig)
