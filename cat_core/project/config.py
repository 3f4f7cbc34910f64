from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from cat_core.constants import DEFAULT_FUZZY_LIMIT, DEFAULT_FUZZY_MIN_RATE, DEFAULT_WORD_RATE
from cat_core.qa.checks import QAIssueType
from cat_core.segments.segmenter import SUPPORTED_DELIMITERS


class ProjectConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    project_name: str
    slug: str
    source_lang: str = "en"
    target_lang: str = "ko"
    client_id: str | None = None
    delimiter: str = "sentence"
    auto_propagation: bool = True
    instant_qa: bool = True
    word_rate: float = Field(default=DEFAULT_WORD_RATE, ge=0)
    fuzzy_limit: int = Field(default=DEFAULT_FUZZY_LIMIT, ge=1)
    fuzzy_min_rate: int = Field(default=DEFAULT_FUZZY_MIN_RATE, ge=0, le=100)
    disabled_qa_checks: list[QAIssueType] = Field(default_factory=list)

    @field_validator("delimiter")
    @classmethod
    def _check_delimiter(cls, value: str) -> str:
        if value not in SUPPORTED_DELIMITERS:
            raise ValueError(f"delimiter must be one of {', '.join(SUPPORTED_DELIMITERS)}")
        return value


def write_config(config_path: Path, config: ProjectConfig) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(config.model_dump(mode="json"), handle, sort_keys=False, allow_unicode=True)


def read_config(config_path: Path) -> ProjectConfig:
    with config_path.open("r", encoding="utf-8") as handle:
        content = yaml.safe_load(handle) or {}
    return ProjectConfig.model_validate(content)
