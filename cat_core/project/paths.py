from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re
import unicodedata

from cat_core.constants import (
    DEFAULT_PROJECTS_DIRNAME,
    PROJECT_CONFIG_FILENAME,
    PROJECT_DB_FILENAME,
    PROJECT_SUBDIRS,
)

_SLUG_SEPARATOR_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Lowercase ASCII slug; accents are folded, everything else becomes a dash."""
    folded = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    slug = _SLUG_SEPARATOR_PATTERN.sub("-", folded.lower()).strip("-")
    if not slug:
        raise ValueError(f"Unable to generate a valid slug from project name: {name!r}")
    return slug


def resolve_projects_root(root: Path | None = None) -> Path:
    if root is None:
        return Path.cwd() / DEFAULT_PROJECTS_DIRNAME
    return Path(root).expanduser()


@dataclass(slots=True, frozen=True)
class ProjectPaths:
    root: Path
    slug: str

    @classmethod
    def for_slug(cls, slug: str, root: Path | None = None) -> ProjectPaths:
        return cls(root=resolve_projects_root(root), slug=slugify(slug))

    @property
    def project_dir(self) -> Path:
        return self.root / self.slug

    @property
    def db_path(self) -> Path:
        return self.project_dir / PROJECT_DB_FILENAME

    @property
    def config_path(self) -> Path:
        return self.project_dir / PROJECT_CONFIG_FILENAME

    def subdir(self, name: str) -> Path:
        if name not in PROJECT_SUBDIRS:
            raise ValueError(f"Unknown project folder: {name}")
        return self.project_dir / name

    def ensure_layout(self) -> None:
        for name in PROJECT_SUBDIRS:
            self.subdir(name).mkdir(parents=True, exist_ok=True)
