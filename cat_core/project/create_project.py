from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

from cat_core.db.migrations import get_schema_version
from cat_core.db.schema import initialize_database
from cat_core.project.config import ProjectConfig, read_config, write_config
from cat_core.project.paths import ProjectPaths

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CreatedProject:
    name: str
    slug: str
    paths: ProjectPaths

    @property
    def project_path(self) -> Path:
        return self.paths.project_dir

    @property
    def db_path(self) -> Path:
        return self.paths.db_path

    @property
    def config_path(self) -> Path:
        return self.paths.config_path


@dataclass(slots=True)
class ProjectInfo:
    config: ProjectConfig
    schema_version: int
    paths: ProjectPaths

    @property
    def name(self) -> str:
        return self.config.project_name

    @property
    def slug(self) -> str:
        return self.config.slug

    @property
    def project_path(self) -> Path:
        return self.paths.project_dir

    @property
    def db_path(self) -> Path:
        return self.paths.db_path


def create_project(
    name: str,
    *,
    slug: str | None = None,
    source_lang: str = "en",
    target_lang: str = "ko",
    delimiter: str = "sentence",
    root: Path | None = None,
) -> CreatedProject:
    """Create ``<root>/<slug>/`` with its config file, folders and migrated database."""
    paths = ProjectPaths.for_slug(slug if slug is not None else name, root)
    if paths.project_dir.exists():
        raise FileExistsError(f"Project path already exists: {paths.project_dir}")

    # Validate before touching the filesystem.
    config = ProjectConfig(
        project_name=name,
        slug=paths.slug,
        source_lang=source_lang,
        target_lang=target_lang,
        delimiter=delimiter,
    )

    paths.root.mkdir(parents=True, exist_ok=True)
    paths.project_dir.mkdir()
    paths.ensure_layout()
    write_config(paths.config_path, config)
    initialize_database(paths.db_path).dispose()

    logger.info("Created project %s at %s", paths.slug, paths.project_dir)
    return CreatedProject(name=name, slug=paths.slug, paths=paths)


def load_project_info(slug: str, *, root: Path | None = None) -> ProjectInfo:
    paths = ProjectPaths.for_slug(slug, root)
    if not paths.project_dir.exists():
        raise FileNotFoundError(f"Project does not exist: {paths.project_dir}")

    config = read_config(paths.config_path)
    engine = initialize_database(paths.db_path)
    try:
        with engine.connect() as connection:
            schema_version = get_schema_version(connection)
    finally:
        engine.dispose()

    return ProjectInfo(config=config, schema_version=schema_version, paths=paths)
