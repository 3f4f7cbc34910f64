from __future__ import annotations

CURRENT_SCHEMA_VERSION = 1
DEFAULT_PROJECTS_DIRNAME = "projects"
PROJECT_DB_FILENAME = "project.db"
PROJECT_CONFIG_FILENAME = "config.yml"
PROJECT_SUBDIRS = ("imports", "exports")

CONTEXT_MATCH_RATE = 101
EXACT_MATCH_RATE = 100
DEFAULT_FUZZY_LIMIT = 5
DEFAULT_FUZZY_MIN_RATE = 50
DEFAULT_WORD_RATE = 500

TRAILING_PUNCTUATION = ".!?。！？:;,،؛"
