"""Environment-driven settings for the check service."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache

from subgraph_checks.core.errors import ConfigError
from subgraph_checks.core.rules.sdl_lint import LintSeverity
from subgraph_checks.models import ViolationLevel

DEFAULT_STUDIO_URL = "https://api.apollographql.com/api/graphql"
DEFAULT_GITHUB_URL = "https://api.github.com/graphql"
DEFAULT_CLIENT_NAME = "subgraph-checks"
DEFAULT_CLIENT_VERSION = "0.1.0"
DEFAULT_DEADLINE_SECONDS = 25.0

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    hmac_secret: str = ""
    api_key: str = ""
    studio_url: str = DEFAULT_STUDIO_URL
    client_name: str = DEFAULT_CLIENT_NAME
    client_version: str = DEFAULT_CLIENT_VERSION
    deadline_seconds: float = DEFAULT_DEADLINE_SECONDS
    strict_resolution: bool = True
    lint_rule_severities: Mapping[str, LintSeverity] = field(default_factory=dict)
    lint_level_overrides: Mapping[str, ViolationLevel] = field(default_factory=dict)
    github_token: str = ""
    github_owner: str = ""
    github_repo: str = ""
    github_url: str = DEFAULT_GITHUB_URL


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _parse_pairs(name: str, raw: str) -> list[tuple[str, str]]:
    """Parse ``key=value,key=value`` into pairs, ignoring blank entries."""
    pairs: list[tuple[str, str]] = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, value = item.partition("=")
        if not sep or not key.strip() or not value.strip():
            raise ConfigError(f"{name} entries must look like 'rule=value', got {item!r}")
        pairs.append((key.strip(), value.strip()))
    return pairs


def parse_rule_severities(raw: str, name: str = "CHECKS_LINT_RULES") -> dict[str, LintSeverity]:
    severities: dict[str, LintSeverity] = {}
    for rule_id, value in _parse_pairs(name, raw):
        try:
            severities[rule_id] = LintSeverity[value.upper()]
        except KeyError:
            raise ConfigError(f"{name}: unknown severity {value!r} for rule {rule_id!r}") from None
    return severities


def parse_level_overrides(raw: str, name: str = "CHECKS_LINT_LEVEL_OVERRIDES") -> dict[str, ViolationLevel]:
    overrides: dict[str, ViolationLevel] = {}
    for rule_id, value in _parse_pairs(name, raw):
        try:
            overrides[rule_id] = ViolationLevel(value.upper())
        except ValueError:
            raise ConfigError(f"{name}: unknown level {value!r} for rule {rule_id!r}") from None
    return overrides


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ

    deadline_raw = env.get("CHECKS_DEADLINE_SECONDS", str(DEFAULT_DEADLINE_SECONDS))
    try:
        deadline = float(deadline_raw)
    except ValueError:
        raise ConfigError(f"CHECKS_DEADLINE_SECONDS must be a number, got {deadline_raw!r}") from None
    if deadline <= 0:
        raise ConfigError("CHECKS_DEADLINE_SECONDS must be positive")

    return Settings(
        hmac_secret=env.get("APOLLO_HMAC_TOKEN", ""),
        api_key=env.get("APOLLO_API_KEY", ""),
        studio_url=env.get("APOLLO_STUDIO_URL") or DEFAULT_STUDIO_URL,
        client_name=env.get("CHECKS_CLIENT_NAME") or DEFAULT_CLIENT_NAME,
        client_version=env.get("CHECKS_CLIENT_VERSION") or DEFAULT_CLIENT_VERSION,
        deadline_seconds=deadline,
        strict_resolution=_parse_bool("CHECKS_STRICT_RESOLUTION", env.get("CHECKS_STRICT_RESOLUTION", "true")),
        lint_rule_severities=parse_rule_severities(env.get("CHECKS_LINT_RULES", "")),
        lint_level_overrides=parse_level_overrides(env.get("CHECKS_LINT_LEVEL_OVERRIDES", "")),
        github_token=env.get("GITHUB_TOKEN", ""),
        github_owner=env.get("GITHUB_OWNER", ""),
        github_repo=env.get("GITHUB_REPO", ""),
        github_url=env.get("GITHUB_GRAPHQL_URL") or DEFAULT_GITHUB_URL,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return process settings, read from the environment once."""
    return load_settings()
