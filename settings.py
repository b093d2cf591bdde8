"""
Run configuration, built once at startup from CLI flags and environment variables and
passed explicitly to every stage. CLI flags take precedence over environment variables.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from ingest.github import split_repo
from ranking.policy import ReportPolicy, DEFAULT_POLICY, load_policy
from summarize.gemini import DEFAULT_MODEL
from window import parse_override

DEFAULT_SOURCE_REPO = "amedina/agentic-web-learning-tool"

TRUTHY = ("true", "1", "yes")


class ConfigurationError(Exception):
    """Fatal configuration problem: the run aborts with no partial output."""


@dataclass(frozen=True)
class ReportConfig:
    github_token: str
    source_repo: str
    target_repo: Optional[str] = None
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    date_override: Optional[datetime] = None
    dry_run: bool = False
    out_file: str = ""
    policy: ReportPolicy = DEFAULT_POLICY


def _flag_or_env(value, env: Mapping[str, str], name: str) -> Optional[str]:
    if value:
        return value
    return env.get(name) or None


def _is_truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in TRUTHY


def _check_repo(full_name: str, description: str) -> str:
    try:
        split_repo(full_name)
    except ValueError as ex:
        raise ConfigurationError(f"Invalid {description}: {ex}")
    return full_name


def load_config(args, env: Optional[Mapping[str, str]] = None) -> ReportConfig:
    """
    Resolve the run configuration.

    Raises ConfigurationError when the GitHub token is missing, the date override cannot
    be parsed, the policy cannot be loaded, or a live run has no target repository.
    """
    env = os.environ if env is None else env

    token = _flag_or_env(getattr(args, 'github_token', None), env, 'GITHUB_TOKEN')
    if not token:
        raise ConfigurationError("GITHUB_TOKEN is required (CLI flag --github_token or env GITHUB_TOKEN)")

    raw_override = _flag_or_env(getattr(args, 'date_override', None), env, 'DATE_OVERRIDE')
    date_override = None
    if raw_override:
        try:
            date_override = parse_override(raw_override)
        except ValueError as ex:
            raise ConfigurationError(f"Invalid DATE_OVERRIDE {raw_override!r}: {ex}")

    dry_run = bool(getattr(args, 'dry_run', False)) or _is_truthy(env.get('DRY_RUN'))

    current_repo = env.get('GITHUB_REPOSITORY') or None
    source_repo = _flag_or_env(getattr(args, 'source_repo', None), env, 'SOURCE_REPO') or current_repo or DEFAULT_SOURCE_REPO
    target_repo = getattr(args, 'target_repo', None) or current_repo
    if not dry_run and not target_repo:
        raise ConfigurationError("GITHUB_REPOSITORY env var not set")

    try:
        policy = load_policy(getattr(args, 'policy', None) or None, getattr(args, 'preset', None) or None)
    except ValueError as ex:
        raise ConfigurationError(str(ex))

    return ReportConfig(
        github_token=token,
        source_repo=_check_repo(source_repo, "source repository"),
        target_repo=_check_repo(target_repo, "target repository") if target_repo else None,
        gemini_api_key=_flag_or_env(getattr(args, 'gemini_api_key', None), env, 'GEMINI_API_KEY'),
        gemini_model=_flag_or_env(getattr(args, 'gemini_model', None), env, 'GEMINI_MODEL') or DEFAULT_MODEL,
        date_override=date_override,
        dry_run=dry_run,
        out_file=(getattr(args, 'out_file', '') or '').strip(),
        policy=policy,
    )
