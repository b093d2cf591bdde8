"""
Report policy: window strategy, ranking weights, enrichment and rendering switches.
Defaults live in code; an optional YAML file can override them and define named presets.
"""
import logging
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional, Tuple

import yaml

from normalize.models import ISSUE, PULL_REQUEST
from window import STRATEGIES

logger = logging.getLogger(__name__)

# filename used for policy YAML configuration
POLICY_FILENAME = 'policy.yaml'

MERGED = 'merged'
CREATED = 'created'
UPDATED = 'updated'
CLOSED = 'closed'

ITEM_STYLES = ('details', 'bullet')

# closed PRs rank after live work even though closing is a terminal state
DEFAULT_LIFECYCLE_WEIGHTS = {
    PULL_REQUEST: {MERGED: 1, CREATED: 2, UPDATED: 3, CLOSED: 4},
    ISSUE: {CREATED: 2, UPDATED: 3, CLOSED: 4},
}

DEFAULT_PREFIX_WEIGHTS = {'feature': 1, 'feat': 2, 'fix': 3, 'chore': 4}

# always listed first in the contributor section
DEFAULT_CORE_TEAM = (
    'amedina',
    'gagan0123',
    'amovar18',
    'mayan-000',
    'mohdsayed',
    'maitreyie-chavan',
    'joellobo1234',
)

DEFAULT_DIFF_DENYLIST = (
    'package-lock.json',
    'yarn.lock',
    'pnpm-lock.yaml',
    'poetry.lock',
    'Pipfile.lock',
    'Cargo.lock',
    'go.sum',
    'composer.lock',
    '*.lock',
    '*.min.js',
    '*.min.css',
    '*.map',
    '*.snap',
    'dist/*',
    '*/dist/*',
    'build/*',
    '*/build/*',
)


@dataclass(frozen=True)
class ReportPolicy:
    window_strategy: str = 'weekly'
    report_name: str = 'Week in AWL'
    prefix_ranking: bool = True
    prefix_weights: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_PREFIX_WEIGHTS))
    other_prefix_weight: int = 5
    lifecycle_weights: Dict[str, Dict[str, int]] = field(default_factory=lambda: {k: dict(v) for k, v in DEFAULT_LIFECYCLE_WEIGHTS.items()})
    enrich_diffs: bool = True
    diff_max_files: int = 5
    diff_preview_chars: int = 500
    diff_denylist: Tuple[str, ...] = DEFAULT_DIFF_DENYLIST
    core_team: Tuple[str, ...] = DEFAULT_CORE_TEAM
    include_inactive_pull_requests: bool = True
    item_style: str = 'details'
    discussion_category: str = 'announcements'

    def ordered_prefixes(self) -> Tuple[Tuple[str, int], ...]:
        """Prefixes by ascending weight; longer prefixes first on ties so 'feature' wins over 'feat'."""
        return tuple(sorted(self.prefix_weights.items(), key=lambda kv: (kv[1], -len(kv[0]))))


DEFAULT_POLICY = ReportPolicy()

_FIELD_NAMES = {f.name for f in fields(ReportPolicy)}


def _default_path() -> str:
    return os.path.join(os.path.dirname(__file__), POLICY_FILENAME)


def _read_yaml(path: str) -> Dict[str, Any]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            doc = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as ex:
        raise ValueError(f"Failed to load policy from {path}: {ex}")
    if not isinstance(doc, dict):
        raise ValueError(f"Policy file {path} must contain a mapping")
    return doc


def _merge_lifecycle(base: Dict[str, Dict[str, int]], override: Dict[str, Any]) -> Dict[str, Dict[str, int]]:
    merged = {k: dict(v) for k, v in base.items()}
    for kind, weights in (override or {}).items():
        merged.setdefault(kind, {}).update({phase: int(w) for phase, w in (weights or {}).items()})
    return merged


def apply_overrides(policy: ReportPolicy, overrides: Dict[str, Any]) -> ReportPolicy:
    """Return a new policy with the given mapping applied. Unknown keys are ignored with a warning."""
    changes: Dict[str, Any] = {}
    for key, value in (overrides or {}).items():
        if key == 'presets':
            continue
        if key not in _FIELD_NAMES:
            logger.warning("Ignoring unknown policy key %r", key)
            continue
        if key == 'lifecycle_weights':
            value = _merge_lifecycle(policy.lifecycle_weights, value)
        elif key == 'prefix_weights':
            value = {str(k).lower(): int(v) for k, v in (value or {}).items()}
        elif key in ('diff_denylist', 'core_team'):
            value = tuple(value or ())
        changes[key] = value
    merged = replace(policy, **changes)
    if merged.window_strategy not in STRATEGIES:
        raise ValueError(f"Unknown window_strategy {merged.window_strategy!r} (expected one of {', '.join(STRATEGIES)})")
    if merged.item_style not in ITEM_STYLES:
        raise ValueError(f"Unknown item_style {merged.item_style!r} (expected one of {', '.join(ITEM_STYLES)})")
    return merged


def load_policy(path: Optional[str] = None, preset: Optional[str] = None) -> ReportPolicy:
    """
    Load the report policy.

    Behavior:
    - Without a file at `path` (default ranking/policy.yaml) the code defaults are returned.
    - Top-level keys in the file override the defaults.
    - If `preset` is given, the named entry of the file's 'presets' section is merged on top.
      A missing file or preset raises ValueError.
    """
    path = path or _default_path()
    if not os.path.exists(path):
        if preset:
            raise ValueError(f"Policy file not found at: {path}")
        return DEFAULT_POLICY
    doc = _read_yaml(path)
    policy = apply_overrides(DEFAULT_POLICY, doc)
    if not preset:
        return policy

    presets = doc.get('presets') or {}
    if preset not in presets:
        raise ValueError(f"Preset '{preset}' not found in {path}")
    return apply_overrides(policy, presets.get(preset) or {})


def list_presets(path: Optional[str] = None) -> list:
    """Return a list of available preset names from the policy YAML (or empty list)."""
    path = path or _default_path()
    if not os.path.exists(path):
        return []
    presets = _read_yaml(path).get('presets')
    return list(presets.keys()) if isinstance(presets, dict) else []
