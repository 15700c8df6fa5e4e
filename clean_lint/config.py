"""Configuration loading and validation.

Usage:
    config = load(".clean-lint.yaml")              # defaults if the file is absent
    config = load("team.yaml", required=True)      # raises ConfigError if absent
    enabled, severity, options = config.rule_settings(rule)
    generate_template(".clean-lint.yaml")          # writes example file to disk

File format:
    extends: "https://lint.example.com/team.yaml"  # or a relative path
    min_severity: info
    fail_on: error
    exclude:
      - "migrations/*"
    rules:
      magic-number: off
      max-params: error
      function-length:
        max_lines: 60
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from clean_lint.models import SEVERITIES
from clean_lint import rules as _builtin_rules  # noqa: F401  registers the built-in rules
from clean_lint.registry import REGISTRY, Rule, RuleRegistry

DEFAULT_CONFIG_PATH = ".clean-lint.yaml"

_TOP_LEVEL_KEYS = {"extends", "min_severity", "fail_on", "exclude", "rules"}
_DISABLED_WORDS = {"off", "disabled", "disable", "false", "no"}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


class UnknownRuleConfigError(ConfigError):
    """Raised when the configuration names a rule that does not exist."""


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------

@dataclass
class RuleConfig:
    enabled: bool = True
    severity: str | None = None
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class Config:
    min_severity: str = "info"
    fail_on: str = "error"
    exclude: list[str] = field(default_factory=list)
    rules: dict[str, RuleConfig] = field(default_factory=dict)
    source: str | None = None

    def rule_settings(self, rule: Rule) -> tuple[bool, str, dict[str, Any]]:
        """Return ``(enabled, severity, options)`` for *rule*.

        Options start from the rule's defaults and are overlaid with the
        configured values.
        """
        override = self.rules.get(rule.id)
        if override is None:
            return True, rule.severity, dict(rule.options)
        options = {**rule.options, **override.options}
        return override.enabled, override.severity or rule.severity, options


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(
    config_path: str = DEFAULT_CONFIG_PATH,
    *,
    required: bool = False,
    registry: RuleRegistry = REGISTRY,
    client=None,
) -> Config:
    """Load and validate configuration from a YAML file.

    Environment variables CLEAN_LINT_MIN_SEVERITY and CLEAN_LINT_FAIL_ON
    override file values.

    Raises:
        ConfigError: if a required file is missing, malformed, or contains
                     invalid values.
    """
    path = Path(config_path)
    if not path.exists():
        if required:
            raise ConfigError(
                f"Config file not found: '{config_path}'\n"
                "Run `clean-lint init` to generate a template."
            )
        raw: dict[str, Any] = {}
        source = None
    else:
        raw = _load_raw(str(path), seen=set(), client=client)
        source = str(path)

    for key, env in (("min_severity", "CLEAN_LINT_MIN_SEVERITY"), ("fail_on", "CLEAN_LINT_FAIL_ON")):
        if os.environ.get(env):
            raw[key] = os.environ[env].strip().lower()

    config = _build(raw, registry)
    config.source = source
    return config


def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def _load_raw(location: str, seen: set[str], client=None) -> dict[str, Any]:
    """Read one config document and fold in whatever it extends."""
    key = location if _is_url(location) else os.path.abspath(location)
    if key in seen:
        raise ConfigError(f"Circular 'extends' chain through '{location}'")
    seen.add(key)

    if _is_url(location):
        raw = _fetch_remote(location, client)
    else:
        raw = _read_yaml(location)

    extends = raw.pop("extends", None)
    if extends is None:
        return raw
    if not isinstance(extends, str) or not extends.strip():
        raise ConfigError(f"'extends' in '{location}' must be a path or URL string.")

    extends = extends.strip()
    if not _is_url(extends) and not _is_url(location):
        extends = os.path.join(os.path.dirname(os.path.abspath(location)), extends)
    elif not _is_url(extends):
        raise ConfigError(f"Remote config '{location}' cannot extend a local path ('{extends}').")
    if not _is_url(extends) and not os.path.exists(extends):
        raise ConfigError(f"Config '{location}' extends '{extends}', which does not exist.")

    base = _load_raw(extends, seen, client)
    return _merge(base, raw)


def _read_yaml(location: str) -> dict[str, Any]:
    try:
        with open(location, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{location}': {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read '{location}': {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{location}' must be a YAML mapping at the top level.")
    return raw


def _fetch_remote(url: str, client) -> dict[str, Any]:
    from clean_lint.remote import RemoteConfigClient, RemoteConfigError

    if client is None:
        client = RemoteConfigClient(token=os.environ.get("CLEAN_LINT_TOKEN"))
    try:
        return client.fetch(url)
    except RemoteConfigError as exc:
        raise ConfigError(f"Cannot load shared config '{url}': {exc}") from exc


def _merge(base: dict[str, Any], local: dict[str, Any]) -> dict[str, Any]:
    """Overlay *local* on *base*; rule entries merge per rule, excludes add up."""
    merged = {**base, **local}

    base_exclude = base.get("exclude") or []
    local_exclude = local.get("exclude") or []
    if isinstance(base_exclude, list) and isinstance(local_exclude, list):
        merged["exclude"] = base_exclude + [p for p in local_exclude if p not in base_exclude]

    base_rules = base.get("rules") or {}
    local_rules = local.get("rules") or {}
    if isinstance(base_rules, dict) and isinstance(local_rules, dict):
        rules = dict(base_rules)
        for rule_id, value in local_rules.items():
            previous = rules.get(rule_id)
            if isinstance(previous, dict) and isinstance(value, dict):
                rules[rule_id] = {**previous, **value}
            else:
                rules[rule_id] = value
        merged["rules"] = rules

    return merged


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _build(raw: dict[str, Any], registry: RuleRegistry) -> Config:
    """Turn a raw mapping into a Config, collecting every problem first."""
    errors: list[str] = []
    unknown_rules: list[str] = []

    for key in sorted(set(raw) - _TOP_LEVEL_KEYS):
        errors.append(f"  - unknown top-level key '{key}'")

    min_severity = _severity(raw.get("min_severity", "info"), "min_severity", errors)
    fail_on = _severity(raw.get("fail_on", "error"), "fail_on", errors)

    exclude = raw.get("exclude") or []
    if not isinstance(exclude, list) or not all(isinstance(p, str) for p in exclude):
        errors.append("  - 'exclude' must be a list of glob strings")
        exclude = []

    rules: dict[str, RuleConfig] = {}
    raw_rules = raw.get("rules") or {}
    if not isinstance(raw_rules, dict):
        errors.append("  - 'rules' must be a mapping of rule id to settings")
        raw_rules = {}

    for rule_id, value in raw_rules.items():
        if rule_id not in registry:
            unknown_rules.append(str(rule_id))
            continue
        rule_config = _rule_config(registry.get(rule_id), value, errors)
        if rule_config is not None:
            rules[rule_id] = rule_config

    if unknown_rules:
        known = ", ".join(registry.ids())
        message = f"Unknown rule(s): {', '.join(unknown_rules)}. Known rules: {known}"
        if errors:
            errors.append(f"  - {message}")
        else:
            raise UnknownRuleConfigError(message)

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))

    return Config(min_severity=min_severity, fail_on=fail_on, exclude=list(exclude), rules=rules)


def _severity(value: Any, key: str, errors: list[str]) -> str:
    if isinstance(value, str) and value.lower() in SEVERITIES:
        return value.lower()
    errors.append(f"  - '{key}' must be one of {', '.join(SEVERITIES)} (got {value!r})")
    return "info"


def _rule_config(rule: Rule, value: Any, errors: list[str]) -> RuleConfig | None:
    # YAML 1.1 reads a bare `off` / `on` as a boolean
    if isinstance(value, bool):
        return RuleConfig(enabled=value)

    if isinstance(value, str):
        word = value.strip().lower()
        if word in _DISABLED_WORDS:
            return RuleConfig(enabled=False)
        if word in SEVERITIES:
            return RuleConfig(severity=word)
        errors.append(
            f"  - rules.{rule.id}: expected 'off' or a severity ({', '.join(SEVERITIES)}), got {value!r}"
        )
        return None

    if not isinstance(value, dict):
        errors.append(f"  - rules.{rule.id}: expected 'off', a severity or a mapping")
        return None

    settings = dict(value)
    rule_config = RuleConfig()

    enabled = settings.pop("enabled", True)
    if not isinstance(enabled, bool):
        errors.append(f"  - rules.{rule.id}.enabled must be true or false")
    else:
        rule_config.enabled = enabled

    if "severity" in settings:
        severity = settings.pop("severity")
        if isinstance(severity, str) and severity.lower() in SEVERITIES:
            rule_config.severity = severity.lower()
        else:
            errors.append(f"  - rules.{rule.id}.severity must be one of {', '.join(SEVERITIES)}")

    for option, option_value in settings.items():
        if option not in rule.options:
            allowed = ", ".join(sorted(rule.options)) or "(none)"
            errors.append(f"  - rules.{rule.id}: unknown option '{option}' (options: {allowed})")
            continue
        problem = _option_type_error(rule.options[option], option_value)
        if problem:
            errors.append(f"  - rules.{rule.id}.{option} {problem}")
            continue
        rule_config.options[option] = option_value

    return rule_config


def _option_type_error(default: Any, value: Any) -> str | None:
    if isinstance(default, bool):
        return None if isinstance(value, bool) else "must be true or false"
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            return "must be an integer"
        return None if value >= 0 else "must not be negative"
    if isinstance(default, list):
        return None if isinstance(value, list) else "must be a list"
    return None


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE_HEADER = """\
# clean-lint configuration
#
# extends: "https://lint.example.com/team.yaml"   # shared base config (path or URL)

min_severity: info    # hide diagnostics below this severity
fail_on: error        # exit 1 when a diagnostic at or above this severity remains

exclude:
  - "build/*"

# Per rule: `off`, a severity (error | warning | info), or a mapping of
# `enabled`, `severity` and the rule's options. Defaults are shown.
rules:
"""


def render_template(registry: RuleRegistry = REGISTRY) -> str:
    lines = [TEMPLATE_HEADER]
    for rule in registry:
        if rule.options:
            lines.append(f"  {rule.id}:\n")
            lines.append(f"    severity: {rule.severity}\n")
            for option, default in rule.options.items():
                lines.append(f"    {option}: {json.dumps(default)}\n")
        else:
            lines.append(f"  {rule.id}: {rule.severity}\n")
    return "".join(lines)


def generate_template(output_path: str = DEFAULT_CONFIG_PATH, registry: RuleRegistry = REGISTRY) -> None:
    """Write a template config listing every rule to *output_path*.

    Raises:
        ConfigError: if the file already exists.
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(render_template(registry), encoding="utf-8")
