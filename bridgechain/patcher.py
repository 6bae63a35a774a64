"""Template patching for the copied core configuration.

Two files are patched:

* ``plugins.js`` is JavaScript, so it is patched with an ordered list of
  ``PatchRule`` objects applied in a single linear pass. Order matters: the
  block-removal rule at the end only matches the structure the field
  substitutions before it leave behind.
* ``.env`` is parsed into an ``EnvFile`` that edits assignments in place and
  inserts missing ones after an anchor line.

Only matched text is rewritten; every other byte is preserved.
"""

import re
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple, Union

import structlog

from .config.base import NetworkType, ParameterSet
from .constants import ENV_FILE, PLUGINS_FILE
from .errors import PatchRuleMiss

logger = structlog.get_logger()

Replacement = Union[str, Callable[[re.Match], str]]


class PatchRule:
    """A regex matcher with its replacement, applied to the whole text."""

    def __init__(self, name: str, pattern: str, replacement: Replacement, flags: int = 0):
        self.name = name
        self.matcher = re.compile(pattern, flags)
        self.replacement = replacement

    def apply(self, text: str) -> Tuple[str, int]:
        """Return the rewritten text and the number of matches."""
        return self.matcher.subn(self.replacement, text)

    def __repr__(self) -> str:
        return f"PatchRule({self.name!r})"


class PatchResult(NamedTuple):
    text: str
    misses: List[PatchRuleMiss]


def apply_rules(text: str, rules: List[PatchRule], file: str = PLUGINS_FILE) -> PatchResult:
    """
    Apply rules in declaration order over the full current text.

    A rule that matches nothing is recorded as a miss and logged; templates
    may already satisfy it.

    Args:
        text: Template contents
        rules: Rules in the order they must run
        file: Name used when reporting misses

    Returns:
        PatchResult: Patched text and the rules that matched nothing
    """
    misses = []
    for rule in rules:
        text, count = rule.apply(text)
        if count == 0:
            misses.append(PatchRuleMiss(file, rule.name))
            logger.warning("patch_rule_miss", file=file, rule=rule.name)
    return PatchResult(text, misses)


def _literal(value: object) -> str:
    """Escape a value for use inside a ``re`` replacement template."""
    return str(value).replace("\\", "\\\\")


def _field_rule(name: str, head: str, value_pattern: str, value: object) -> PatchRule:
    return PatchRule(name, rf"(?P<head>{head}){value_pattern}", rf"\g<head>{_literal(value)}")


def _env_default_rule(variable: str, value_pattern: str, value: object) -> PatchRule:
    """Rewrite the fallback in ``process.env.VARIABLE || <default>``."""
    return _field_rule(
        f"default-{variable}",
        rf"process\.env\.{variable}\s*\|\|\s*",
        value_pattern,
        value,
    )


_QUOTED = r"(?:\"[^\"\n]*\"|'[^'\n]*'|`[^`\n]*`)"


def plugin_rules(params: ParameterSet) -> List[PatchRule]:
    """Ordered rules for ``plugins.js``."""
    dynamic = params.fees.dynamic
    rules = [
        _field_rule(
            "dynamic-fees-enabled",
            r"dynamicFees:\s*\{\s*enabled:\s*",
            r"(?:true|false)",
            "true" if dynamic.enabled else "false",
        ),
        _field_rule("min-fee-pool", r"\bminFeePool:\s*", r"\d+", dynamic.min_fee_pool),
        _field_rule("min-fee-broadcast", r"\bminFeeBroadcast:\s*", r"\d+", dynamic.min_fee_broadcast),
    ]

    for fee_type, addon in dynamic.addon_bytes.by_type().items():
        rules.append(_field_rule(
            f"addon-bytes-{fee_type}",
            rf"addonBytes:\s*\{{[^{{}}]*?\b{fee_type}:\s*",
            r"\d+",
            addon,
        ))

    rules += [
        _env_default_rule("CORE_DB_HOST", _QUOTED, f'"{params.database_host}"'),
        _env_default_rule("CORE_DB_PORT", r"\d+", params.database_port),
        _env_default_rule("CORE_DB_DATABASE", _QUOTED, f'"{params.database_name}"'),
        _env_default_rule("CORE_P2P_PORT", r"\d+", params.p2p_port),
        _env_default_rule("CORE_API_PORT", r"\d+", params.api_port),
        _env_default_rule("CORE_WEBHOOKS_PORT", r"\d+", params.webhook_port),
        _env_default_rule("CORE_EXCHANGE_JSON_RPC_PORT", r"\d+", params.json_rpc_port),
    ]

    # Must run after dynamic-fees-enabled: it only matches a block already switched off
    if not dynamic.enabled:
        rules.append(PatchRule(
            "drop-disabled-addon-bytes",
            r"(?P<head>dynamicFees:\s*\{\s*enabled:\s*false,[^{}]*?)\s*addonBytes:\s*\{[^{}]*\},?",
            r"\g<head>",
        ))
    return rules


def patch_plugins(text: str, params: ParameterSet) -> PatchResult:
    return apply_rules(text, plugin_rules(params), file=PLUGINS_FILE)


_ASSIGNMENT = re.compile(
    r"^(?P<prefix>[ \t]*(?:export[ \t]+)?)"
    r"(?P<key>[A-Za-z_][A-Za-z0-9_]*)"
    r"(?P<sep>[ \t]*=[ \t]*)"
    r"(?P<value>[^\r\n]*)"
    r"(?P<eol>\r?\n?)$"
)


class EnvAssignment(NamedTuple):
    key: str
    value: str
    anchor: Optional[str] = None


class EnvFile:
    """An environment file kept as its original lines, indexed by key."""

    def __init__(self, lines: List[str]):
        self.lines = lines

    @classmethod
    def parse(cls, text: str) -> "EnvFile":
        return cls(text.splitlines(keepends=True))

    def _find(self, key: str) -> Optional[Tuple[int, re.Match]]:
        for index, line in enumerate(self.lines):
            match = _ASSIGNMENT.match(line)
            if match and match.group("key") == key:
                return index, match
        return None

    def get(self, key: str) -> Optional[str]:
        found = self._find(key)
        return found[1].group("value") if found else None

    def keys(self) -> List[str]:
        return [m.group("key") for m in map(_ASSIGNMENT.match, self.lines) if m]

    def _ensure_newline(self, index: int) -> str:
        line = self.lines[index]
        if line.endswith("\n"):
            return "\r\n" if line.endswith("\r\n") else "\n"
        self.lines[index] = line + "\n"
        return "\n"

    def set(self, key: str, value: str, anchor: Optional[str] = None) -> bool:
        """
        Assign ``key``, inserting it after ``anchor`` when it is missing.

        Args:
            key: Variable name
            value: New value
            anchor: Variable whose line a missing assignment is inserted after

        Returns:
            bool: False when the anchor was required but absent (the
            assignment is then appended at the end of the file)
        """
        value = str(value)
        found = self._find(key)
        if found:
            index, match = found
            if match.group("value") != value:
                self.lines[index] = (
                    f"{match.group('prefix')}{key}{match.group('sep')}{value}{match.group('eol')}"
                )
            return True

        anchored = self._find(anchor) if anchor else None
        if anchored:
            index = anchored[0]
            eol = self._ensure_newline(index)
            self.lines.insert(index + 1, f"{key}={value}{eol}")
            return True

        eol = self._ensure_newline(len(self.lines) - 1) if self.lines else "\n"
        self.lines.append(f"{key}={value}{eol}")
        return anchor is None

    def render(self) -> str:
        return "".join(self.lines)


NETWORK_ENV_OVERRIDES: Dict[NetworkType, List[EnvAssignment]] = {
    NetworkType.TESTNET: [
        EnvAssignment("CORE_P2P_MINIMUM_NETWORK_REACH", "1", anchor="CORE_P2P_PORT"),
    ],
}


def env_assignments(params: ParameterSet) -> List[EnvAssignment]:
    """Ordered assignments for ``.env``, including per-network overrides."""
    assignments = [
        EnvAssignment("CORE_DB_HOST", params.database_host),
        EnvAssignment("CORE_DB_PORT", str(params.database_port)),
        EnvAssignment("CORE_DB_DATABASE", params.database_name, anchor="CORE_DB_PORT"),
        EnvAssignment("CORE_P2P_HOST", "0.0.0.0"),
        EnvAssignment("CORE_P2P_PORT", str(params.p2p_port)),
        EnvAssignment("CORE_API_PORT", str(params.api_port), anchor="CORE_P2P_PORT"),
        EnvAssignment("CORE_WEBHOOKS_PORT", str(params.webhook_port)),
        EnvAssignment("CORE_EXCHANGE_JSON_RPC_PORT", str(params.json_rpc_port)),
    ]
    assignments += NETWORK_ENV_OVERRIDES.get(params.network, [])
    return assignments


def patch_env(text: str, params: ParameterSet) -> PatchResult:
    env = EnvFile.parse(text)
    misses = []
    for assignment in env_assignments(params):
        if not env.set(assignment.key, assignment.value, assignment.anchor):
            misses.append(PatchRuleMiss(ENV_FILE, f"{assignment.key} after {assignment.anchor}"))
            logger.warning("env_anchor_missing", key=assignment.key, anchor=assignment.anchor)
    return PatchResult(env.render(), misses)
