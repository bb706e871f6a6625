"""Parse and serialize rule files with YAML frontmatter."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

import yaml

from rule_screening.errors import ValidationError
from rule_screening.rules.models import Rule

_FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*\n", re.DOTALL)


@dataclass(frozen=True)
class RuleDraft:
    title: str
    definition: str
    source_path: Path


def parse_rule_file(path: Path) -> RuleDraft:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationError("title", f"Rule file is not valid UTF-8: {path} ({exc})") from exc

    match = _FRONTMATTER_RE.match(text)
    if match:
        try:
            raw = yaml.safe_load(match.group(1)) or {}
        except yaml.YAMLError as exc:
            raise ValidationError("title", f"Invalid frontmatter in {path}: {exc}") from exc
        body = text[match.end() :]
    else:
        raw = {}
        body = text

    if not isinstance(raw, dict):
        raw = {}

    title = str(raw.get("title") or path.stem).strip()
    if not title:
        raise ValidationError("title", f"Rule file has no title: {path}")
    return RuleDraft(title=title, definition=body.strip(), source_path=path)


def serialize_rule(rule: Rule) -> str:
    fm = {"title": rule.title}
    parts: list[str] = [
        "---",
        yaml.dump(fm, default_flow_style=False, sort_keys=False, allow_unicode=True).rstrip(),
        "---",
        "",
    ]
    parts.append(rule.definition)
    return "\n".join(parts) + "\n"
