from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from orchestrator.degradation_types import FailureKind

DEFAULT_PHRASES_PATH = Path(__file__).resolve().parent.parent / "config" / "degradation_phrases.yaml"


@dataclass(frozen=True)
class PhraseRule:
    kind: FailureKind
    phrases: tuple[str, ...] = ()
    error_codes: frozenset[str] = field(default_factory=frozenset)


class DegradationClassifier:
    """Maps a failed provider response to a FailureKind using a phrase table loaded as data."""

    def __init__(self, rules: list[PhraseRule], version: int | str | None = None):
        self._rules = list(rules)
        self.version = version

    @classmethod
    def from_yaml(cls, path: str | Path | None = None) -> "DegradationClassifier":
        table_path = Path(path) if path else DEFAULT_PHRASES_PATH
        if not table_path.exists():
            raise ValueError(f"Degradation phrase table not found at {table_path}")

        data = yaml.safe_load(table_path.read_text(encoding="utf-8"))
        if not data or not isinstance(data.get("kinds"), dict):
            raise ValueError("Invalid degradation phrase table: missing kinds")

        rules: list[PhraseRule] = []
        for name, entry in data["kinds"].items():
            try:
                kind = FailureKind(name)
            except ValueError as e:
                raise ValueError(f"Unknown failure kind in phrase table: {name}") from e
            if kind is FailureKind.UNCLASSIFIED:
                raise ValueError("Unclassified is the default and cannot carry phrases")
            entry = entry or {}
            phrases = entry.get("phrases") or []
            codes = entry.get("error_codes") or []
            if not isinstance(phrases, list) or not isinstance(codes, list):
                raise ValueError(f"Invalid phrase table entry for {name}")
            rules.append(
                PhraseRule(
                    kind=kind,
                    phrases=tuple(str(p) for p in phrases if p),
                    error_codes=frozenset(str(c) for c in codes if c),
                )
            )

        return cls(rules, version=data.get("version"))

    @classmethod
    def default(cls) -> "DegradationClassifier":
        return cls.from_yaml(DEFAULT_PHRASES_PATH)

    @property
    def rules(self) -> list[PhraseRule]:
        return list(self._rules)

    def classify(self, text: str, status: int, error_code: str | None = None) -> FailureKind:
        if error_code:
            for rule in self._rules:
                if error_code in rule.error_codes:
                    return rule.kind

        body = text or ""
        for rule in self._rules:
            if any(phrase in body for phrase in rule.phrases):
                return rule.kind

        if status == 401:
            return FailureKind.AUTHENTICATION_REQUIRED

        return FailureKind.UNCLASSIFIED
