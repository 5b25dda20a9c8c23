"""Clasificación de texto libre (OCR / dictado) contra el catálogo de métricas corporales.

El texto se escribe en bloques separados por una línea en blanco::

    Peso (kg)
    82.4
    después de desayunar

Primera línea: tipo; segunda: valor; el resto: comentario.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from fitness_tracker.model import CatalogEntry, ClassifiedEntry

logger = logging.getLogger(__name__)

DEFAULT_CATALOG: tuple[CatalogEntry, ...] = (
    CatalogEntry("Peso", "kg"),
    CatalogEntry("IMC", ""),
    CatalogEntry("Grasa corporal", "%"),
    CatalogEntry("Masa muscular", "%"),
    CatalogEntry("Grasa visceral", ""),
    CatalogEntry("Agua corporal", "%"),
    CatalogEntry("Metabolismo basal", "kcal"),
    CatalogEntry("Masa ósea", "kg"),
    CatalogEntry("Proteína", "%"),
    CatalogEntry("Edad metabólica", "años"),
    CatalogEntry("Peso sin grasa", "kg"),
    CatalogEntry("Peso muscular", "kg"),
)

# "peso" a secas nunca debe resolverse a una métrica derivada del peso.
GENERIC_WEIGHT = "peso"
GENERIC_WEIGHT_PENALTY = 5000.0

_LEADING_MARKER = re.compile(r"^[\s\[\-*•·]+")
_TRAILING_MARKER = re.compile(r"[\s\]\-*•·:]+$")
_TRAILING_PAREN = re.compile(r"\s*\([^()]*\)\s*$")
_TRAILING_SLASH = re.compile(r"\s*/[^/]*$")
_BLOCK_SEP = re.compile(r"\n\s*\n")


def normalize_label(label: str) -> str:
    """Normalize a type label for matching.

    Strips bullet/bracket markers, a trailing unit in parentheses and a
    trailing ``/unit`` suffix, then lower-cases.
    """
    text = _LEADING_MARKER.sub("", label)
    text = _TRAILING_MARKER.sub("", text)
    text = _TRAILING_PAREN.sub("", text)
    text = _TRAILING_SLASH.sub("", text)
    return text.lower().strip()


def clean_comment(text: str) -> str:
    """Drop stray one-character tokens left by OCR or dictation."""
    return " ".join(token for token in text.split() if len(token) >= 2)


def split_blocks(text: str) -> list[str]:
    """Split raw text into blocks separated by blank lines."""
    normalized = text.replace("\r\n", "\n").strip()
    if not normalized:
        return []
    return [block.strip() for block in _BLOCK_SEP.split(normalized) if block.strip()]


def parse_block(raw: str) -> tuple[str, str, str] | None:
    """Return (label, value, comment); None if the block has no value line."""
    lines = [line.strip() for line in raw.splitlines() if line.strip()]
    if len(lines) < 2:
        return None
    return lines[0], lines[1], clean_comment(" ".join(lines[2:]))


def _common_prefix_length(a: str, b: str) -> int:
    count = 0
    for char_a, char_b in zip(a, b):
        if char_a != char_b:
            break
        count += 1
    return count


def score_candidate(label: str, key: str) -> float:
    """Score a normalized label against a normalized catalog name.

    Both strings must overlap (one contains the other).
    """
    label_len = len(label)
    entry_len = len(key)
    score = 0.0
    if key in label:
        score += 1000 + (entry_len / label_len) * 100
    if label in key:
        score += 500 - (label_len / entry_len) * 50
    score += entry_len * 10
    score += _common_prefix_length(label, key) * 20
    if label == GENERIC_WEIGHT and key != GENERIC_WEIGHT and GENERIC_WEIGHT in key:
        score -= GENERIC_WEIGHT_PENALTY
    return score


def entry_to_text(entry: ClassifiedEntry) -> str:
    """Render a classified entry back into an editable text block."""
    lines = [entry.type.canonical_name, entry.value]
    if entry.comment:
        lines.append(entry.comment)
    return "\n".join(lines)


def find_entry(
    name: str, catalog: Sequence[CatalogEntry] = DEFAULT_CATALOG
) -> CatalogEntry | None:
    """Catalog entry whose canonical name matches ``name`` (case-insensitive)."""
    key = normalize_label(name)
    for entry in catalog:
        if normalize_label(entry.canonical_name) == key:
            return entry
    return None


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying a text buffer."""

    classified: list[ClassifiedEntry] = field(default_factory=list)
    unmatched: list[str] = field(default_factory=list)

    @property
    def pending_text(self) -> str:
        """Text buffer holding only the unmatched blocks, verbatim."""
        return "\n\n".join(self.unmatched)


class CatalogClassifier:
    """Resolve free-text labels against a fixed, ordered catalog."""

    def __init__(self, catalog: Sequence[CatalogEntry] = DEFAULT_CATALOG) -> None:
        """Create a classifier.

        Args:
            catalog: Ordered catalog entries; earlier entries win ties.
        """
        self._catalog = tuple(catalog)
        self._keys = [
            (entry, normalize_label(entry.canonical_name)) for entry in self._catalog
        ]

    @property
    def catalog(self) -> tuple[CatalogEntry, ...]:
        return self._catalog

    def match(self, label: str) -> CatalogEntry | None:
        """Best catalog entry for a label, or None when nothing overlaps."""
        norm = normalize_label(label)
        if not norm:
            return None
        for entry, key in self._keys:
            if key == norm:
                return entry

        best: CatalogEntry | None = None
        best_score = 0.0
        for entry, key in self._keys:
            if key not in norm and norm not in key:
                continue
            score = score_candidate(norm, key)
            if score > best_score:
                best, best_score = entry, score
        return best

    def classify(self, text: str) -> ClassificationResult:
        """Classify every block in ``text``.

        Returns:
            Classified entries plus the unmatched blocks, unchanged, so the
            pending buffer can be rewritten with only what still needs work.
        """
        result = ClassificationResult()
        for block in split_blocks(text):
            parsed = parse_block(block)
            entry = self.match(parsed[0]) if parsed is not None else None
            if parsed is None or entry is None:
                result.unmatched.append(block)
                continue
            _, value, comment = parsed
            result.classified.append(
                ClassifiedEntry(type=entry, value=value, comment=comment)
            )
        logger.debug(
            "Classified %d blocks, %d unmatched",
            len(result.classified),
            len(result.unmatched),
        )
        return result
