"""
Scene segmentation.

Splits script text into a bounded, ordered list of scene fragments and tags
each scene by its position in the sequence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from scriptbreaker.config import loaders

_FRAGMENT_SPLIT = re.compile(r"[.!?\n]")


@dataclass(frozen=True)
class Scene:
    ordinal: int
    text: str
    tags: tuple[str, ...] = ()


def split_fragments(text: str | None, min_length: int | None = None) -> list[str]:
    """Split on sentence-terminal punctuation and newlines, dropping short noise."""
    if min_length is None:
        min_length = loaders.load_breakdown_rules_v1().min_fragment_length
    fragments = [fragment.strip() for fragment in _FRAGMENT_SPLIT.split(text or "")]
    return [fragment for fragment in fragments if len(fragment) >= min_length]


def _scene_tags(ordinal: int, total: int) -> tuple[str, ...]:
    tags = loaders.load_breakdown_rules_v1().scene_tags
    if ordinal == 0:
        return tuple(tags.first)
    if ordinal == total - 1:
        return tuple(tags.last)
    return tuple(tags.middle)


def segment(text: str | None) -> list[Scene]:
    rules = loaders.load_breakdown_rules_v1()
    fragments = split_fragments(text, rules.min_fragment_length)

    scene_count = max(rules.min_scenes, min(len(fragments), rules.max_scenes))
    chosen = fragments[:scene_count]
    while len(chosen) < scene_count:
        chosen.append(rules.placeholder_scene_template.format(index=len(chosen) + 1))

    return [
        Scene(ordinal=ordinal, text=fragment, tags=_scene_tags(ordinal, scene_count))
        for ordinal, fragment in enumerate(chosen)
    ]
