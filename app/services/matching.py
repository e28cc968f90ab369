"""
Tag matching - reconciles freeform asset tag strings with curated board tags.

An asset tag matches a board tag when, case-folded, it equals either the
board tag's slug or its name. Board tag usage counts are built on this
equivalence.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol


class BoardTagLike(Protocol):
    slug: str
    name: str


def _field(board_tag: BoardTagLike | Mapping[str, Any], key: str) -> str:
    if isinstance(board_tag, Mapping):
        return board_tag[key] or ""
    return getattr(board_tag, key) or ""


def _keys(board_tag: BoardTagLike | Mapping[str, Any]) -> tuple[str, str]:
    return _field(board_tag, "slug").casefold(), _field(board_tag, "name").casefold()


def tags_equivalent(asset_tag: str, board_tag: BoardTagLike | Mapping[str, Any]) -> bool:
    """
    Check whether a freeform asset tag refers to a board tag.

    Args:
        asset_tag: Tag string as stored on the asset
        board_tag: Object or mapping with ``slug`` and ``name``

    Returns:
        True if the case-folded string equals the slug or the name

    Example:
        >>> tags_equivalent("Voice-Of-Customer", {"slug": "voice-of-customer", "name": "Voice of Customer"})
        True
    """
    folded = asset_tag.casefold()
    return bool(folded) and folded in _keys(board_tag)


def count_matches_per_board_tag(
    assets: Iterable[Sequence[str] | None],
    board_tags: Sequence[BoardTagLike | Mapping[str, Any]],
) -> dict[str, int]:
    """
    Count, for every board tag, the assets carrying at least one equivalent tag.

    Each asset's tag list is case-folded into a set once, so the cost is
    O(assets x board_tags) set lookups instead of a full pairwise scan.

    Args:
        assets: Freeform tag lists, one per asset (None means no tags)
        board_tags: Board tag definitions with ``slug`` and ``name``

    Returns:
        Mapping of board tag slug to number of matching assets
    """
    counts = {_field(bt, "slug"): 0 for bt in board_tags}
    keys = [(_field(bt, "slug"), _keys(bt)) for bt in board_tags]

    for tag_list in assets:
        if not tag_list:
            continue
        folded = {tag.casefold() for tag in tag_list if tag}
        for slug, (slug_key, name_key) in keys:
            if slug_key in folded or name_key in folded:
                counts[slug] += 1

    return counts


def match_board_tags(
    asset_tags: Sequence[str] | None,
    board_tags: Sequence[BoardTagLike | Mapping[str, Any]],
) -> list[BoardTagLike | Mapping[str, Any]]:
    """Return the board tags that at least one of the asset's tags matches."""
    if not asset_tags:
        return []
    folded = {tag.casefold() for tag in asset_tags if tag}
    return [
        bt for bt in board_tags
        if any(key in folded for key in _keys(bt))
    ]
