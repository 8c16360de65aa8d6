"""Candidate selection for reconciliation runs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rehabfinder.domain.model import Centre

PLACEHOLDER_ADDRESSES = frozenset({"address not provided", "not provided", "unknown"})


def is_placeholder_address(address: str | None) -> bool:
    if address is None:
        return True
    cleaned = address.strip().lower()
    return not cleaned or cleaned in PLACEHOLDER_ADDRESSES


def select_candidates(
    centres: Iterable[Centre],
    *,
    batch_size: int | None,
    include_already_resolved: bool = False,
) -> list[Centre]:
    """Return the centres a run should attempt, preserving input order."""

    if batch_size is not None and batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    selected: list[Centre] = []
    for centre in centres:
        if not include_already_resolved and centre.is_resolved:
            continue
        selected.append(centre)
        if batch_size is not None and len(selected) >= batch_size:
            break
    return selected
