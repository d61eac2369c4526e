"""In-memory composition of image pages.

Everything here is pure: the query service supplies images and attributions,
these functions join, filter, paginate and aggregate them.
"""

import math
import re
from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from chirpchirp.images.models import AttributionBase, ImageBase, ImageWithAttributions

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
# Keeps page * limit offsets inside SQLite's 64-bit integers
MAX_PAGE_PARAM = 2**31 - 1

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class SpeciesLabelled(Protocol):
    """Anything carrying an optional species label."""

    species: str | None


@dataclass(frozen=True)
class Pagination:
    """Pagination metadata for an image listing."""

    page: int
    limit: int
    total: int
    total_pages: int


@dataclass(frozen=True)
class SpeciesCount:
    """Number of valid attributions carrying one species label."""

    species: str
    count: int


def parse_page_param(value: str | int | None, default: int) -> int:
    """Parse a page or limit query value.

    Reads a leading integer the way loose query parsing does ("3abc" is 3).
    Missing, non-numeric, zero and negative values fall back to the default.
    Values above MAX_PAGE_PARAM are clamped to it.
    """
    if value is None:
        return default
    if isinstance(value, int):
        return min(value, MAX_PAGE_PARAM) if value > 0 else default

    match = _LEADING_INT.match(value)
    if not match:
        return default
    parsed = int(match.group(1))
    return min(parsed, MAX_PAGE_PARAM) if parsed > 0 else default


def is_valid_species(label: str | None) -> bool:
    """Check whether a species label is present and not just whitespace."""
    return bool(label and label.strip())


def has_valid_species(attributions: Iterable[SpeciesLabelled]) -> bool:
    """Check whether any attribution carries a valid species label."""
    return any(is_valid_species(a.species) for a in attributions)


def group_attributions(
    attributions: Iterable[AttributionBase],
) -> dict[str, list[AttributionBase]]:
    """Index attributions by owning image id, keeping arrival order.

    Images without attributions are absent from the mapping.
    """
    grouped: defaultdict[str, list[AttributionBase]] = defaultdict(list)
    for attribution in attributions:
        grouped[attribution.image_id].append(attribution)
    return dict(grouped)


def compose_results(
    images: Sequence[ImageBase],
    attributions_by_image: dict[str, list[AttributionBase]],
    species: str | None = None,
) -> list[ImageWithAttributions]:
    """Join images to their attributions and apply the listing filters.

    An image survives when at least one attribution has a valid species and,
    if a species filter is given, at least one attribution matches it exactly.
    Survivors keep their full attribution list and their input order.
    """
    results: list[ImageWithAttributions] = []
    for image in images:
        group = attributions_by_image.get(image.id, [])

        if not has_valid_species(group):
            continue
        if species is not None and not any(a.species == species for a in group):
            continue

        results.append(ImageWithAttributions.from_image(image, group))
    return results


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    """Build pagination metadata from the time-window count.

    The total ignores the validity and species filters applied by
    compose_results, so a page may hold fewer than ``limit`` images while
    later pages still exist. The page is not clamped to the page count.
    """
    total_pages = math.ceil(total / limit) if total else 0
    return Pagination(page=page, limit=limit, total=total, total_pages=total_pages)


def aggregate_species(labels: Iterable[str | None]) -> list[SpeciesCount]:
    """Count valid species labels, most frequent first.

    Labels are counted exactly as stored; only blank ones are skipped.
    """
    counts = Counter(label for label in labels if is_valid_species(label))
    return [SpeciesCount(species=label, count=count) for label, count in counts.most_common()]
