"""Resolution of the resource types a run scans."""
import logging
from typing import Dict, List, Sequence


def _union(base: List[str], extra: Sequence[str]) -> List[str]:
    return base + [t for t in extra if t not in base]


def _intersect(base: List[str], keep: Sequence[str]) -> List[str]:
    return [t for t in base if t in keep]


def _remove(base: List[str], drop: Sequence[str]) -> List[str]:
    return [t for t in base if t not in drop]


def resolve_resource_types(
    base: Sequence[str],
    mapping: Dict[str, str],
    includes: Sequence[Sequence[str]],
    excludes: Sequence[Sequence[str]],
    cloud_controls: Sequence[Sequence[str]],
) -> List[str]:
    """Narrow the known listers down to the types to scan.

    Each tier list is ordered parameters, global config, account config.
    `mapping` maps a Cloud Control type name to the classic type it replaces.
    Empty include tiers do not restrict anything.
    """
    resolved = list(base)

    for cloud_control in cloud_controls:
        replaced = [mapping[t] for t in cloud_control if t in mapping]
        resolved = _remove(_union(resolved, cloud_control), replaced)

    for include in includes:
        if include:
            resolved = _intersect(resolved, include)

    for exclude in excludes:
        resolved = _remove(resolved, exclude)

    logging.debug(f"Resolved {len(resolved)} resource types: {resolved}")
    return resolved
