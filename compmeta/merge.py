"""Deduplication of components discovered under the same display name."""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from .logging import get_logger
from .models import SEVERITY_INFO, ComponentMeta, ExtractionWarning

logger = get_logger("merge")

DUPLICATE_COMPONENT = "DUPLICATE_COMPONENT"


def deduplicate(components: Iterable[ComponentMeta]) -> Tuple[List[ComponentMeta], List[ExtractionWarning]]:
    """Keep one component per display name.

    The entry with strictly more props wins; on a tie the first one seen is
    kept. The survivor takes the position of the first occurrence. Warnings
    attached to a discarded entry are returned together with one
    ``DUPLICATE_COMPONENT`` note per discard.
    """
    kept: Dict[str, ComponentMeta] = {}
    warnings: List[ExtractionWarning] = []
    for component in components:
        name = component.display_name
        current = kept.get(name)
        if current is None:
            kept[name] = component
            continue
        if len(component.props) > len(current.props):
            winner, loser = component, current
        else:
            winner, loser = current, component
        kept[name] = winner
        warnings.extend(loser.warnings)
        warnings.append(
            ExtractionWarning(
                type=DUPLICATE_COMPONENT,
                message=(
                    f"{name} from {loser.file_path} ({len(loser.props)} props) discarded; "
                    f"keeping {winner.file_path} ({len(winner.props)} props)"
                ),
                file=loser.file_path,
                severity=SEVERITY_INFO,
                component=name,
            )
        )
        logger.debug("Duplicate component %s: keeping %s", name, winner.file_path)
    return list(kept.values()), warnings


__all__ = ["DUPLICATE_COMPONENT", "deduplicate"]
