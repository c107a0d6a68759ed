"""Bootstrap for modules generated for the lite runtime.

Lite modules carry no descriptor data: their bootstrap only runs the slot
initialize pass, filling each slot with a `TypeHandle`.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .errors import SlotError
from .slots import SlotTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TypeHandle:
    """Names a generated message type without reflective metadata."""

    full_name: str
    message_class: type


def bootstrap_lite(
    name: str, initializer: Callable[[SlotTable], None], slots: SlotTable
) -> None:
    """Run a lite module's slot initializers."""
    initializer(slots)
    missing = slots.unassigned()
    if missing:
        raise SlotError(f"{name}: slot(s) left unassigned: {', '.join(missing)}")
    logger.debug("Initialized %d lite slot(s) for %s", len(slots), name)
