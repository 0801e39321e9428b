"""
Transition Application
load -> validate -> build patch -> conditional write on the loaded version
"""

import logging
from typing import Callable, Optional, Type

from pydantic import ValidationError

from app.errors import Conflict, NotFound, ValidationFailed
from app.models.base import Entity
from app.store import Collection, DocumentStore

logger = logging.getLogger(__name__)

MAX_TRANSITION_ATTEMPTS = 5

# Receives the loaded entity, raises on a rule violation, returns the patch.
# Returning None means there is nothing to write.
Transition = Callable[[Entity], Optional[dict]]


async def load(store: DocumentStore, collection: Collection, model: Type[Entity], doc_id: str, label: str) -> Entity:
    """Entity by id or NotFound"""
    doc = await store.find_by_id(collection, doc_id)
    if doc is None:
        raise NotFound(f"{label} not found")
    return model.model_validate(doc)


def _check_patch(model: Type[Entity], current: Entity, patch: dict, label: str) -> None:
    """The patched document must still be a valid entity; nothing is written otherwise"""
    try:
        model.model_validate({**current.model_dump(), **patch})
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(p) for p in error.get("loc", ()))
        raise ValidationFailed(f"Invalid {label.lower()} {field}: {error.get('msg', 'invalid value')}") from exc


async def apply_transition(
    store: DocumentStore,
    collection: Collection,
    model: Type[Entity],
    doc_id: str,
    transition: Transition,
    label: str = "Resource",
) -> Entity:
    """
    Apply a transition as a compare-and-swap on the document version

    The transition is re-validated against a fresh read after every lost race,
    so a racing writer always sees the state the winner produced.
    """
    for attempt in range(1, MAX_TRANSITION_ATTEMPTS + 1):
        current = await load(store, collection, model, doc_id, label)
        patch = transition(current)
        if patch is None:
            return current
        _check_patch(model, current, patch, label)

        updated = await store.update_by_id(collection, doc_id, patch, condition={"version": current.version})
        if updated is not None:
            return model.model_validate(updated)

        logger.debug(
            "Lost write race: collection=%s id=%s attempt=%d", collection.value, doc_id, attempt
        )

    logger.warning("Transition retries exhausted: collection=%s id=%s", collection.value, doc_id)
    raise Conflict(f"{label} is being modified concurrently, please retry")
