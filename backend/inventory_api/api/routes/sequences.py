"""Read-only view of the code sequences (current value and next-code preview)."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from inventory_api.core.deps import get_current_user
from inventory_api.core.errors import UnknownEntityKind
from inventory_api.core.sequences import SEQUENCE_KINDS, get_sequence_config
from inventory_api.models.inv_user import InvUserMaster
from inventory_api.schemas.sequence import SequenceOut
from inventory_api.services.sequences import SequenceAllocator, get_sequence_allocator

router = APIRouter(prefix="/sequences", tags=["sequences"])


async def _describe(allocator: SequenceAllocator, entity_kind: str) -> SequenceOut:
    config = get_sequence_config(entity_kind)
    last_value = await allocator.current(entity_kind)
    return SequenceOut(
        entity_kind=config.entity_kind,
        prefix=config.prefix,
        padding_width=config.padding_width,
        last_value=last_value,
        next_code=config.format(last_value + 1),
    )


@router.get("", response_model=List[SequenceOut])
async def list_sequences(
    user: InvUserMaster = Depends(get_current_user),
    allocator: SequenceAllocator = Depends(get_sequence_allocator),
):
    return [await _describe(allocator, kind) for kind in SEQUENCE_KINDS]


@router.get("/{entity_kind}", response_model=SequenceOut)
async def get_sequence(
    entity_kind: str,
    user: InvUserMaster = Depends(get_current_user),
    allocator: SequenceAllocator = Depends(get_sequence_allocator),
):
    try:
        return await _describe(allocator, entity_kind)
    except UnknownEntityKind:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown sequence {entity_kind!r}",
        )
