"""Pure edits on one mapping's block sequence.

Every function takes a tuple and returns a new tuple; the input is never
modified, so pipelines of other mappings cannot be disturbed even when their
blocks look identical.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lodmapper.domain.model import TransformationBlock

type BlockSequence = tuple[TransformationBlock, ...]


class BlockNotFoundError(KeyError):
    """Raised when an edit names a block id that is not in the sequence."""


def _index_of(blocks: BlockSequence, block_id: str) -> int:
    for index, block in enumerate(blocks):
        if block.block_id == block_id:
            return index
    raise BlockNotFoundError(block_id)


def insert_block(
    blocks: BlockSequence,
    block: TransformationBlock,
    index: int | None = None,
) -> BlockSequence:
    if any(existing.block_id == block.block_id for existing in blocks):
        raise ValueError(f"Block {block.block_id} is already in this pipeline")
    position = len(blocks) if index is None else max(0, min(index, len(blocks)))
    return (*blocks[:position], block, *blocks[position:])


def remove_block(blocks: BlockSequence, block_id: str) -> BlockSequence:
    index = _index_of(blocks, block_id)
    return (*blocks[:index], *blocks[index + 1 :])


def move_block(blocks: BlockSequence, block_id: str, new_index: int) -> BlockSequence:
    index = _index_of(blocks, block_id)
    block = blocks[index]
    remaining = (*blocks[:index], *blocks[index + 1 :])
    position = max(0, min(new_index, len(remaining)))
    return (*remaining[:position], block, *remaining[position:])


def replace_block(blocks: BlockSequence, block: TransformationBlock) -> BlockSequence:
    index = _index_of(blocks, block.block_id)
    return (*blocks[:index], block, *blocks[index + 1 :])
