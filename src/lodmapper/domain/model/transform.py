"""Transformation block value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from .enums import BlockType
from .ids import new_block_id

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(slots=True, kw_only=True, frozen=True, eq=False)
class TransformationBlock:
    """One step of a value pipeline.

    Blocks are immutable; editing a block produces a new instance with the same
    ``block_id``. The config is copied on construction so two blocks built from
    the same dict never share state.
    """

    type: BlockType
    config: Mapping[str, object] = field(default_factory=dict)
    block_id: str = field(default_factory=new_block_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "config", MappingProxyType(dict(self.config)))

    def with_config(self, **changes: object) -> TransformationBlock:
        merged = {**self.config, **changes}
        return TransformationBlock(type=self.type, config=merged, block_id=self.block_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransformationBlock):
            return NotImplemented
        return (
            self.block_id == other.block_id
            and self.type == other.type
            and dict(self.config) == dict(other.config)
        )

    def __hash__(self) -> int:
        return hash((self.block_id, self.type))
