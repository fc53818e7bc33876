"""Canonical key -> property assignments for one session.

The store is the only owner of :class:`MappingKey`, :class:`PropertyMapping`,
:class:`ManualProperty` and the per-mapping transformation blocks. Every key
carries exactly one category; all moves happen inside a single synchronous
method call, so no intermediate state is ever observable.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from lodmapper.domain.events import (
    BlocksChanged,
    ChangeFeed,
    KeyCategorized,
    MappingAdded,
    MappingIdChanged,
    MappingRemoved,
)
from lodmapper.domain.model import (
    INSTANCE_OF_PROPERTY,
    LABEL_PROPERTY,
    METADATA_PROPERTIES,
    SUBCLASS_OF_ID,
    KeyCategory,
    ManualProperty,
    PropertyMapping,
    RequiredPlaceholder,
    mapping_id as build_mapping_id,
)
from lodmapper.domain.transform import editing

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lodmapper.domain.model import (
        IdentifierType,
        MappedEntry,
        MappingKey,
        PropertyRef,
        TransformationBlock,
    )

log = getLogger(__name__)

REQUIRED_PLACEHOLDERS: tuple[RequiredPlaceholder, ...] = (
    RequiredPlaceholder(
        property=LABEL_PROPERTY,
        satisfied_by=(LABEL_PROPERTY.id,),
        reason="Every item needs a label",
    ),
    RequiredPlaceholder(
        property=INSTANCE_OF_PROPERTY,
        satisfied_by=(INSTANCE_OF_PROPERTY.id, SUBCLASS_OF_ID),
        reason="Every item needs a primary type",
    ),
)


class MappingError(RuntimeError):
    """Raised when a mapping edit refers to unknown state or would break an invariant."""


@dataclass(slots=True, frozen=True)
class MappingSnapshot:
    """Read-only copy of the store handed to rendering code."""

    keys: tuple[MappingKey, ...]
    mappings: tuple[PropertyMapping, ...]
    manual_properties: tuple[ManualProperty, ...]
    blocks: dict[str, tuple[TransformationBlock, ...]]
    mapped_view: tuple[MappedEntry, ...]


class MappingStore:
    def __init__(self, *, feed: ChangeFeed | None = None) -> None:
        self.feed = feed if feed is not None else ChangeFeed()
        self._keys: dict[str, MappingKey] = {}
        self._mappings: dict[str, PropertyMapping] = {}
        self._manual: dict[str, ManualProperty] = {}
        # One list per mapping id; lists are cleared, never replaced
        self._blocks: dict[str, list[TransformationBlock]] = {}

    # ----------------------------------------------------------------- keys

    def seed(self, keys: Iterable[MappingKey]) -> None:
        """Merge freshly analyzed keys into the store.

        New keys are added with their analyzed category. Known keys get their
        statistics refreshed but keep the category the user gave them, except
        that a non-linked key now matching the ignore rules moves to ignored.
        Keys missing from the new analysis stay where they are.
        """

        added = 0
        for key in keys:
            existing = self._keys.get(key.key)
            if existing is None:
                self._keys[key.key] = replace(
                    key,
                    category=(
                        KeyCategory.IGNORED
                        if key.category is KeyCategory.IGNORED
                        else KeyCategory.NON_LINKED
                    ),
                )
                added += 1
                continue
            category = existing.category
            if category is KeyCategory.NON_LINKED and key.category is KeyCategory.IGNORED:
                category = KeyCategory.IGNORED
            self._keys[key.key] = replace(key, category=category)
            if category is not existing.category:
                self.feed.publish(KeyCategorized(key.key, existing.category, category))
        log.info("Seeded mapping store: %d new keys, %d total", added, len(self._keys))

    def key(self, name: str) -> MappingKey:
        try:
            return self._keys[name]
        except KeyError as exc:
            raise MappingError(f"Unknown key: {name}") from exc

    def keys(self) -> list[MappingKey]:
        return list(self._keys.values())

    def keys_in(self, category: KeyCategory) -> list[MappingKey]:
        return [key for key in self._keys.values() if key.category is category]

    def categorize(self, key: str, category: KeyCategory) -> None:
        """Move ``key`` into ``category``.

        Moving a mapped key out of the mapped category drops all its mappings
        together with their blocks. Keys can only become mapped through
        :meth:`map`.
        """

        current = self.key(key)
        if current.category is category:
            return
        if category is KeyCategory.MAPPED:
            raise MappingError(f"Key {key} needs a target property; use map() instead")
        if current.category is KeyCategory.MAPPED:
            for existing in self.mappings_for_key(key):
                self._drop_mapping(existing)
        self._set_category(current, category)

    def _set_category(self, key: MappingKey, category: KeyCategory) -> None:
        previous = key.category
        if previous is category:
            return
        key.category = category
        self.feed.publish(KeyCategorized(key.key, previous, category))

    # ------------------------------------------------------------- mappings

    def map(
        self,
        key: str,
        property: PropertyRef,  # noqa: A002
        *,
        subfield: str | None = None,
        auto_mapped: bool = False,
        identifier_type: IdentifierType | None = None,
    ) -> PropertyMapping:
        """Assign ``key`` to ``property``; mapping the same target twice updates it."""

        source = self.key(key)
        new_id = build_mapping_id(key, property.id, subfield)
        existing = self._mappings.get(new_id)
        if existing is not None:
            existing.property = property
            return existing

        entry = PropertyMapping(
            key=key,
            property=property,
            subfield=subfield,
            auto_mapped=auto_mapped,
            identifier_type=identifier_type,
        )
        self._mappings[new_id] = entry
        self._blocks.setdefault(new_id, [])
        self.feed.publish(MappingAdded(new_id, key, property.id))
        self._set_category(source, KeyCategory.MAPPED)
        log.debug("Mapped %s -> %s (%s)", key, property.id, new_id)
        return entry

    def unmap(self, mapping_id: str) -> None:
        """Remove one mapping; the key falls back to non-linked when nothing is left."""

        entry = self.mapping(mapping_id)
        self._drop_mapping(entry)
        if not self.mappings_for_key(entry.key):
            self._set_category(self.key(entry.key), KeyCategory.NON_LINKED)

    def _drop_mapping(self, entry: PropertyMapping) -> None:
        current_id = entry.mapping_id
        del self._mappings[current_id]
        blocks = self._blocks.get(current_id)
        if blocks is not None:
            blocks.clear()
        self.feed.publish(MappingRemoved(current_id, entry.key))

    def mapping(self, mapping_id: str) -> PropertyMapping:
        try:
            return self._mappings[mapping_id]
        except KeyError as exc:
            raise MappingError(f"Unknown mapping: {mapping_id}") from exc

    def mappings(self) -> list[PropertyMapping]:
        return list(self._mappings.values())

    def mappings_for_key(self, key: str) -> list[PropertyMapping]:
        return [entry for entry in self._mappings.values() if entry.key == key]

    def change_subfield(self, mapping_id: str, subfield: str | None) -> PropertyMapping:
        """Select a different sub-field, moving blocks to the recomputed id."""

        entry = self.mapping(mapping_id)
        new_id = build_mapping_id(entry.key, entry.property.id, subfield)
        if new_id == mapping_id:
            return entry
        if new_id in self._mappings:
            raise MappingError(f"Mapping {new_id} already exists")

        entry.subfield = subfield
        del self._mappings[mapping_id]
        self._mappings[new_id] = entry

        old_blocks = self._blocks.setdefault(mapping_id, [])
        new_blocks = self._blocks.setdefault(new_id, [])
        moved = len(old_blocks)
        new_blocks.extend(old_blocks)
        old_blocks.clear()
        self.feed.publish(MappingIdChanged(mapping_id, new_id, moved))
        log.debug("Mapping %s renamed to %s, moved %d blocks", mapping_id, new_id, moved)
        return entry

    # ---------------------------------------------------- manual properties

    def add_manual_property(
        self,
        property: PropertyRef,  # noqa: A002
        default_value: object = None,
        *,
        required: bool = False,
    ) -> ManualProperty:
        if property.id in self._manual:
            raise MappingError(f"Manual property {property.id} already exists")
        entry = ManualProperty(property=property, default_value=default_value, required=required)
        self._manual[property.id] = entry
        return entry

    def remove_manual_property(self, property_id: str) -> None:
        if self._manual.pop(property_id, None) is None:
            raise MappingError(f"Unknown manual property: {property_id}")

    def manual_properties(self) -> list[ManualProperty]:
        return list(self._manual.values())

    def ensure_metadata_properties(self) -> list[ManualProperty]:
        """Add label, description and aliases as manual properties when absent."""

        added: list[ManualProperty] = []
        for metadata in METADATA_PROPERTIES:
            if metadata.id in self._manual:
                continue
            added.append(
                self.add_manual_property(metadata, required=metadata.id == LABEL_PROPERTY.id)
            )
        return added

    # --------------------------------------------------------------- blocks

    def get_transformation_blocks(self, mapping_id: str) -> tuple[TransformationBlock, ...]:
        return tuple(self._blocks.get(mapping_id, ()))

    def _block_list(self, mapping_id: str) -> list[TransformationBlock]:
        self.mapping(mapping_id)
        return self._blocks.setdefault(mapping_id, [])

    @staticmethod
    def _position(target: list[TransformationBlock], block_id: str) -> int:
        for index, block in enumerate(target):
            if block.block_id == block_id:
                return index
        raise editing.BlockNotFoundError(block_id)

    def _blocks_changed(self, mapping_id: str, target: list[TransformationBlock]) -> None:
        self.feed.publish(BlocksChanged(mapping_id, len(target)))

    def add_block(
        self,
        mapping_id: str,
        block: TransformationBlock,
        index: int | None = None,
    ) -> TransformationBlock:
        """Insert ``block``; appends when ``index`` is omitted."""

        target = self._block_list(mapping_id)
        if any(existing.block_id == block.block_id for existing in target):
            raise ValueError(f"Block {block.block_id} is already in this pipeline")
        if index is None:
            target.append(block)
        else:
            target.insert(max(0, index), block)
        self._blocks_changed(mapping_id, target)
        return block

    def remove_block(self, mapping_id: str, block_id: str) -> None:
        target = self._block_list(mapping_id)
        del target[self._position(target, block_id)]
        self._blocks_changed(mapping_id, target)

    def move_block(self, mapping_id: str, block_id: str, new_index: int) -> None:
        target = self._block_list(mapping_id)
        block = target.pop(self._position(target, block_id))
        target.insert(max(0, new_index), block)
        self._blocks_changed(mapping_id, target)

    def update_block(self, mapping_id: str, block_id: str, **config: object) -> TransformationBlock:
        target = self._block_list(mapping_id)
        position = self._position(target, block_id)
        updated = target[position].with_config(**config)
        target[position] = updated
        self._blocks_changed(mapping_id, target)
        return updated

    # ---------------------------------------------------------------- views

    def satisfied_property_ids(self) -> set[str]:
        ids = {entry.property.id for entry in self._mappings.values()}
        ids.update(self._manual)
        return ids

    def missing_placeholders(self) -> list[RequiredPlaceholder]:
        satisfied = self.satisfied_property_ids()
        return [
            placeholder
            for placeholder in REQUIRED_PLACEHOLDERS
            if not satisfied.intersection(placeholder.satisfied_by)
        ]

    def mapped_view(self) -> list[MappedEntry]:
        """Placeholders still missing, then mappings, then manual properties."""

        view: list[MappedEntry] = [*self.missing_placeholders()]
        view.extend(self._mappings.values())
        view.extend(self._manual.values())
        return view

    def snapshot(self) -> MappingSnapshot:
        return MappingSnapshot(
            keys=tuple(replace(key) for key in self._keys.values()),
            mappings=tuple(replace(entry) for entry in self._mappings.values()),
            manual_properties=tuple(replace(entry) for entry in self._manual.values()),
            blocks={
                key: tuple(blocks) for key, blocks in self._blocks.items() if key in self._mappings
            },
            mapped_view=tuple(self.mapped_view()),
        )
