"""Detected and custom references plus their per-property assignments."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from lodmapper.domain.events import ChangeFeed, ReferencesAssigned
from lodmapper.domain.model import (
    MAX_SUMMARY_EXAMPLES,
    REFERENCE_TYPE_LABELS,
    Reference,
    ReferenceType,
)

from .custom import (
    CustomReferenceError,
    create_custom_reference,
    items_from_references,
    update_custom_reference,
)
from .detector import DETECTED_TYPES, DetectionResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lodmapper.domain.model import CustomReference, CustomReferenceItem

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True, frozen=True)
class SummaryEntry:
    """One row of the reference overview, detected or custom."""

    reference_id: str
    label: str
    count: int
    examples: tuple[Reference, ...]
    custom: CustomReference | None = None


class ReferenceStore:
    def __init__(self, *, feed: ChangeFeed | None = None) -> None:
        self.feed = feed if feed is not None else ChangeFeed()
        self._detection = DetectionResult(item_references={}, summary={})
        self._custom: list[CustomReference] = []
        self._assignments: dict[str, frozenset[str]] = {}

    @property
    def detection(self) -> DetectionResult:
        return self._detection

    def load_detection(self, detection: DetectionResult) -> None:
        self._detection = detection

    # ----------------------------------------------------------------- custom

    def custom_references(self) -> list[CustomReference]:
        return list(self._custom)

    def custom(self, reference_id: str) -> CustomReference:
        for reference in self._custom:
            if reference.id == reference_id:
                return reference
        raise KeyError(reference_id)

    def _check_unique_name(self, name: str, *, ignore_id: str | None = None) -> None:
        lowered = name.strip().lower()
        for reference in self._custom:
            if reference.id != ignore_id and reference.name.lower() == lowered:
                raise CustomReferenceError([f"A reference named {name.strip()!r} already exists"])

    def add_custom(
        self,
        name: str,
        items: Iterable[CustomReferenceItem],
        *,
        base_url: str | None = None,
    ) -> CustomReference:
        reference = create_custom_reference(name, items, base_url=base_url)
        self._check_unique_name(reference.name)
        self._custom.append(reference)
        log.debug("Added custom reference %s (%d items)", reference.name, reference.count)
        return reference

    def update_custom(
        self,
        reference_id: str,
        *,
        name: str | None = None,
        items: Iterable[CustomReferenceItem] | None = None,
        base_url: str | None = None,
    ) -> CustomReference:
        existing = self.custom(reference_id)
        updated = update_custom_reference(existing, name=name, items=items, base_url=base_url)
        self._check_unique_name(updated.name, ignore_id=reference_id)
        self._custom[self._custom.index(existing)] = updated
        return updated

    def remove_custom(self, reference_id: str) -> None:
        existing = self.custom(reference_id)
        self._custom.remove(existing)
        self._drop_from_assignments(reference_id)

    def convert_to_custom(self, reference_type: ReferenceType) -> CustomReference:
        """Turn a detected family into an editable custom reference.

        The new entry remembers ``original_type`` and takes the detected
        family's place in :meth:`summary_entries`; assignments follow it.
        """

        if reference_type not in DETECTED_TYPES:
            raise ValueError(f"{reference_type} is not a detected reference type")
        if any(ref.original_type is reference_type for ref in self._custom):
            raise CustomReferenceError([f"{reference_type} was already converted"])
        detected = [
            reference
            for references in self._detection.item_references.values()
            for reference in references
            if reference.type is reference_type
        ]
        name = REFERENCE_TYPE_LABELS[reference_type]
        reference = create_custom_reference(
            name, items_from_references(detected), original_type=reference_type
        )
        self._check_unique_name(reference.name)
        self._custom.append(reference)
        self._replace_in_assignments(str(reference_type), reference.id)
        return reference

    # ---------------------------------------------------------------- listing

    def summary_entries(self) -> list[SummaryEntry]:
        """Detected families in fixed order (converted ones replaced in place),
        then the remaining custom references in creation order."""

        converted = {ref.original_type: ref for ref in self._custom if ref.original_type}
        entries: list[SummaryEntry] = []
        for reference_type in DETECTED_TYPES:
            custom = converted.get(reference_type)
            if custom is not None:
                entries.append(self._custom_entry(custom))
                continue
            summary = self._detection.summary.get(reference_type)
            if summary is None:
                continue
            entries.append(
                SummaryEntry(
                    reference_id=str(reference_type),
                    label=REFERENCE_TYPE_LABELS[reference_type],
                    count=summary.count,
                    examples=summary.examples,
                )
            )
        entries.extend(
            self._custom_entry(reference)
            for reference in self._custom
            if not reference.original_type
        )
        return entries

    @staticmethod
    def _custom_entry(reference: CustomReference) -> SummaryEntry:
        references = reference.as_references()
        return SummaryEntry(
            reference_id=reference.id,
            label=reference.name,
            count=reference.count,
            examples=tuple(references[:MAX_SUMMARY_EXAMPLES]),
            custom=reference,
        )

    def known_reference_ids(self) -> set[str]:
        return {entry.reference_id for entry in self.summary_entries()}

    # ------------------------------------------------------------ assignments

    def assign_references_to_property(
        self, property_id: str, reference_ids: Iterable[str]
    ) -> frozenset[str]:
        """Replace the whole reference set of ``property_id``."""

        assigned = frozenset(reference_ids)
        unknown = assigned - self.known_reference_ids()
        if unknown:
            raise KeyError(f"Unknown reference ids: {', '.join(sorted(unknown))}")
        if assigned:
            self._assignments[property_id] = assigned
        else:
            self._assignments.pop(property_id, None)
        self.feed.publish(ReferencesAssigned(property_id, assigned))
        return assigned

    def assigned_to(self, property_id: str) -> frozenset[str]:
        return self._assignments.get(property_id, frozenset())

    def assignments(self) -> dict[str, frozenset[str]]:
        return dict(self._assignments)

    def _drop_from_assignments(self, reference_id: str) -> None:
        for property_id, assigned in list(self._assignments.items()):
            if reference_id in assigned:
                remaining = assigned - {reference_id}
                if remaining:
                    self._assignments[property_id] = remaining
                else:
                    del self._assignments[property_id]

    def _replace_in_assignments(self, old_id: str, new_id: str) -> None:
        for property_id, assigned in list(self._assignments.items()):
            if old_id in assigned:
                self._assignments[property_id] = (assigned - {old_id}) | {new_id}

    def references_for(self, item_id: str, property_id: str) -> list[Reference]:
        """References to attach to ``property_id`` statements of ``item_id``."""

        assigned = self.assigned_to(property_id)
        if not assigned:
            return []
        converted = {ref.original_type for ref in self._custom if ref.original_type}
        references = [
            reference
            for reference in self._detection.references_for(item_id)
            if str(reference.type) in assigned and reference.type not in converted
        ]
        for custom in self._custom:
            if custom.id not in assigned:
                continue
            url = custom.url_for(item_id)
            if url is not None:
                references.append(
                    Reference(
                        type=ReferenceType.CUSTOM,
                        url=url,
                        item_id=item_id,
                        display_name=custom.name,
                    )
                )
        return references
