"""Target knowledge-base property descriptors and their constraints."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import ConstraintStatus

# Wikidata datatype id -> human readable label
DATATYPE_LABELS: dict[str, str] = {
    "wikibase-item": "Item",
    "wikibase-property": "Property",
    "wikibase-lexeme": "Lexeme",
    "string": "String",
    "external-id": "External identifier",
    "url": "URL",
    "monolingualtext": "Monolingual text",
    "time": "Point in time",
    "quantity": "Quantity",
    "commons-media": "Commons media file",
    "globe-coordinate": "Geographic coordinates",
    "math": "Mathematical expression",
    "musical-notation": "Musical notation",
    "geo-shape": "Geographic shape",
    "tabular-data": "Tabular data",
}


def datatype_label(datatype: str) -> str:
    return DATATYPE_LABELS.get(datatype, datatype)


@dataclass(slots=True, kw_only=True, frozen=True)
class FormatConstraint:
    pattern: str
    description: str | None = None
    status: ConstraintStatus = ConstraintStatus.NORMAL

    @property
    def mandatory(self) -> bool:
        return self.status is ConstraintStatus.MANDATORY


@dataclass(slots=True, kw_only=True, frozen=True)
class ValueTypeConstraint:
    classes: tuple[str, ...]
    class_labels: dict[str, str] = field(default_factory=dict)
    relation: str | None = None
    status: ConstraintStatus = ConstraintStatus.NORMAL


@dataclass(slots=True, kw_only=True, frozen=True)
class OtherConstraint:
    constraint_id: str
    label: str | None = None
    status: ConstraintStatus = ConstraintStatus.NORMAL


@dataclass(slots=True, kw_only=True, frozen=True)
class PropertyConstraints:
    format: tuple[FormatConstraint, ...] = ()
    value_type: tuple[ValueTypeConstraint, ...] = ()
    other: tuple[OtherConstraint, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.format or self.value_type or self.other)

    def value_type_classes(self) -> tuple[str, ...]:
        """Unique class ids across all value-type constraints, first-seen order."""

        seen: dict[str, None] = {}
        for constraint in self.value_type:
            for class_id in constraint.classes:
                if class_id.startswith("Q"):
                    seen.setdefault(class_id, None)
        return tuple(seen)


@dataclass(slots=True, kw_only=True, frozen=True)
class PropertyRef:
    """A target property as known to the session.

    ``constraints_fetched`` distinguishes a property that genuinely has no
    constraints from one whose constraints were never loaded.
    """

    id: str
    label: str
    description: str = ""
    datatype: str = "string"
    datatype_label: str = ""
    constraints: PropertyConstraints = field(default_factory=PropertyConstraints)
    formatter_url: str | None = None
    constraints_fetched: bool = False
    is_metadata: bool = False

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Property id must not be empty")
        if not self.datatype_label:
            object.__setattr__(self, "datatype_label", datatype_label(self.datatype))

    def canonical_url(self, value: str) -> str | None:
        """Build the canonical URL for an identifier using the formatter URL."""

        if not self.formatter_url or "$1" not in self.formatter_url:
            return None
        return self.formatter_url.replace("$1", value.strip())


LABEL_PROPERTY = PropertyRef(
    id="label",
    label="Label",
    description="The main name of the entity",
    datatype="monolingualtext",
    is_metadata=True,
)
DESCRIPTION_PROPERTY = PropertyRef(
    id="description",
    label="Description",
    description="A short phrase that disambiguates the entity",
    datatype="monolingualtext",
    is_metadata=True,
)
ALIASES_PROPERTY = PropertyRef(
    id="aliases",
    label="Aliases",
    description="Alternative names for the entity",
    datatype="monolingualtext",
    is_metadata=True,
)
INSTANCE_OF_PROPERTY = PropertyRef(
    id="P31",
    label="instance of",
    description="that class of which this subject is a particular example and member",
    datatype="wikibase-item",
)
SUBCLASS_OF_ID = "P279"

METADATA_PROPERTIES: tuple[PropertyRef, ...] = (
    LABEL_PROPERTY,
    DESCRIPTION_PROPERTY,
    ALIASES_PROPERTY,
)
