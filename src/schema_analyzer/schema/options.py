"""
Field Option Normalization

Maps the raw, type-dependent ``options`` payload of a field onto a closed set
of option records. Only the keys listed for a type family are copied; all
other keys are dropped. Unrecognized types produce ``EmptyOptions``.

Records hold snake_case attributes; ``to_dict`` emits the source payload's
camelCase keys.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, Optional, Tuple

from ..utils import OptionExtractionError, get_logger

logger = get_logger(__name__)


def _get(raw: Any, key: str) -> Any:
    """Read a key from a mapping or an attribute from an object"""
    if isinstance(raw, Mapping):
        return raw.get(key)
    return getattr(raw, key, None)


def _compact(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


@dataclass(frozen=True)
class FieldOptions:
    """Base of the option record variants"""
    family: ClassVar[str] = "empty"

    def to_dict(self) -> Dict[str, Any]:
        return {}

    @property
    def is_empty(self) -> bool:
        return not self.to_dict()


@dataclass(frozen=True)
class EmptyOptions(FieldOptions):
    """Options of a type with nothing worth extracting"""
    family: ClassVar[str] = "empty"


@dataclass(frozen=True)
class Choice:
    """One choice of a select field"""
    id: str = "unknown"
    name: str = "Unnamed"
    color: str = "default"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}


@dataclass(frozen=True)
class SelectOptions(FieldOptions):
    family: ClassVar[str] = "select"
    choices: Optional[Tuple[Choice, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.choices is None:
            return {}
        return {"choices": [c.to_dict() for c in self.choices]}


@dataclass(frozen=True)
class NumberOptions(FieldOptions):
    family: ClassVar[str] = "number"
    precision: Optional[int] = None
    symbol: Optional[str] = None  # currency only

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"precision": self.precision, "symbol": self.symbol})


@dataclass(frozen=True)
class DateOptions(FieldOptions):
    family: ClassVar[str] = "date"
    date_format: Any = None
    time_format: Any = None
    time_zone: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "dateFormat": self.date_format,
            "timeFormat": self.time_format,
            "timeZone": self.time_zone,
        })


@dataclass(frozen=True)
class CheckboxOptions(FieldOptions):
    family: ClassVar[str] = "checkbox"
    icon: Optional[str] = None
    color: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"icon": self.icon, "color": self.color})


@dataclass(frozen=True)
class RatingOptions(FieldOptions):
    family: ClassVar[str] = "rating"
    icon: Optional[str] = None
    max: Optional[int] = None
    color: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"icon": self.icon, "max": self.max, "color": self.color})


@dataclass(frozen=True)
class LookupOptions(FieldOptions):
    family: ClassVar[str] = "lookup"
    record_link_field_id: Optional[str] = None
    field_id_in_linked_table: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "recordLinkFieldId": self.record_link_field_id,
            "fieldIdInLinkedTable": self.field_id_in_linked_table,
        })


@dataclass(frozen=True)
class RollupOptions(FieldOptions):
    family: ClassVar[str] = "rollup"
    record_link_field_id: Optional[str] = None
    field_id_in_linked_table: Optional[str] = None
    referenced_field_ids: Optional[Tuple[str, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "recordLinkFieldId": self.record_link_field_id,
            "fieldIdInLinkedTable": self.field_id_in_linked_table,
            "referencedFieldIds": (
                list(self.referenced_field_ids) if self.referenced_field_ids is not None else None
            ),
        })


@dataclass(frozen=True)
class CountOptions(FieldOptions):
    family: ClassVar[str] = "count"
    record_link_field_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"recordLinkFieldId": self.record_link_field_id})


@dataclass(frozen=True)
class FormulaOptions(FieldOptions):
    family: ClassVar[str] = "formula"
    is_valid: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"isValid": self.is_valid})


@dataclass(frozen=True)
class LinkTarget:
    """Link metadata of a multipleRecordLinks field, attached to the field itself"""
    linked_table_id: Optional[str] = None
    inverse_link_field_id: Optional[str] = None
    prefers_single_link: bool = False


# Extractors, one per type family

def _select(field_type: str, raw: Any) -> FieldOptions:
    choices = _get(raw, "choices")
    if not choices:
        return SelectOptions()
    return SelectOptions(choices=tuple(
        Choice(
            id=_get(choice, "id") or "unknown",
            name=_get(choice, "name") or "Unnamed",
            color=_get(choice, "color") or "default",
        )
        for choice in choices
    ))


def _number(field_type: str, raw: Any) -> FieldOptions:
    symbol = _get(raw, "symbol") if field_type == "currency" else None
    return NumberOptions(precision=_get(raw, "precision"), symbol=symbol or None)


def _date(field_type: str, raw: Any) -> FieldOptions:
    if field_type != "dateTime":
        return DateOptions(date_format=_get(raw, "dateFormat") or None)
    return DateOptions(
        date_format=_get(raw, "dateFormat") or None,
        time_format=_get(raw, "timeFormat") or None,
        time_zone=_get(raw, "timeZone") or None,
    )


def _checkbox(field_type: str, raw: Any) -> FieldOptions:
    return CheckboxOptions(icon=_get(raw, "icon") or None, color=_get(raw, "color") or None)


def _rating(field_type: str, raw: Any) -> FieldOptions:
    return RatingOptions(
        icon=_get(raw, "icon") or None,
        max=_get(raw, "max") or None,
        color=_get(raw, "color") or None,
    )


def _lookup(field_type: str, raw: Any) -> FieldOptions:
    return LookupOptions(
        record_link_field_id=_get(raw, "recordLinkFieldId") or None,
        field_id_in_linked_table=_get(raw, "fieldIdInLinkedTable") or None,
    )


def _rollup(field_type: str, raw: Any) -> FieldOptions:
    referenced = _get(raw, "referencedFieldIds")
    return RollupOptions(
        record_link_field_id=_get(raw, "recordLinkFieldId") or None,
        field_id_in_linked_table=_get(raw, "fieldIdInLinkedTable") or None,
        referenced_field_ids=tuple(referenced) if referenced else None,
    )


def _count(field_type: str, raw: Any) -> FieldOptions:
    return CountOptions(record_link_field_id=_get(raw, "recordLinkFieldId") or None)


def _formula(field_type: str, raw: Any) -> FieldOptions:
    return FormulaOptions(is_valid=_get(raw, "isValid"))


OPTION_EXTRACTORS: Dict[str, Callable[[str, Any], FieldOptions]] = {
    "singleSelect": _select,
    "multipleSelects": _select,
    "number": _number,
    "percent": _number,
    "currency": _number,
    "date": _date,
    "dateTime": _date,
    "checkbox": _checkbox,
    "rating": _rating,
    "lookup": _lookup,
    "rollup": _rollup,
    "count": _count,
    "formula": _formula,
}


def extract_options(field_type: str, raw_options: Any) -> FieldOptions:
    """
    Extract the option record for a field type

    Raises:
        OptionExtractionError: If the raw payload has an unexpected shape
    """
    if raw_options is None:
        return EmptyOptions()

    extractor = OPTION_EXTRACTORS.get(field_type)
    if extractor is None:
        return EmptyOptions()

    try:
        return extractor(field_type, raw_options)
    except Exception as e:
        raise OptionExtractionError(
            f"Could not extract options for {field_type} field: {e}",
            field_type=field_type,
            original_error=e,
        ) from e


def normalize_options(field_type: str, raw_options: Any) -> FieldOptions:
    """Total variant of extract_options: failures degrade to EmptyOptions"""
    try:
        return extract_options(field_type, raw_options)
    except OptionExtractionError as e:
        logger.warning(str(e))
        return EmptyOptions()


def extract_link_target(raw_options: Any) -> LinkTarget:
    """Read link metadata from a multipleRecordLinks options payload"""
    if raw_options is None:
        return LinkTarget()
    return LinkTarget(
        linked_table_id=_get(raw_options, "linkedTableId") or None,
        inverse_link_field_id=_get(raw_options, "inverseLinkFieldId") or None,
        prefers_single_link=bool(_get(raw_options, "prefersSingleRecordLink") or False),
    )
