"""
Field type categorization
"""
from __future__ import annotations

from typing import Dict, FrozenSet

from .models import FieldCategory


FIELD_TYPE_CATEGORIES: Dict[FieldCategory, FrozenSet[str]] = {
    FieldCategory.TEXT: frozenset({
        "singleLineText", "multilineText", "richText", "email", "url", "phoneNumber",
    }),
    FieldCategory.NUMERIC: frozenset({"number", "percent", "currency", "rating", "duration"}),
    FieldCategory.DATE: frozenset({"date", "dateTime", "createdTime", "lastModifiedTime"}),
    FieldCategory.SELECT: frozenset({"singleSelect", "multipleSelects"}),
    FieldCategory.RELATIONAL: frozenset({"multipleRecordLinks", "lookup", "rollup", "count"}),
    FieldCategory.ATTACHMENT: frozenset({"multipleAttachments"}),
    FieldCategory.CHECKBOX: frozenset({"checkbox"}),
    FieldCategory.USER: frozenset({
        "singleCollaborator", "multipleCollaborators", "createdBy", "lastModifiedBy",
    }),
    FieldCategory.COMPUTED: frozenset({"formula", "autoNumber", "button", "aiText"}),
    FieldCategory.OTHER: frozenset({"barcode", "externalSyncSource"}),
}

_CATEGORY_BY_TYPE: Dict[str, FieldCategory] = {
    field_type: category
    for category, types in FIELD_TYPE_CATEGORIES.items()
    for field_type in types
}


def categorize(field_type: str) -> FieldCategory:
    """Category for a field type; anything unlisted is OTHER"""
    if not isinstance(field_type, str):
        return FieldCategory.OTHER
    return _CATEGORY_BY_TYPE.get(field_type, FieldCategory.OTHER)
