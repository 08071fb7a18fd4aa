"""Identifier rules shared by every generator stage"""

import re

from app.schemas.diagram_model import AttributeType

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")

# Semantic type -> Java field type. Anything not listed is emitted as String.
JAVA_TYPES = {
    AttributeType.INT: "Integer",
    AttributeType.LONG: "Long",
}


def sanitize_class_name(label: str) -> str:
    """Strip non-alphanumerics and upper-case the first remaining character"""
    cleaned = _NON_ALNUM.sub("", label or "")
    return cleaned[:1].upper() + cleaned[1:]


def lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def plural(name: str) -> str:
    return f"{name}s"


def java_type(attr_type: AttributeType) -> str:
    return JAVA_TYPES.get(attr_type, "String")
