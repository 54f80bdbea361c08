"""Descriptor helpers shared by the test modules."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from overwire.descriptors import NamedObjectDescriptor, ProviderDescriptor, TypeDescriptor

DATA_DIR = Path(__file__).resolve().parent / "data"
SYMBOLS = "./symbols.py"


def type_descriptor(type_tag: str, constructor_ref: str, *, overrides: bool = False) -> TypeDescriptor:
    """Type descriptor whose constructor lives in ``data/symbols.py``."""
    return TypeDescriptor(
        type_tag=type_tag,
        module_ref=SYMBOLS,
        constructor_ref=constructor_ref,
        overrides=overrides,
    )


def provider_descriptor(scheme: str, loader_ref: str, *, overrides: bool = False) -> ProviderDescriptor:
    """Provider descriptor whose loader lives in ``data/symbols.py``."""
    return ProviderDescriptor(
        scheme=scheme,
        module_ref=SYMBOLS,
        loader_ref=loader_ref,
        overrides=overrides,
    )


def named_object(name: str, value: Any, **kwargs: Any) -> NamedObjectDescriptor:
    return NamedObjectDescriptor(name=name, value=value, **kwargs)
