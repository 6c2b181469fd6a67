"""Core data-model classes used throughout fingerprinting."""

from fingerprinting.models.field import Field, ProfilingOptions, field_type
from fingerprinting.models.fingerprint import Fingerprint
from fingerprinting.models.types import Scale, TypeSignature, isa

__all__ = [
    "Field",
    "ProfilingOptions",
    "field_type",
    "Fingerprint",
    "Scale",
    "TypeSignature",
    "isa",
]
