#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Deterministic certificate digests.

Results of the factorisation and Bochner engines carry a ``certificate`` dict
(inputs, configuration, intermediate bounds). ``sha256_hex_of_dict`` hashes it
through a canonical serialisation so identical inputs give identical digests
across runs and platforms. Floats and complex numbers are refused: their
repr is not a stable identity, so callers record them as strings (``repr`` or
``mpmath.nstr``) or as exact Fractions.
"""

from __future__ import annotations

import hashlib
from fractions import Fraction
from typing import Any, Dict

from .exact import GaussianRational


def _serialize(obj: Any) -> str:
    if obj is None:
        return "null"
    if isinstance(obj, bool):
        return "true" if obj else "false"
    if isinstance(obj, int):
        return f"int:{obj}"
    if isinstance(obj, str):
        return f"str:{obj}"
    if isinstance(obj, Fraction):
        if obj.denominator == 1:
            return f"int:{obj.numerator}"
        return f"frac:{obj.numerator}/{obj.denominator}"
    if isinstance(obj, GaussianRational):
        return f"gauss:{_serialize(obj.real)},{_serialize(obj.imag)}"
    if isinstance(obj, (list, tuple)):
        parts = [_serialize(x) for x in obj]
        return f"list:[{','.join(parts)}]"
    if isinstance(obj, dict):
        items = sorted(obj.items(), key=lambda kv: str(kv[0]))
        parts = [f"{_serialize(k)}:{_serialize(v)}" for k, v in items]
        return f"dict:{{{','.join(parts)}}}"
    if isinstance(obj, float):
        raise TypeError(f"float forbidden in certificate: {obj!r}")
    if isinstance(obj, complex):
        raise TypeError(f"complex forbidden in certificate: {obj!r}")
    raise TypeError(f"unsupported type in certificate: {type(obj).__name__}")


def canonical_form(d: Dict[str, Any]) -> str:
    return _serialize(d)


def sha256_hex_of_dict(d: Dict[str, Any]) -> str:
    """SHA-256 of the canonical serialisation of ``d``."""
    if not isinstance(d, dict):
        raise TypeError(f"certificate must be a dict, got {type(d).__name__}")
    return hashlib.sha256(_serialize(d).encode("utf-8")).hexdigest()


__all__ = ["canonical_form", "sha256_hex_of_dict"]
