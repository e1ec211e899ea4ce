"""Attribute-set validation for product variants.

A variant is identified by its attribute pairs ``(variant_name_id, value)``.

- *shape*: the sorted tuple of ``variant_name_id`` values.
- *key*: the pairs sorted by ``variant_name_id``; two variants are the same
  variant exactly when their keys are equal, whatever order the pairs were
  given in.

Keys are hashable, so duplicate detection is a set lookup.  Pure module:
no storage access.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from modules.catalog.exceptions import (
    DataInconsistency,
    DuplicateVariantInRequest,
    VariantAlreadyExists,
)

Pair = tuple[str, str]
VariantKey = tuple[Pair, ...]
Shape = tuple[str, ...]


def _normalize(pairs: Iterable[tuple[Any, str]]) -> list[Pair]:
    return [(str(name_id), value) for name_id, value in pairs]


def shape_of(pairs: Iterable[tuple[Any, str]]) -> Shape:
    return tuple(sorted(name_id for name_id, _ in _normalize(pairs)))


def variant_key(pairs: Iterable[tuple[Any, str]]) -> VariantKey:
    return tuple(sorted(_normalize(pairs), key=lambda pair: pair[0]))


class AttributeSetValidator:
    """Check candidate variants against an expected shape and known keys.

    ``existing_keys`` are the keys already committed for the product;
    candidates accepted by ``validate`` are remembered so later candidates
    of the same batch are checked against them too.
    """

    def __init__(
        self,
        expected_shape: Sequence[Any],
        existing_keys: Optional[Iterable[VariantKey]] = None,
    ) -> None:
        self.expected_shape: Shape = tuple(sorted(str(name_id) for name_id in expected_shape))
        self._existing: set[VariantKey] = set(existing_keys or ())
        self._accepted: set[VariantKey] = set()

    @classmethod
    def for_variants(
        cls,
        existing: Sequence[Sequence[tuple[Any, str]]],
        candidates: Sequence[Sequence[tuple[Any, str]]],
    ) -> AttributeSetValidator:
        """Derive the expected shape from the first existing variant,
        else from the first candidate."""
        reference = existing[0] if existing else candidates[0]
        return cls(
            expected_shape=shape_of(reference),
            existing_keys=[variant_key(pairs) for pairs in existing],
        )

    @property
    def accepted_keys(self) -> frozenset[VariantKey]:
        return frozenset(self._accepted)

    def validate(self, pairs: Sequence[tuple[Any, str]]) -> VariantKey:
        """Validate one candidate and record it as accepted.

        Raises:
            DataInconsistency: the candidate's shape differs from the expected one.
            VariantAlreadyExists: the key matches a committed variant.
            DuplicateVariantInRequest: the key matches an earlier candidate.
        """
        if shape_of(pairs) != self.expected_shape:
            raise DataInconsistency(
                f"Variant attributes {shape_of(pairs)} do not match shape {self.expected_shape}."
            )
        key = variant_key(pairs)
        if key in self._existing:
            raise VariantAlreadyExists(f"Variant {key} already exists.")
        if key in self._accepted:
            raise DuplicateVariantInRequest(f"Variant {key} is repeated in the request.")
        self._accepted.add(key)
        return key

    def validate_all(self, candidates: Iterable[Sequence[tuple[Any, str]]]) -> list[VariantKey]:
        """Validate candidates in order, stopping at the first failure."""
        return [self.validate(pairs) for pairs in candidates]
