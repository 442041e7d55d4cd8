"""Lookups shared by the use cases that accept user-facing identifiers."""

from __future__ import annotations

from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.model.material import Material
from stockledger.domain.repository.material_repository import MaterialRepository


def material_by_code(material_repo: MaterialRepository, code: str) -> Material:
    material = material_repo.get_by_code(code)
    if material is None:
        raise EntityNotFoundError(f"Material not found: '{code}'")
    return material
