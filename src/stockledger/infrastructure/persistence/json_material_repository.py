"""JSON-file-backed implementation of MaterialRepository."""

from __future__ import annotations

from pathlib import Path

from stockledger.domain.model.material import Material
from stockledger.domain.repository.material_repository import MaterialRepository
from stockledger.infrastructure.persistence.json_file import (
    JsonFile,
    decimal_or_none,
    str_or_none,
)


class JsonMaterialRepository(MaterialRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, empty=[])

    # --- MaterialRepository interface -----------------------------------------

    def get_by_id(self, material_id: str) -> Material | None:
        return self._load().get(material_id)

    def get_by_code(self, code: str) -> Material | None:
        for material in self._load().values():
            if material.code.lower() == code.strip().lower():
                return material
        return None

    def list_all(self) -> list[Material]:
        return list(self._load().values())

    def save(self, material: Material) -> None:
        with self._file.locked():
            materials = self._load()
            materials[material.id] = material
            self._file.persist([self._to_raw(m) for m in materials.values()])

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(material: Material) -> dict:
        return {
            "id": material.id,
            "code": material.code,
            "designation": material.designation,
            "unit": material.unit,
            "alert_threshold": str_or_none(material.alert_threshold),
        }

    def _load(self) -> dict[str, Material]:
        return {
            raw["id"]: Material(
                id=raw["id"],
                code=raw["code"],
                designation=raw["designation"],
                unit=raw["unit"],
                alert_threshold=decimal_or_none(raw.get("alert_threshold")),
            )
            for raw in self._file.load()
        }
