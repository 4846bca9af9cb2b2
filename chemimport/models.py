"""Inventory records and request payloads with their JSON forms."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Mapping

NIL_UUID = uuid.UUID(int=0)


def _uuid(value: Any) -> uuid.UUID:
    if not value:
        return NIL_UUID
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def _rfc3339(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.replace(microsecond=0).isoformat()
    if moment.utcoffset() == timedelta(0):
        text = text[: -len("+00:00")] + "Z"
    return text


@dataclass
class PortalSafetyInfo:
    cas_number: str = ""
    un_number: str = ""
    hazard_class: str = ""
    safety_notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "casNumber": self.cas_number,
            "unNumber": self.un_number,
            "hazardClass": self.hazard_class,
            "safetyNotes": self.safety_notes,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> PortalSafetyInfo:
        data = data or {}
        return cls(
            cas_number=data.get("casNumber") or "",
            un_number=data.get("unNumber") or "",
            hazard_class=data.get("hazardClass") or "",
            safety_notes=data.get("safetyNotes") or "",
        )


@dataclass
class PortalChemical:
    id: str = ""
    name: str = ""
    formula: str = ""
    state_of_matter: str = ""
    is_product: bool = False
    type: str = ""
    description: str = ""
    molecular_weight: int = 0
    density: float = 0.0
    safety_info: PortalSafetyInfo = field(default_factory=PortalSafetyInfo)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "formula": self.formula,
            "stateOfMatter": self.state_of_matter,
            "isProduct": self.is_product,
            "type": self.type,
            "description": self.description,
            "molecularWeight": self.molecular_weight,
            "density": self.density,
            "safetyInfo": self.safety_info.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PortalChemical:
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            formula=data.get("formula") or "",
            state_of_matter=data.get("stateOfMatter") or "",
            is_product=bool(data.get("isProduct", False)),
            type=data.get("type") or "",
            description=data.get("description") or "",
            molecular_weight=int(data.get("molecularWeight") or 0),
            density=float(data.get("density") or 0.0),
            safety_info=PortalSafetyInfo.from_dict(data.get("safetyInfo")),
        )


@dataclass
class PortalComponent:
    recipe_uuid: uuid.UUID = NIL_UUID
    recipe_title: str = ""
    fraction: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipeUUID": str(self.recipe_uuid),
            "recipeTitle": self.recipe_title,
            "fraction": self.fraction,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PortalComponent:
        return cls(
            recipe_uuid=_uuid(data.get("recipeUUID")),
            recipe_title=data.get("recipeTitle") or "",
            fraction=float(data.get("fraction") or 0.0),
        )


def _components_to_json(items: list | None) -> list[dict[str, Any]] | None:
    return None if items is None else [item.to_dict() for item in items]


@dataclass
class PortalChemicalRecipe:
    id: str = ""
    title: str = ""
    chemical_uuid: uuid.UUID = NIL_UUID
    description: str = ""
    tags: list[str] | None = None
    components: list[PortalComponent] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.title,
            "chemicalUUID": str(self.chemical_uuid),
            "description": self.description,
            "tags": None if self.tags is None else list(self.tags),
            "components": _components_to_json(self.components),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PortalChemicalRecipe:
        tags = data.get("tags")
        components = data.get("components")
        return cls(
            id=data.get("id") or "",
            title=data.get("name") or "",
            chemical_uuid=_uuid(data.get("chemicalUUID")),
            description=data.get("description") or "",
            tags=None if tags is None else list(tags),
            components=None
            if components is None
            else [PortalComponent.from_dict(c) for c in components],
        )


@dataclass
class PortalComponentInstance:
    chemical_instance_uuid: uuid.UUID = NIL_UUID
    amount: float = 0.0
    unit: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "chemicalInstanceUUID": str(self.chemical_instance_uuid),
            "amount": self.amount,
            "unit": self.unit,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PortalComponentInstance:
        return cls(
            chemical_instance_uuid=_uuid(data.get("chemicalInstanceUUID")),
            amount=float(data.get("amount") or 0.0),
            unit=data.get("unit") or "",
        )


@dataclass
class PortalChemicalInstance:
    uuid: uuid.UUID = NIL_UUID
    id: int = 0
    recipe_uuid: uuid.UUID = NIL_UUID
    amount: float = 0.0
    owner: uuid.UUID = NIL_UUID
    components: list[PortalComponentInstance] | None = None
    home_location_uuid: uuid.UUID = NIL_UUID
    supplier_uuid: uuid.UUID = NIL_UUID
    parent_uuid: uuid.UUID = NIL_UUID
    manufacture_date: str = ""
    expiration_date: str = ""
    lot_number: str = ""
    label: str = ""
    gross_weight: float = 0.0
    net_weight: float = 0.0
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "uuid": str(self.uuid),
            "id": self.id,
            "recipeUUID": str(self.recipe_uuid),
            "amount": self.amount,
            "owner": str(self.owner),
            "inputComponentInstances": _components_to_json(self.components),
            "locationUUID": str(self.home_location_uuid),
            "supplierUUID": str(self.supplier_uuid),
            "parentUUID": str(self.parent_uuid),
            "manufactureDate": self.manufacture_date,
            "expirationDate": self.expiration_date,
            "lotNumber": self.lot_number,
            "label": self.label,
            "grossWeight": self.gross_weight,
            "netWeight": self.net_weight,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PortalChemicalInstance:
        components = data.get("inputComponentInstances")
        return cls(
            uuid=_uuid(data.get("uuid")),
            id=int(data.get("id") or 0),
            recipe_uuid=_uuid(data.get("recipeUUID")),
            amount=float(data.get("amount") or 0.0),
            owner=_uuid(data.get("owner")),
            components=None
            if components is None
            else [PortalComponentInstance.from_dict(c) for c in components],
            home_location_uuid=_uuid(data.get("locationUUID")),
            supplier_uuid=_uuid(data.get("supplierUUID")),
            parent_uuid=_uuid(data.get("parentUUID")),
            manufacture_date=data.get("manufactureDate") or "",
            expiration_date=data.get("expirationDate") or "",
            lot_number=data.get("lotNumber") or "",
            label=data.get("label") or "",
            gross_weight=float(data.get("grossWeight") or 0.0),
            net_weight=float(data.get("netWeight") or 0.0),
            notes=data.get("notes") or "",
        )


@dataclass
class PayloadSafetyInfo:
    cas_number: str = ""
    un_number: str = ""
    hazard_class: str = ""
    safety_notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "casNumber": self.cas_number,
            "unNumber": self.un_number,
            "hazardClass": self.hazard_class,
            "safetyNotes": self.safety_notes,
        }


@dataclass
class PayloadChemical:
    name: str = ""
    description: str = ""
    safety_info: PortalSafetyInfo = field(default_factory=PortalSafetyInfo)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "safetyInfo": self.safety_info.to_dict(),
        }


@dataclass
class PayloadComponent:
    recipe_uuid: uuid.UUID = NIL_UUID
    recipe_title: str = ""
    fraction: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipeUUID": str(self.recipe_uuid),
            "recipeTitle": self.recipe_title,
            "fraction": self.fraction,
        }


@dataclass
class PayloadChemicalRecipe:
    title: str = ""
    chemical_uuid: uuid.UUID = NIL_UUID
    components: list[PortalComponent] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.title,
            "chemicalUUID": str(self.chemical_uuid),
            "components": _components_to_json(self.components),
        }


@dataclass
class PayloadChemicalInstance:
    id: int = 0
    recipe_uuid: uuid.UUID = NIL_UUID
    amount: float = 0.0
    owner: uuid.UUID = NIL_UUID
    components: list[PortalComponentInstance] | None = None
    home_location_uuid: uuid.UUID = NIL_UUID
    supplier_uuid: uuid.UUID = NIL_UUID
    parent_uuid: uuid.UUID = NIL_UUID
    manufacture_date: str = ""
    expiration_date: str = ""
    lot_number: str = ""
    label: str = ""
    gross_weight: float = 0.0
    net_weight: float = 0.0
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "recipeUUID": str(self.recipe_uuid),
            "amount": self.amount,
            "owner": str(self.owner),
            "inputComponentInstances": _components_to_json(self.components),
            "locationUUID": str(self.home_location_uuid),
            "supplierUUID": str(self.supplier_uuid),
            "parentUUID": str(self.parent_uuid),
            "manufactureDate": self.manufacture_date,
            "expirationDate": self.expiration_date,
            "lotNumber": self.lot_number,
            "label": self.label,
            "grossWeight": self.gross_weight,
            "netWeight": self.net_weight,
            "notes": self.notes,
        }


@dataclass
class ProcessingResult:
    """One line of the processing log."""

    file_row_num: int
    step: str
    status: str
    database_id: str = ""
    error_msg: str = ""
    processed_at: datetime = field(default_factory=lambda: datetime.now().astimezone())

    def to_row(self) -> list[str]:
        return [
            str(self.file_row_num),
            self.step,
            self.status,
            self.database_id,
            self.error_msg,
            _rfc3339(self.processed_at),
        ]