"""HTTP client for the chemical inventory service."""

from __future__ import annotations

from typing import Any

import requests

from chemimport.models import (
    PayloadChemical,
    PayloadChemicalRecipe,
    PortalChemical,
    PortalChemicalRecipe,
)

DEFAULT_BASE_URL = "http://192.168.2.2:8092"


class InventoryError(Exception):
    """Raised when the inventory service cannot be reached or answers unexpectedly."""


class InventoryClient:
    """Looks up and creates chemicals and recipes in the inventory service."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()

    def _send(
        self, method: str, path: str, action: str, **kwargs: Any
    ) -> requests.Response:
        try:
            return self.session.request(method, self.base_url + path, **kwargs)
        except requests.RequestException as exc:
            raise InventoryError(f"failed to {action}: {exc}") from exc

    @staticmethod
    def _json(response: requests.Response, action: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise InventoryError(f"failed to {action}: {exc}") from exc

    def find_chemical(self, name: str) -> PortalChemical | None:
        """Return the chemical called ``name``, or None if the service has none."""
        action = "check if chemical exists"
        response = self._send("GET", "/chemicals/name", action, params={"name": name})
        # The service answers 500 when no chemical has that name.
        if response.status_code == 500:
            return None
        if response.status_code == 200:
            data = self._json(response, action)
            if not isinstance(data, dict):
                raise InventoryError(f"failed to {action}: expected a JSON object")
            return PortalChemical.from_dict(data)
        raise InventoryError(
            f"unexpected response code: {response.status_code}, body: {response.text}"
        )

    def find_recipe(self, title: str, chemical_id: str) -> PortalChemicalRecipe | None:
        """Return the recipe of ``chemical_id`` whose title is ``title``, if any."""
        action = "check if chemical recipe exists"
        response = self._send("GET", f"/chemicals/{chemical_id}/recipes", action)
        if response.status_code == 500:
            return None
        if response.status_code == 200:
            data = self._json(response, action) or []
            if not isinstance(data, list):
                raise InventoryError(f"failed to {action}: expected a JSON array")
            recipes = (PortalChemicalRecipe.from_dict(item) for item in data)
            return next((recipe for recipe in recipes if recipe.title == title), None)
        raise InventoryError(
            f"unexpected response code: {response.status_code}, body: {response.text}"
        )

    def create_chemical(self, payload: PayloadChemical) -> str:
        """Create a chemical and return its new ID."""
        action = "create new chemical"
        response = self._send("POST", "/chemicals", action, json=payload.to_dict())
        if response.status_code == 201:
            data = self._json(response, action)
            return PortalChemical.from_dict(data if isinstance(data, dict) else {}).id
        raise InventoryError(
            f"failed to create new chemical, status code: {response.status_code}, "
            f"response: {response.text}"
        )

    def create_recipe(self, payload: PayloadChemicalRecipe) -> str:
        """Create a chemical recipe and return its new ID."""
        action = "create new chemical recipe"
        response = self._send("POST", "/recipes/", action, json=payload.to_dict())
        if response.status_code == 201:
            data = self._json(response, action)
            return PortalChemicalRecipe.from_dict(data if isinstance(data, dict) else {}).id
        raise InventoryError(
            f"failed to create new chemical recipe, status code: {response.status_code}, "
            f"response: {response.text}"
        )