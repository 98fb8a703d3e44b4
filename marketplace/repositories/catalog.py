"""Read-only adapters over the menu and address subsystems' tables."""

from __future__ import annotations

from sqlalchemy.orm import Session

from marketplace.models import ClientAddress, MenuItem, Restaurant
from marketplace.repositories.ports import AddressSnapshot, MenuItemSnapshot, RestaurantSnapshot


class SqlCatalogReader:
    """Catalog snapshot reader backed by the shared store."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_restaurant(self, restaurant_id: int) -> RestaurantSnapshot | None:
        restaurant = self.db.get(Restaurant, restaurant_id)
        if restaurant is None:
            return None
        return RestaurantSnapshot.model_validate(restaurant)

    def get_menu_item(self, menu_item_id: int) -> MenuItemSnapshot | None:
        item = self.db.get(MenuItem, menu_item_id)
        if item is None:
            return None
        return MenuItemSnapshot.model_validate(item)


class SqlAddressBook:
    """Address validator backed by the shared store."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_client_address(self, address_id: int) -> AddressSnapshot | None:
        address = self.db.get(ClientAddress, address_id)
        if address is None:
            return None
        return AddressSnapshot.model_validate(address)
