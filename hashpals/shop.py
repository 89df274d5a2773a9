"""Shop catalog: turns the raw SHOP_ITEMS table into typed items."""
from typing import Dict, List, Optional

from hashpals.constants import REWARD_ITEMS, SHOP_ITEMS
from hashpals.models import (
    AccessoryItem, AccessoryType, CreditItem, FoodItem, InventoryItem, ItemType, ShopItem, ToyItem,
)


def item_from_dict(data, item_type) -> ShopItem:
    """Builds the variant for one catalog entry."""
    item_type = ItemType(item_type)
    common = {
        'id': str(data['id']),
        'name': data['name'],
        'description': data.get('description', ''),
        'cost': int(data.get('cost', 0)),
    }
    if item_type == ItemType.FOOD:
        return FoodItem(energy_boost=data.get('energy_boost', 0),
                        happiness_boost=data.get('happiness_boost', 0), **common)
    if item_type == ItemType.TOY:
        return ToyItem(energy_boost=data.get('energy_boost', 0),
                       happiness_boost=data.get('happiness_boost', 0), **common)
    if item_type == ItemType.ACCESSORY:
        return AccessoryItem(accessory_type=AccessoryType(data.get('accessory_type', 'hat')), **common)
    return CreditItem(credit_amount=int(data.get('credit_amount', 0)), **common)


def build_catalog(table=None) -> Dict[str, ShopItem]:
    """Maps item id -> item, keeping the table's category order."""
    table = SHOP_ITEMS if table is None else table
    catalog = {}
    for category, entries in table.items():
        for entry in entries:
            item = item_from_dict(entry, category)
            catalog[item.id] = item
    return catalog


CATALOG = build_catalog()


def get_item(item_id: str) -> Optional[ShopItem]:
    return CATALOG.get(str(item_id))


def items_of_type(item_type) -> List[ShopItem]:
    item_type = ItemType(item_type)
    return [item for item in CATALOG.values() if item.type == item_type]


def reward_item(item_id: str, quantity: int) -> InventoryItem:
    """
    Inventory entry for an item granted by a daily reward. Reward-only items
    come from REWARD_ITEMS; anything else is looked up in the shop catalog.
    """
    data = REWARD_ITEMS.get(item_id)
    if data is not None:
        return InventoryItem.from_shop_item(item_from_dict(data, data['type']), quantity)
    item = get_item(item_id)
    if item is None or item.type not in (ItemType.FOOD, ItemType.TOY):
        raise KeyError(f"No food or toy definition for reward item '{item_id}'")
    return InventoryItem.from_shop_item(item, quantity)
