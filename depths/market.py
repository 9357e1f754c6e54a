"""Daily shop generation and buy/sell pricing.

The shop is deterministic for a given seed string (usually the date):
each slot gets its own ``random.Random`` derived from the seed, so no
shared randomness source is touched.
"""
from __future__ import annotations
from dataclasses import dataclass
import hashlib
import logging
import math
import random
from typing import Dict, List

import config
from .inventory import Inventory
from .items import Item, Rarity
from .loot import ItemGenerator, LootTable
from .results import Ok, Err, Result

log = logging.getLogger(__name__)

SHOP_RARITY_RATES: Dict[Rarity, float] = {
    Rarity.COMMON: 0.50,
    Rarity.UNCOMMON: 0.30,
    Rarity.RARE: 0.15,
    Rarity.EPIC: 0.04,
    Rarity.LEGENDARY: 0.01,
}


@dataclass
class ShopItem:
    item: Item
    price: int


def daily_seed(seed_string: str) -> int:
    """Stable 32-bit seed from an arbitrary string."""
    digest = hashlib.sha256(seed_string.encode('utf-8')).digest()
    return int.from_bytes(digest[:4], 'big')


def buy_price(item: Item) -> int:
    return math.floor(item.gold_value * config.SHOP_BUY_MARKUP)


def sell_price(item: Item) -> int:
    return math.floor(item.gold_value * config.SHOP_SELL_MULTIPLIER)


def generate_daily_shop(seed_string: str, hero_level: int, size: int | None = None) -> List[ShopItem]:
    """Same seed string and hero level always yield the same shop."""
    seed = daily_seed(seed_string)
    table = LootTable.from_weights('shop', SHOP_RARITY_RATES)
    variance = config.SHOP_ITEM_LEVEL_VARIANCE
    shop: List[ShopItem] = []

    for i in range(size if size is not None else config.SHOP_SIZE):
        item_seed = seed + i
        rng = random.Random(item_seed)
        rarity = table.roll(rng)
        level = max(1, hero_level + rng.randint(-variance, variance))
        generator = ItemGenerator(rng=rng)
        item = generator.generate(level, rarity, item_id=f"market_{seed_string}_{i}_{item_seed}")
        shop.append(ShopItem(item, buy_price(item)))

    log.debug("Daily shop %r: %d items for hero level %d", seed_string, len(shop), hero_level)
    return shop


def buy_item(inventory: Inventory, offer: ShopItem) -> Result:
    """Pay and receive a copy of the offered item."""
    if inventory.gold < offer.price:
        return Err(f"Not enough gold! Need {offer.price}g, have {inventory.gold}g")
    if inventory.is_full():
        return Err("Inventory is full! Sell items to make space.")
    if offer.item.id in inventory:
        return Err("You already bought this item")

    # clone keeps the offer id so a second purchase hits the check above
    purchased = offer.item.clone()
    inventory.add_item(purchased)
    inventory.remove_gold(offer.price)
    return Ok(f"Purchased {purchased.name} for {offer.price}g", value=purchased)


def sell_to_market(inventory: Inventory, item_id: str) -> Result:
    """Sell at the market rate (half the item value)."""
    removed = inventory.remove_item(item_id)
    if not removed.success:
        return removed
    price = sell_price(removed.value)
    inventory.add_gold(price)
    return Ok(f"Sold {removed.value.name} for {price}g", value=price)
