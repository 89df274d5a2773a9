import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from hashpals.constants import (
    DAILY_REWARD_SCHEDULE, DEFAULT_AI_CREDITS, DEFAULT_COINS, DEFAULT_DAILY_FEEDS,
    DEFAULT_ENERGY, DEFAULT_HAPPINESS, DEFAULT_MINING_SPEED, DEFAULT_MINING_UPGRADE_COST,
    MAX_MINING_SPEED, STAT_MAX, STAT_MIN,
)
from hashpals.game_utils import clamp, round_stat

logger = logging.getLogger(__name__)


class _LenientEnum(Enum):
    """
    Enum lookup that tolerates case and whitespace differences in save data.
    Anything still unrecognized raises ValueError as usual.
    """

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class Scene(_LenientEnum):
    WAREHOUSE = 'warehouse'
    PARK = 'park'
    TOWN = 'town'
    CITY = 'city'


class AccessoryType(_LenientEnum):
    HAT = 'hat'
    GLASSES = 'glasses'
    COLLAR = 'collar'


class ItemType(_LenientEnum):
    FOOD = 'food'
    TOY = 'toy'
    ACCESSORY = 'accessory'
    CREDIT = 'credit'


class RewardType(_LenientEnum):
    COINS = 'coins'
    ITEM = 'item'


class PetMood(_LenientEnum):
    HAPPY = 'happy'
    NEUTRAL = 'neutral'
    SAD = 'sad'
    SLEEPY = 'sleepy'
    EXCITED = 'excited'


# --- Shop items: one variant per category ---

@dataclass(frozen=True)
class FoodItem:
    id: str
    name: str
    description: str
    cost: int
    energy_boost: float = 0
    happiness_boost: float = 0
    type: ItemType = field(default=ItemType.FOOD, init=False)


@dataclass(frozen=True)
class ToyItem:
    id: str
    name: str
    description: str
    cost: int
    energy_boost: float = 0
    happiness_boost: float = 0
    type: ItemType = field(default=ItemType.TOY, init=False)


@dataclass(frozen=True)
class AccessoryItem:
    id: str
    name: str
    description: str
    cost: int
    accessory_type: AccessoryType = AccessoryType.HAT
    type: ItemType = field(default=ItemType.ACCESSORY, init=False)


@dataclass(frozen=True)
class CreditItem:
    id: str
    name: str
    description: str
    cost: int
    credit_amount: int = 0
    type: ItemType = field(default=ItemType.CREDIT, init=False)


ShopItem = Union[FoodItem, ToyItem, AccessoryItem, CreditItem]


# --- Owned things ---

@dataclass
class Accessory:
    id: str
    name: str
    description: str
    type: AccessoryType
    equipped: bool = False

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'type': self.type.value,
            'equipped': self.equipped,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            description=data.get('description', ''),
            type=AccessoryType(data.get('type', 'hat')),
            equipped=bool(data.get('equipped', False)),
        )


@dataclass
class InventoryItem:
    id: str
    name: str
    description: str
    type: ItemType
    energy_boost: float = 0
    happiness_boost: float = 0
    quantity: int = 1

    @classmethod
    def from_shop_item(cls, item, quantity=1):
        return cls(
            id=item.id,
            name=item.name,
            description=item.description,
            type=item.type,
            energy_boost=item.energy_boost,
            happiness_boost=item.happiness_boost,
            quantity=quantity,
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'type': self.type.value,
            'energy_boost': self.energy_boost,
            'happiness_boost': self.happiness_boost,
            'quantity': self.quantity,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            description=data.get('description', ''),
            type=ItemType(data.get('type', 'food')),
            energy_boost=data.get('energy_boost') or 0,
            happiness_boost=data.get('happiness_boost') or 0,
            quantity=int(data.get('quantity', 1)),
        )


# --- Daily rewards and feeding trackers ---

@dataclass
class RewardSpec:
    type: RewardType
    value: int
    item_id: Optional[str] = None


@dataclass
class DailyReward:
    day: int
    reward: RewardSpec
    claimed: bool = False

    def to_dict(self):
        data = {
            'day': self.day,
            'claimed': self.claimed,
            'type': self.reward.type.value,
            'value': self.reward.value,
        }
        if self.reward.item_id is not None:
            data['item_id'] = self.reward.item_id
        return data

    @classmethod
    def from_dict(cls, data):
        reward = RewardSpec(
            type=RewardType(data['type']),
            value=int(data['value']),
            item_id=data.get('item_id'),
        )
        return cls(day=int(data['day']), reward=reward, claimed=bool(data.get('claimed', False)))


def _load_entries(loader, entries, what):
    """Loads each saved entry on its own; a broken one is skipped, not fatal."""
    loaded = []
    for entry in entries:
        try:
            loaded.append(loader(entry))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping unreadable %s in save data (%s): %r", what, e, entry)
    return loaded


def _saved_number(data, key, kind, default):
    try:
        return kind(data[key])
    except (TypeError, ValueError):
        logger.warning("Unreadable '%s' in save data (%r), using %s.", key, data[key], default)
        return default


def default_reward_schedule() -> List[DailyReward]:
    """A fresh, unclaimed copy of the 7-day schedule."""
    return [DailyReward.from_dict(entry) for entry in DAILY_REWARD_SCHEDULE]


@dataclass
class DailyRewardsTracker:
    last_claim_date: int = 0  # local midnight (ms) of the last claim day
    current_streak: int = 0
    max_streak: int = 0
    rewards: List[DailyReward] = field(default_factory=default_reward_schedule)

    def reward_for_day(self, day: int) -> Optional[DailyReward]:
        for reward in self.rewards:
            if reward.day == day:
                return reward
        return None

    def to_dict(self):
        return {
            'last_claim_date': self.last_claim_date,
            'current_streak': self.current_streak,
            'max_streak': self.max_streak,
            'rewards': [r.to_dict() for r in self.rewards],
        }

    @classmethod
    def from_dict(cls, data):
        rewards = _load_entries(DailyReward.from_dict, data.get('rewards') or [], 'daily reward')
        return cls(
            last_claim_date=int(data.get('last_claim_date', 0)),
            current_streak=max(0, int(data.get('current_streak', 0))),
            max_streak=max(0, int(data.get('max_streak', 0))),
            rewards=rewards or default_reward_schedule(),
        )


@dataclass
class FeedingTracker:
    daily_allowance: int = DEFAULT_DAILY_FEEDS
    remaining_allowance: int = DEFAULT_DAILY_FEEDS
    last_allowance_date: int = 0

    def to_dict(self):
        return {
            'daily_allowance': self.daily_allowance,
            'remaining_allowance': self.remaining_allowance,
            'last_allowance_date': self.last_allowance_date,
        }

    @classmethod
    def from_dict(cls, data):
        daily = max(0, int(data.get('daily_allowance', DEFAULT_DAILY_FEEDS)))
        return cls(
            daily_allowance=daily,
            remaining_allowance=int(clamp(int(data.get('remaining_allowance', daily)), 0, daily)),
            last_allowance_date=int(data.get('last_allowance_date', 0)),
        )


def default_unlocked_scenes() -> Dict[Scene, bool]:
    return {scene: scene == Scene.WAREHOUSE for scene in Scene}


@dataclass
class GameState:
    """The whole persisted record for one installation."""
    coins: int = DEFAULT_COINS
    happiness: float = DEFAULT_HAPPINESS
    energy: float = DEFAULT_ENERGY
    ai_credits: int = DEFAULT_AI_CREDITS
    is_mining: bool = False
    mining_speed: int = DEFAULT_MINING_SPEED
    mining_upgrade_cost: int = DEFAULT_MINING_UPGRADE_COST
    # Epoch milliseconds
    last_fed: int = 0
    last_played: int = 0
    last_active: int = 0
    last_happiness_update: int = 0
    last_energy_update: int = 0
    accessories: List[Accessory] = field(default_factory=list)
    inventory: List[InventoryItem] = field(default_factory=list)
    current_scene: Scene = Scene.WAREHOUSE
    unlocked_scenes: Dict[Scene, bool] = field(default_factory=default_unlocked_scenes)
    daily_rewards: DailyRewardsTracker = field(default_factory=DailyRewardsTracker)
    feeding: FeedingTracker = field(default_factory=FeedingTracker)

    @classmethod
    def fresh(cls, now: int) -> "GameState":
        """Default state as created on first launch (or by a reset)."""
        return cls(
            last_fed=now,
            last_played=now,
            last_active=now,
            last_happiness_update=now,
            last_energy_update=now,
            feeding=FeedingTracker(last_allowance_date=now),
        )

    def mood(self) -> PetMood:
        if self.energy < 30:
            return PetMood.SLEEPY
        if self.happiness > 80:
            return PetMood.EXCITED
        if self.happiness > 60:
            return PetMood.HAPPY
        if self.happiness > 40:
            return PetMood.NEUTRAL
        return PetMood.SAD

    def find_inventory_item(self, item_id: str) -> Optional[InventoryItem]:
        for item in self.inventory:
            if item.id == item_id:
                return item
        return None

    def equipped_accessory(self, accessory_type: AccessoryType) -> Optional[Accessory]:
        for acc in self.accessories:
            if acc.type == accessory_type and acc.equipped:
                return acc
        return None

    def is_unlocked(self, scene: Scene) -> bool:
        return bool(self.unlocked_scenes.get(scene, False))

    # --- Persistence blob ---
    def to_dict(self):
        return {
            'coins': self.coins,
            'happiness': self.happiness,
            'energy': self.energy,
            'ai_credits': self.ai_credits,
            'is_mining': self.is_mining,
            'mining_speed': self.mining_speed,
            'mining_upgrade_cost': self.mining_upgrade_cost,
            'last_fed': self.last_fed,
            'last_played': self.last_played,
            'last_active': self.last_active,
            'last_happiness_update': self.last_happiness_update,
            'last_energy_update': self.last_energy_update,
            'accessories': [a.to_dict() for a in self.accessories],
            'inventory': [i.to_dict() for i in self.inventory],
            'current_scene': self.current_scene.value,
            'unlocked_scenes': {scene.value: unlocked for scene, unlocked in self.unlocked_scenes.items()},
            'daily_rewards': self.daily_rewards.to_dict(),
            'feeding': self.feeding.to_dict(),
        }

    @classmethod
    def from_dict(cls, data, now: int = 0) -> "GameState":
        """
        Rebuilds a state from a saved blob. Missing keys take their defaults
        so saves written by older versions still load.
        """
        state = cls.fresh(now)
        for key in ('coins', 'ai_credits', 'mining_speed', 'mining_upgrade_cost',
                    'last_fed', 'last_played', 'last_active',
                    'last_happiness_update', 'last_energy_update'):
            if key in data:
                setattr(state, key, _saved_number(data, key, int, getattr(state, key)))
        for key in ('happiness', 'energy'):
            if key in data:
                value = _saved_number(data, key, float, getattr(state, key))
                setattr(state, key, round_stat(clamp(value, STAT_MIN, STAT_MAX)))
        state.coins = max(0, state.coins)
        state.ai_credits = max(0, state.ai_credits)
        state.mining_speed = int(clamp(state.mining_speed, 1, MAX_MINING_SPEED))
        state.is_mining = bool(data.get('is_mining', False)) and state.energy > 0

        state.accessories = _load_entries(Accessory.from_dict, data.get('accessories', []), 'accessory')
        # One equipped accessory per slot; the first one wins
        worn = set()
        for acc in state.accessories:
            if acc.equipped and acc.type in worn:
                logger.warning("Unequipping extra %s '%s' in save data.", acc.type.value, acc.id)
                acc.equipped = False
            elif acc.equipped:
                worn.add(acc.type)
        state.inventory = [i for i in _load_entries(InventoryItem.from_dict, data.get('inventory', []), 'inventory item')
                           if i.quantity > 0]

        unlocked = default_unlocked_scenes()
        for name, flag in data.get('unlocked_scenes', {}).items():
            try:
                unlocked[Scene(name)] = bool(flag)
            except ValueError:
                logger.warning("Ignoring unknown scene '%s' in save data.", name)
        unlocked[Scene.WAREHOUSE] = True
        state.unlocked_scenes = unlocked

        try:
            scene = Scene(data.get('current_scene', Scene.WAREHOUSE.value))
        except ValueError:
            logger.warning("Unknown scene '%s' in save data, using warehouse.", data.get('current_scene'))
            scene = Scene.WAREHOUSE
        state.current_scene = scene if unlocked.get(scene) else Scene.WAREHOUSE

        if 'daily_rewards' in data:
            state.daily_rewards = DailyRewardsTracker.from_dict(data['daily_rewards'])
        if 'feeding' in data:
            state.feeding = FeedingTracker.from_dict(data['feeding'])
        return state
