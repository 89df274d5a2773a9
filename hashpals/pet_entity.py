import copy
import dataclasses
import logging
import random

from hashpals.constants import (
    DECAY_DEBOUNCE_MS, FEED_ENERGY, FEED_HAPPINESS, HAPPINESS_DECAY_PER_MS, MAX_MINING_SPEED,
    MINING_BASE_INTERVAL_MS, MINING_COIN_MAX, MINING_COIN_MIN, MINING_ENERGY_DECAY_PER_MS,
    MINING_MIN_ENERGY, MINING_STOP_ENERGY, PET_COIN_CHANCE, PET_COIN_MAX, PET_COIN_MIN,
    PET_HAPPINESS, PLAY_ENERGY_COST, PLAY_HAPPINESS, REWARD_CYCLE_DAYS, SCENE_UNLOCK_COSTS,
    STAT_MAX, STAT_MIN,
)
from hashpals.game_utils import (
    clamp, generate_random_coins, local_day, local_midnight_ms, now_ms, previous_midnight_ms,
    round_stat,
)
from hashpals.models import (
    Accessory, AccessoryItem, AccessoryType, CreditItem, FoodItem, GameState, InventoryItem,
    ItemType, RewardType, Scene, ToyItem,
)
from hashpals.shop import get_item, reward_item

logger = logging.getLogger(__name__)


def _coerce(enum_cls, value):
    """Enum member for value, or None if it isn't one."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _stat(value: float) -> float:
    return round_stat(clamp(value, STAT_MIN, STAT_MAX))


def _is_whole(amount) -> bool:
    return isinstance(amount, int) and not isinstance(amount, bool)


class Pet:
    """
    The game state engine. Owns one GameState and applies every action to it
    as a single synchronous read-modify-write.

    Each action either applies fully (the state is persisted and subscribers
    are told) or is rejected and leaves the state untouched. Rejections are
    reported through the return value, never raised.
    """

    def __init__(self, store=None, clock=None, rng=None, state=None):
        self.store = store            # anything with load()/save(state)
        self.clock = clock or now_ms  # epoch milliseconds
        self.rng = rng or random.Random()
        self.state = state if state is not None else GameState.fresh(self.clock())
        self._subscribers = []

    @classmethod
    def load(cls, store, clock=None, rng=None):
        """Hydrates from storage once; the in-memory record is authoritative after this."""
        clock = clock or now_ms
        state = store.load(now=clock())
        if state is None:
            logger.info("No saved game found. A new pet has arrived!")
        else:
            logger.info("Welcome back! Loaded saved game with %s coins.", state.coins)
        return cls(store=store, clock=clock, rng=rng, state=state)

    # ------------------------------------------------------------------
    # Observers

    def subscribe(self, callback):
        """callback(action_name, state) runs after every applied action. Returns an unsubscribe function."""
        self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def snapshot(self) -> GameState:
        return copy.deepcopy(self.state)

    def _commit(self, action):
        logger.debug("%s applied", action)
        if self.store is not None:
            self.store.save(self.state)
        for callback in list(self._subscribers):
            callback(action, self.state)

    def _reject(self, action, reason):
        logger.debug("%s rejected: %s", action, reason)
        return False

    # ------------------------------------------------------------------
    # Care actions

    def feed(self):
        """Uses one of today's free feeds. Returns False once they are used up."""
        now = self.clock()
        s = self.state
        feeding = s.feeding
        is_new_day = local_day(now) > local_day(feeding.last_allowance_date)
        available = feeding.daily_allowance if is_new_day else feeding.remaining_allowance
        if available <= 0:
            return self._reject("feed", "no feeding allowance left today")

        if is_new_day:
            feeding.remaining_allowance = feeding.daily_allowance
            feeding.last_allowance_date = now
        feeding.remaining_allowance -= 1

        s.energy = _stat(s.energy + FEED_ENERGY)
        s.happiness = _stat(s.happiness + FEED_HAPPINESS)
        s.last_fed = now
        s.last_active = now
        s.last_happiness_update = now
        # Mining energy decay keeps counting across a meal
        if not s.is_mining:
            s.last_energy_update = now
        self._commit("feed")
        return True

    def play(self):
        now = self.clock()
        s = self.state
        s.happiness = _stat(s.happiness + PLAY_HAPPINESS)
        s.energy = _stat(s.energy - PLAY_ENERGY_COST)
        s.last_played = now
        s.last_active = now
        s.last_happiness_update = now
        self._commit("play")
        return True

    def pet(self) -> int:
        """Pets the pet. Sometimes it finds a few coins; returns how many (0 if none)."""
        now = self.clock()
        s = self.state
        s.happiness = _stat(s.happiness + PET_HAPPINESS)
        s.last_active = now
        s.last_happiness_update = now
        coins = 0
        if self.rng.random() < PET_COIN_CHANCE:
            coins = generate_random_coins(self.rng, PET_COIN_MIN, PET_COIN_MAX)
            s.coins += coins
        self._commit("pet")
        return coins

    def update_last_active(self):
        self.state.last_active = self.clock()
        self._commit("update_last_active")
        return True

    # ------------------------------------------------------------------
    # Decay (lazy, from elapsed wall-clock time)

    def update_happiness(self):
        now = self.clock()
        s = self.state
        elapsed = now - s.last_happiness_update
        if elapsed < DECAY_DEBOUNCE_MS:
            return False
        if s.happiness > 0:
            s.happiness = _stat(s.happiness - HAPPINESS_DECAY_PER_MS * elapsed)
        s.last_happiness_update = now
        self._commit("update_happiness")
        return True

    def update_mining_energy(self):
        """Drains energy while mining; mining stops by itself when energy runs out."""
        s = self.state
        if not s.is_mining:
            return False
        now = self.clock()
        elapsed = now - s.last_energy_update
        if elapsed < DECAY_DEBOUNCE_MS:
            return False
        if s.energy > 0:
            s.energy = _stat(s.energy - MINING_ENERGY_DECAY_PER_MS * elapsed)
        if s.energy <= 0:
            s.energy = 0.0
            s.is_mining = False
            logger.info("Energy ran out, mining stopped.")
        s.last_energy_update = now
        self._commit("update_mining_energy")
        return True

    # ------------------------------------------------------------------
    # Mining

    def start_mining(self):
        s = self.state
        if s.is_mining:
            return self._reject("start_mining", "already mining")
        if s.energy < MINING_MIN_ENERGY:
            return self._reject("start_mining", f"needs {MINING_MIN_ENERGY} energy, has {s.energy}")
        now = self.clock()
        s.is_mining = True
        s.last_energy_update = now
        s.last_active = now
        self._commit("start_mining")
        return True

    def stop_mining(self):
        s = self.state
        if not s.is_mining:
            return self._reject("stop_mining", "not mining")
        s.is_mining = False
        s.last_active = self.clock()
        self._commit("stop_mining")
        return True

    def mining_interval_ms(self) -> int:
        """How often the host should call mine_tick()."""
        return MINING_BASE_INTERVAL_MS // self.state.mining_speed

    def mine_tick(self):
        """
        One reward tick from the host's mining timer. Returns the coins mined,
        0 if the pet was too tired (mining stops), or None when not mining.
        """
        s = self.state
        if not s.is_mining:
            self._reject("mine_tick", "not mining")
            return None
        if s.energy < MINING_STOP_ENERGY:
            s.is_mining = False
            s.last_active = self.clock()
            self._commit("stop_mining")
            return 0
        coins = generate_random_coins(self.rng, MINING_COIN_MIN, MINING_COIN_MAX) * s.mining_speed
        s.coins += coins
        self._commit("mine_tick")
        return coins

    def upgrade_mining_speed(self):
        s = self.state
        if s.mining_speed >= MAX_MINING_SPEED:
            return self._reject("upgrade_mining_speed", "already at max speed")
        if s.coins < s.mining_upgrade_cost:
            return self._reject("upgrade_mining_speed", f"needs {s.mining_upgrade_cost} coins")
        s.coins -= s.mining_upgrade_cost
        s.mining_speed += 1
        s.mining_upgrade_cost *= 2
        s.last_active = self.clock()
        self._commit("upgrade_mining_speed")
        return True

    # ------------------------------------------------------------------
    # Coins and credits

    def earn_coins(self, amount: int):
        if not _is_whole(amount):
            return self._reject("earn_coins", f"amount must be a whole number, got {amount!r}")
        s = self.state
        if s.coins + amount < 0:
            return self._reject("earn_coins", "coins cannot go below zero")
        s.coins += amount
        self._commit("earn_coins")
        return True

    def add_ai_credits(self, amount: int):
        if not _is_whole(amount) or amount <= 0:
            return self._reject("add_ai_credits", f"amount must be a positive whole number, got {amount!r}")
        self.state.ai_credits += amount
        self.state.last_active = self.clock()
        self._commit("add_ai_credits")
        return True

    def use_ai_credit(self) -> bool:
        """Spends one credit on an AI chat. False means no credits are left."""
        s = self.state
        if s.ai_credits <= 0:
            return self._reject("use_ai_credit", "no AI credits left")
        s.ai_credits -= 1
        s.last_active = self.clock()
        self._commit("use_ai_credit")
        return True

    # ------------------------------------------------------------------
    # Shop and inventory

    def buy_item(self, item):
        """Buys a catalog item (or item id). Returns False if it can't be afforded."""
        if isinstance(item, str):
            found = get_item(item)
            if found is None:
                return self._reject("buy_item", f"unknown item '{item}'")
            item = found
        if not isinstance(item, (FoodItem, ToyItem, AccessoryItem, CreditItem)):
            raise TypeError(f"Not a shop item: {item!r}")

        s = self.state
        if s.coins < item.cost:
            return self._reject("buy_item", f"{item.name} costs {item.cost}, have {s.coins}")

        if isinstance(item, CreditItem):
            s.ai_credits += item.credit_amount
        elif isinstance(item, AccessoryItem):
            s.accessories.append(Accessory(
                id=item.id,
                name=item.name,
                description=item.description,
                type=item.accessory_type,
                equipped=False,
            ))
        else:
            existing = s.find_inventory_item(item.id)
            if existing is not None:
                existing.quantity += 1
            else:
                s.inventory.append(InventoryItem.from_shop_item(item))

        s.coins -= item.cost
        s.last_active = self.clock()
        self._commit("buy_item")
        return True

    def use_inventory_item(self, item_id: str):
        s = self.state
        item = s.find_inventory_item(item_id)
        if item is None or item.quantity <= 0:
            return self._reject("use_inventory_item", f"no '{item_id}' in inventory")

        now = self.clock()
        happiness_boost = item.happiness_boost or 0
        energy_boost = item.energy_boost or 0
        item.quantity -= 1
        if item.quantity == 0:
            s.inventory.remove(item)

        s.happiness = _stat(s.happiness + happiness_boost)
        s.energy = _stat(s.energy + energy_boost)
        # Energy-only items leave the happiness decay clock alone
        if happiness_boost > 0:
            s.last_happiness_update = now
        if item.type == ItemType.FOOD:
            s.last_fed = now
        s.last_active = now
        self._commit("use_inventory_item")
        return True

    def equip_accessory(self, accessory_id: str):
        s = self.state
        target = next((i for i, acc in enumerate(s.accessories) if acc.id == accessory_id), None)
        if target is None:
            return self._reject("equip_accessory", f"no accessory '{accessory_id}'")
        slot = s.accessories[target].type
        for i, acc in enumerate(s.accessories):
            if acc.type == slot:
                acc.equipped = i == target
        s.last_active = self.clock()
        self._commit("equip_accessory")
        return True

    def unequip_accessory(self, accessory_type):
        slot = _coerce(AccessoryType, accessory_type)
        if slot is None:
            return self._reject("unequip_accessory", f"unknown slot '{accessory_type}'")
        s = self.state
        for acc in s.accessories:
            if acc.type == slot:
                acc.equipped = False
        s.last_active = self.clock()
        self._commit("unequip_accessory")
        return True

    # ------------------------------------------------------------------
    # Daily rewards

    def _streak_after_claim(self, now):
        rewards = self.state.daily_rewards
        last_claim = local_midnight_ms(rewards.last_claim_date)
        if last_claim == previous_midnight_ms(now):
            return rewards.current_streak + 1
        return 1

    @staticmethod
    def _cycle_day(streak):
        return ((streak - 1) % REWARD_CYCLE_DAYS) + 1

    def can_claim_daily_reward(self) -> bool:
        now = self.clock()
        return local_midnight_ms(self.state.daily_rewards.last_claim_date) != local_midnight_ms(now)

    def current_reward_day(self) -> int:
        """Schedule day (1-7) of today's reward, claimed or not."""
        if self.can_claim_daily_reward():
            return self._cycle_day(self._streak_after_claim(self.clock()))
        return self._cycle_day(max(1, self.state.daily_rewards.current_streak))

    def claim_daily_reward(self):
        """Claims today's reward. Returns the DailyReward paid out, or False if already claimed."""
        if not self.can_claim_daily_reward():
            return self._reject("claim_daily_reward", "already claimed today")

        now = self.clock()
        s = self.state
        rewards = s.daily_rewards
        streak = self._streak_after_claim(now)
        day = self._cycle_day(streak)
        reward = rewards.reward_for_day(day)

        granted = None
        if reward is not None and reward.reward.type == RewardType.ITEM and reward.reward.item_id:
            if s.find_inventory_item(reward.reward.item_id) is None:
                granted = reward_item(reward.reward.item_id, reward.reward.value)

        rewards.current_streak = streak
        rewards.max_streak = max(rewards.max_streak, streak)
        if reward is None:
            logger.warning("No reward defined for day %s of the cycle.", day)
        else:
            reward.claimed = True
            if reward.reward.type == RewardType.COINS:
                s.coins += reward.reward.value
            elif granted is not None:
                s.inventory.append(granted)
            elif reward.reward.item_id:
                s.find_inventory_item(reward.reward.item_id).quantity += reward.reward.value

        if day == REWARD_CYCLE_DAYS:
            for entry in rewards.rewards:
                entry.claimed = False

        rewards.last_claim_date = local_midnight_ms(now)
        s.last_active = now
        self._commit("claim_daily_reward")
        return reward if reward is not None else True

    # ------------------------------------------------------------------
    # Scenes

    def set_scene(self, scene):
        target = _coerce(Scene, scene)
        s = self.state
        if target is None:
            return self._reject("set_scene", f"unknown scene '{scene}'")
        if not s.is_unlocked(target):
            return self._reject("set_scene", f"{target.value} is locked")
        if target == s.current_scene:
            return self._reject("set_scene", f"already in {target.value}")
        s.current_scene = target
        s.last_active = self.clock()
        self._commit("set_scene")
        return True

    def unlock_scene(self, scene, cost=None):
        target = _coerce(Scene, scene)
        s = self.state
        if target is None:
            return self._reject("unlock_scene", f"unknown scene '{scene}'")
        if s.is_unlocked(target):
            return self._reject("unlock_scene", f"{target.value} already unlocked")
        if cost is None:
            cost = SCENE_UNLOCK_COSTS[target.value]
        if cost < 0 or s.coins < cost:
            return self._reject("unlock_scene", f"{target.value} costs {cost}, have {s.coins}")
        s.coins -= cost
        s.unlocked_scenes[target] = True
        s.last_active = self.clock()
        self._commit("unlock_scene")
        return True

    # ------------------------------------------------------------------

    def reset_stats(self):
        """Back to a brand new pet. The state object itself is kept so handles stay valid."""
        fresh = GameState.fresh(self.clock())
        for f in dataclasses.fields(GameState):
            setattr(self.state, f.name, getattr(fresh, f.name))
        logger.info("Stats reset to defaults.")
        self._commit("reset_stats")
        return True
