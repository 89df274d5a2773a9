"""
HashPals - pygame front end

A small host around the game state engine. It owns the two timers the
engine relies on (decay polling and mining ticks), maps keys to actions
and draws a compact status screen.
"""

import logging
import sys
from typing import Tuple

import pygame

from hashpals.constants import (
    COLOR_BG, COLOR_COINS, COLOR_ENERGY, COLOR_HAPPY, COLOR_MINING, COLOR_TEXT, COLOR_UI_BAR_BG,
    DB_FILE, DECAY_POLL_INTERVAL_MS, FPS, LOG_LEVEL, SCENE_COLORS, SCENE_UNLOCK_COSTS,
    SCREEN_HEIGHT, SCREEN_WIDTH,
)
from hashpals.database import DatabaseManager
from hashpals.game_utils import format_number
from hashpals.models import ItemType, RewardType, Scene
from hashpals.pet_entity import Pet
from hashpals.shop import items_of_type

logger = logging.getLogger(__name__)

DECAY_POLL_EVENT = pygame.USEREVENT + 1
MINING_TICK_EVENT = pygame.USEREVENT + 2

SCENE_KEYS = {
    pygame.K_1: Scene.WAREHOUSE,
    pygame.K_2: Scene.PARK,
    pygame.K_3: Scene.TOWN,
    pygame.K_4: Scene.CITY,
}


class StatBar:
    """Flat 0-100 stat bar."""

    def __init__(self, x: int, y: int, width: int, height: int,
                 label: str, color: Tuple[int, int, int]):
        self.rect = pygame.Rect(x, y, width, height)
        self.label = label
        self.color = color

    def draw(self, surface: pygame.Surface, font: pygame.font.Font, value: float):
        value = max(0, min(100, value))
        label_surface = font.render(f"{self.label} {int(value)}%", True, COLOR_TEXT)
        surface.blit(label_surface, (self.rect.x, self.rect.y - 16))
        pygame.draw.rect(surface, COLOR_UI_BAR_BG, self.rect, border_radius=4)
        fill_width = int((value / 100) * self.rect.width)
        if fill_width > 0:
            fill_rect = pygame.Rect(self.rect.x, self.rect.y, fill_width, self.rect.height)
            pygame.draw.rect(surface, self.color, fill_rect, border_radius=4)


class MessageLog:
    """Keeps the last few action messages for the status screen."""

    def __init__(self, max_messages: int = 4):
        self.messages = []
        self.max_messages = max_messages

    def add_message(self, text: str):
        logger.info(text)
        self.messages.append(text)
        del self.messages[:-self.max_messages]

    def draw(self, surface: pygame.Surface, font: pygame.font.Font, x: int, y: int):
        for i, text in enumerate(self.messages):
            surface.blit(font.render(text, True, COLOR_TEXT), (x, y + i * 18))


class GameHost:
    """Drives a Pet from pygame events and timers."""

    def __init__(self, db_path=None, pet=None):
        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption("HashPals")
        self.clock = pygame.time.Clock()

        self.font_medium = pygame.font.Font(None, 26)
        self.font_small = pygame.font.Font(None, 20)

        self.db = None
        if pet is None:
            self.db = DatabaseManager(db_path or DB_FILE)
            pet = Pet.load(self.db)
        self.pet = pet

        self.message_log = MessageLog()
        self.happiness_bar = StatBar(20, 40, 200, 16, "Happy", COLOR_HAPPY)
        self.energy_bar = StatBar(260, 40, 200, 16, "Energy", COLOR_ENERGY)

        self.running = True
        self.mining_timer_ms = 0
        self.pet.subscribe(self._on_state_changed)

        pygame.time.set_timer(DECAY_POLL_EVENT, DECAY_POLL_INTERVAL_MS)
        # Catch up on decay from the time the game was closed
        self.refresh_decay()
        self._sync_mining_timer()

    # ===== Timers =====

    def refresh_decay(self):
        self.pet.update_happiness()
        self.pet.update_mining_energy()

    def _sync_mining_timer(self):
        """One mining timer at most; re-armed when the speed changes."""
        wanted = self.pet.mining_interval_ms() if self.pet.state.is_mining else 0
        if wanted != self.mining_timer_ms:
            pygame.time.set_timer(MINING_TICK_EVENT, wanted)
            self.mining_timer_ms = wanted

    def _on_state_changed(self, action, state):
        if action == "update_mining_energy" and not state.is_mining:
            self.message_log.add_message("Too tired to mine. Mining stopped.")
        self._sync_mining_timer()

    # ===== Event Handlers =====

    def handle_feed(self):
        if self.pet.feed():
            remaining = self.pet.state.feeding.remaining_allowance
            self.message_log.add_message(f"Yum! ({remaining} free meals left today)")
            return
        food = next((i for i in self.pet.state.inventory if i.type == ItemType.FOOD), None)
        if food is not None and self.pet.use_inventory_item(food.id):
            self.message_log.add_message(f"No free meals left, served {food.name}.")
        else:
            self.message_log.add_message("No free meals left today. Buy food in the shop!")

    def handle_pet(self):
        coins = self.pet.pet()
        if coins:
            self.message_log.add_message(f"Found {coins} coins!")

    def handle_mining_toggle(self):
        if self.pet.state.is_mining:
            self.pet.stop_mining()
            self.message_log.add_message("Mining stopped.")
        elif self.pet.start_mining():
            self.message_log.add_message(f"Mining at speed x{self.pet.state.mining_speed}.")
        else:
            self.message_log.add_message("Too tired to mine.")

    def handle_mining_tick(self):
        coins = self.pet.mine_tick()
        if coins:
            self.message_log.add_message(f"Mined {coins} coins!")
        elif coins == 0:
            self.message_log.add_message("Too tired to mine. Mining stopped.")

    def handle_upgrade(self):
        cost = self.pet.state.mining_upgrade_cost
        if self.pet.upgrade_mining_speed():
            self.message_log.add_message(f"Mining speed is now x{self.pet.state.mining_speed}.")
        else:
            self.message_log.add_message(f"Upgrade needs {cost} coins (max speed 5).")

    def handle_claim(self):
        reward = self.pet.claim_daily_reward()
        if not reward:
            self.message_log.add_message("Already claimed today.")
        elif reward is True:
            self.message_log.add_message("Daily reward claimed.")
        elif reward.reward.type == RewardType.COINS:
            self.message_log.add_message(f"Day {reward.day}: +{reward.reward.value} coins!")
        else:
            self.message_log.add_message(f"Day {reward.day}: got {reward.reward.item_id}!")

    def handle_talk(self):
        if self.pet.use_ai_credit():
            self.message_log.add_message("Woof! Much wow.")
        else:
            self.message_log.add_message("I need AI credits to talk!")

    def handle_buy_food(self):
        cheapest = min(items_of_type(ItemType.FOOD), key=lambda item: item.cost)
        if self.pet.buy_item(cheapest):
            self.message_log.add_message(f"Bought {cheapest.name} for {cheapest.cost} coins.")
        else:
            self.message_log.add_message(f"{cheapest.name} costs {cheapest.cost} coins.")

    def handle_equip_next(self):
        """Wears the next owned accessory, cycling through them in purchase order."""
        owned = []
        for acc in self.pet.state.accessories:
            if all(acc.id != other.id for other in owned):
                owned.append(acc)
        if not owned:
            self.message_log.add_message("No accessories yet. Visit the shop!")
            return
        worn = [i for i, acc in enumerate(owned) if acc.equipped]
        start = worn[-1] + 1 if worn else 0
        for offset in range(len(owned)):
            acc = owned[(start + offset) % len(owned)]
            if not acc.equipped and self.pet.equip_accessory(acc.id):
                self.message_log.add_message(f"Wearing {acc.name}.")
                return
        self.message_log.add_message("Already wearing everything.")

    def handle_unequip_all(self):
        slots = {acc.type for acc in self.pet.state.accessories if acc.equipped}
        for slot in slots:
            self.pet.unequip_accessory(slot)
        if slots:
            self.message_log.add_message("Took off all accessories.")

    def handle_scene(self, scene: Scene):
        if self.pet.state.is_unlocked(scene):
            if self.pet.set_scene(scene):
                self.message_log.add_message(f"Moved to the {scene.value}.")
        elif self.pet.unlock_scene(scene):
            self.message_log.add_message(f"Unlocked the {scene.value}!")
        else:
            self.message_log.add_message(f"The {scene.value} costs {SCENE_UNLOCK_COSTS[scene.value]} coins.")

    def handle_key(self, key):
        if key == pygame.K_ESCAPE:
            self.running = False
        elif key == pygame.K_f:
            self.handle_feed()
        elif key == pygame.K_p:
            self.pet.play()
        elif key == pygame.K_t:
            self.handle_pet()
        elif key == pygame.K_m:
            self.handle_mining_toggle()
        elif key == pygame.K_u:
            self.handle_upgrade()
        elif key == pygame.K_r:
            self.handle_claim()
        elif key == pygame.K_a:
            self.handle_talk()
        elif key == pygame.K_b:
            self.handle_buy_food()
        elif key == pygame.K_e:
            self.handle_equip_next()
        elif key == pygame.K_x:
            self.handle_unequip_all()
        elif key in SCENE_KEYS:
            self.handle_scene(SCENE_KEYS[key])

    def handle_event(self, event):
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == DECAY_POLL_EVENT:
            self.refresh_decay()
        elif event.type == MINING_TICK_EVENT:
            self.handle_mining_tick()
        elif event.type == pygame.WINDOWFOCUSGAINED:
            # Resumed from background
            self.refresh_decay()
        elif event.type == pygame.KEYDOWN:
            self.handle_key(event.key)

    # ===== Drawing =====

    def draw(self):
        state = self.pet.state
        self.screen.fill(SCENE_COLORS.get(state.current_scene.value, COLOR_BG))

        self.happiness_bar.draw(self.screen, self.font_small, state.happiness)
        self.energy_bar.draw(self.screen, self.font_small, state.energy)

        coins_surface = self.font_medium.render(f"Coins {format_number(state.coins)}", True, COLOR_COINS)
        self.screen.blit(coins_surface, (20, 70))
        credits_surface = self.font_small.render(f"AI credits {state.ai_credits}", True, COLOR_TEXT)
        self.screen.blit(credits_surface, (260, 74))

        info = (f"{state.current_scene.value.title()}  |  mood: {state.mood().value}  |  "
                f"meals left: {state.feeding.remaining_allowance}  |  "
                f"streak: {state.daily_rewards.current_streak}")
        self.screen.blit(self.font_small.render(info, True, COLOR_TEXT), (20, 100))

        if state.is_mining:
            mining_surface = self.font_small.render(f"Mining x{state.mining_speed}", True, COLOR_MINING)
            self.screen.blit(mining_surface, (20, 124))

        self.message_log.draw(self.screen, self.font_small, 20, 160)
        help_text = "F feed P play T pet M mine U upgrade R reward A talk B buy E/X wear 1-4"
        self.screen.blit(self.font_small.render(help_text, True, COLOR_TEXT), (10, SCREEN_HEIGHT - 22))

    # ===== Main Loop =====

    def step(self):
        for event in pygame.event.get():
            self.handle_event(event)
        self.draw()
        pygame.display.flip()
        self.clock.tick(FPS)

    def run(self):
        while self.running:
            self.step()
        self.shutdown()

    def shutdown(self):
        pygame.time.set_timer(DECAY_POLL_EVENT, 0)
        pygame.time.set_timer(MINING_TICK_EVENT, 0)
        self.mining_timer_ms = 0
        if self.db is not None:
            self.db.save(self.pet.state)
            self.db.close()
            self.db = None


def main():
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting HashPals...")
    host = GameHost()
    try:
        host.run()
    except Exception:
        logger.exception("HashPals crashed")
        host.shutdown()
        return 1
    finally:
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
