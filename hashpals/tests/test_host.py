import os
import random

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame  # noqa: E402

from conftest import StubRandom  # noqa: E402

from hashpals.database import MemoryStore  # noqa: E402
from hashpals.main import DECAY_POLL_EVENT, MINING_TICK_EVENT, GameHost  # noqa: E402
from hashpals.models import AccessoryType, Scene  # noqa: E402
from hashpals.pet_entity import Pet  # noqa: E402


def press(host, key):
    host.handle_event(pygame.event.Event(pygame.KEYDOWN, key=key))


@pytest.fixture
def host(clock):
    pet = Pet(store=MemoryStore(), clock=clock, rng=random.Random(3))
    game = GameHost(pet=pet)
    yield game
    game.shutdown()
    pygame.quit()


def test_mining_timer_follows_state(host):
    assert host.mining_timer_ms == 0
    press(host, pygame.K_m)
    assert host.pet.state.is_mining
    assert host.mining_timer_ms == 5000

    press(host, pygame.K_u)
    assert host.pet.state.mining_speed == 2
    assert host.mining_timer_ms == 2500

    press(host, pygame.K_m)
    assert host.pet.state.is_mining is False
    assert host.mining_timer_ms == 0


def test_mining_tick_event_adds_coins(host):
    host.pet.rng = StubRandom(amount=3)
    press(host, pygame.K_m)
    host.handle_event(pygame.event.Event(MINING_TICK_EVENT))
    assert host.pet.state.coins == 103
    assert host.message_log.messages[-1] == "Mined 3 coins!"


def test_tired_mining_tick_disarms_timer(host):
    press(host, pygame.K_m)
    host.pet.state.energy = 2.0
    host.handle_event(pygame.event.Event(MINING_TICK_EVENT))
    assert host.pet.state.is_mining is False
    assert host.mining_timer_ms == 0


def test_decay_poll_applies_decay(host, clock):
    clock.advance(3 * 60 * 60 * 1000)
    host.handle_event(pygame.event.Event(DECAY_POLL_EVENT))
    assert abs(host.pet.state.happiness - 20.0) <= 0.01


def test_feed_falls_back_to_inventory_food(host):
    for _ in range(3):
        press(host, pygame.K_f)
    assert host.pet.state.feeding.remaining_allowance == 0

    host.pet.buy_item('5')
    host.pet.state.energy = 50.0
    press(host, pygame.K_f)
    assert host.pet.state.energy == 70.0
    assert host.pet.state.find_inventory_item('5') is None
    assert "Energy Treat" in host.message_log.messages[-1]


def test_scene_key_unlocks_then_moves(host):
    host.pet.state.coins = 300
    press(host, pygame.K_2)
    assert host.pet.state.is_unlocked(Scene.PARK)
    assert host.pet.state.current_scene == Scene.WAREHOUSE
    press(host, pygame.K_2)
    assert host.pet.state.current_scene == Scene.PARK


def test_talk_spends_credit(host):
    press(host, pygame.K_a)
    assert host.pet.state.ai_credits == 4


def test_escape_and_quit_stop_the_loop(host):
    press(host, pygame.K_ESCAPE)
    assert host.running is False
    host.running = True
    host.handle_event(pygame.event.Event(pygame.QUIT))
    assert host.running is False


def test_draw_renders_every_screen_state(host):
    host.draw()
    press(host, pygame.K_m)
    host.message_log.add_message("hello")
    host.draw()


def test_message_log_keeps_latest(host):
    for i in range(10):
        host.message_log.add_message(f"msg {i}")
    assert host.message_log.messages == ["msg 6", "msg 7", "msg 8", "msg 9"]


def test_host_persists_to_database(tmp_path):
    path = str(tmp_path / "host.db")
    first = GameHost(db_path=path)
    press(first, pygame.K_p)
    happiness = first.pet.state.happiness
    first.shutdown()

    second = GameHost(db_path=path)
    assert second.pet.state.happiness == happiness
    second.shutdown()
    pygame.quit()


def test_buy_key_buys_cheapest_food(host):
    press(host, pygame.K_b)
    treat = host.pet.state.find_inventory_item('5')
    assert treat.quantity == 1
    assert host.pet.state.coins == 70

    host.pet.state.coins = 10
    press(host, pygame.K_b)
    assert treat.quantity == 1
    assert host.message_log.messages[-1] == "Energy Treat costs 30 coins."


def test_equip_key_cycles_accessories(host):
    press(host, pygame.K_e)
    assert host.message_log.messages[-1] == "No accessories yet. Visit the shop!"

    host.pet.state.coins = 1000
    host.pet.buy_item('3')   # Dogecoin Hat
    host.pet.buy_item('9')   # Miner Hat
    host.pet.buy_item('10')  # Cool Sunglasses
    state = host.pet.state

    press(host, pygame.K_e)
    assert state.equipped_accessory(AccessoryType.HAT).id == '3'
    press(host, pygame.K_e)
    assert state.equipped_accessory(AccessoryType.HAT).id == '9'
    press(host, pygame.K_e)
    assert state.equipped_accessory(AccessoryType.GLASSES).id == '10'
    assert state.equipped_accessory(AccessoryType.HAT).id == '9'
    press(host, pygame.K_e)
    assert state.equipped_accessory(AccessoryType.HAT).id == '3'

    press(host, pygame.K_x)
    assert not any(acc.equipped for acc in state.accessories)
