import random

from conftest import FakeClock

from hashpals.constants import MINUTE_MS
from hashpals.database import DatabaseManager, MemoryStore
from hashpals.pet_entity import Pet


def test_subscribers_hear_applied_actions_only(pet):
    seen = []
    pet.subscribe(lambda action, state: seen.append((action, state.coins)))
    pet.play()
    pet.upgrade_mining_speed()  # 100 coins is enough
    pet.upgrade_mining_speed()  # 0 coins left, rejected
    assert seen == [('play', 100), ('upgrade_mining_speed', 0)]


def test_unsubscribe(pet):
    seen = []
    unsubscribe = pet.subscribe(lambda action, state: seen.append(action))
    pet.play()
    unsubscribe()
    pet.play()
    assert seen == ['play']


def test_store_saved_after_each_applied_action(pet, store):
    pet.feed()
    pet.play()
    assert store.saves == 2
    pet.use_inventory_item('missing')
    assert store.saves == 2
    assert '"coins": 100' in store.blob


def test_failed_save_keeps_memory_state(tmp_path, clock):
    db = DatabaseManager(str(tmp_path / "pet.db"))
    pet = Pet(store=db, clock=clock)
    db.close()
    # The write fails, but the action still applies in memory
    assert pet.play()
    assert pet.state.happiness == 85.0


def test_reset_keeps_the_same_state_object(pet, clock):
    handle = pet.state
    pet.state.coins = 9999
    pet.state.mining_speed = 4
    pet.state.inventory.clear()
    pet.buy_item('1')
    clock.advance(5000)

    assert pet.reset_stats()
    assert pet.state is handle
    assert handle.coins == 100
    assert handle.mining_speed == 1
    assert handle.inventory == []
    assert handle.last_active == clock.now


def test_snapshot_is_independent(pet):
    snap = pet.snapshot()
    pet.play()
    assert snap.happiness == 70.0
    assert pet.state.happiness == 85.0


def test_load_from_empty_store_starts_fresh(clock):
    pet = Pet.load(MemoryStore(), clock=clock)
    assert pet.state.coins == 100
    assert pet.state.last_active == clock.now


def test_random_play_keeps_state_valid():
    clock = FakeClock()
    rng = random.Random(42)
    pet = Pet(store=MemoryStore(), clock=clock, rng=random.Random(7))
    actions = [
        pet.feed, pet.play, pet.pet, pet.start_mining, pet.stop_mining, pet.mine_tick,
        pet.upgrade_mining_speed, pet.claim_daily_reward, pet.use_ai_credit,
        pet.update_happiness, pet.update_mining_energy,
        lambda: pet.buy_item(rng.choice(['1', '2', '3', '5', '10', 'c1'])),
        lambda: pet.use_inventory_item(rng.choice(['1', '2', '5'])),
        lambda: pet.equip_accessory(rng.choice(['3', '10'])),
        lambda: pet.unlock_scene(rng.choice(['park', 'town'])),
        lambda: pet.set_scene(rng.choice(['warehouse', 'park', 'town'])),
    ]
    for _ in range(2000):
        clock.advance(rng.randint(0, 30 * MINUTE_MS))
        rng.choice(actions)()

        s = pet.state
        assert 0 <= s.happiness <= 100
        assert 0 <= s.energy <= 100
        assert s.coins >= 0
        assert s.ai_credits >= 0
        assert 1 <= s.mining_speed <= 5
        assert s.is_unlocked(s.current_scene)
        assert all(item.quantity > 0 for item in s.inventory)
        for slot in {acc.type for acc in s.accessories}:
            assert sum(1 for acc in s.accessories if acc.type == slot and acc.equipped) <= 1
        assert 0 <= s.feeding.remaining_allowance <= s.feeding.daily_allowance
