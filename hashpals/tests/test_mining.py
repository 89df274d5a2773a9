from conftest import StubRandom


def test_start_mining_needs_twenty_energy(pet, clock):
    pet.state.energy = 19.99
    assert pet.start_mining() is False
    assert pet.state.is_mining is False

    pet.state.energy = 20.0
    assert pet.start_mining() is True
    assert pet.state.is_mining is True
    assert pet.state.last_energy_update == clock.now


def test_start_mining_twice_keeps_the_energy_clock(pet, clock):
    pet.start_mining()
    started = pet.state.last_energy_update
    clock.advance(5000)
    assert pet.start_mining() is False
    assert pet.state.last_energy_update == started


def test_stop_mining(pet):
    assert pet.stop_mining() is False
    pet.start_mining()
    assert pet.stop_mining() is True
    assert pet.state.is_mining is False


def test_mine_tick_scales_with_speed(pet):
    pet.rng = StubRandom(amount=2)
    pet.state.mining_speed = 3
    pet.start_mining()
    assert pet.mine_tick() == 6
    assert pet.state.coins == 106


def test_mine_tick_when_tired_stops_mining(pet):
    pet.start_mining()
    pet.state.energy = 4.5
    assert pet.mine_tick() == 0
    assert pet.state.is_mining is False
    assert pet.state.coins == 100


def test_mine_tick_while_idle_is_ignored(pet):
    assert pet.mine_tick() is None
    assert pet.state.coins == 100


def test_mining_interval_shrinks_with_speed(pet):
    assert pet.mining_interval_ms() == 5000
    pet.state.mining_speed = 5
    assert pet.mining_interval_ms() == 1000


def test_upgrade_doubles_cost_and_caps_at_five(pet):
    pet.state.coins = 10000
    assert pet.upgrade_mining_speed()
    assert pet.state.mining_speed == 2
    assert pet.state.mining_upgrade_cost == 200
    assert pet.state.coins == 9900

    for _ in range(3):
        assert pet.upgrade_mining_speed()
    assert pet.state.mining_speed == 5
    assert pet.state.mining_upgrade_cost == 1600
    assert pet.state.coins == 10000 - 100 - 200 - 400 - 800

    assert pet.upgrade_mining_speed() is False
    assert pet.state.mining_speed == 5
    assert pet.state.coins == 8500


def test_upgrade_needs_enough_coins(pet):
    pet.state.coins = 99
    assert pet.upgrade_mining_speed() is False
    assert pet.state.mining_speed == 1
    assert pet.state.mining_upgrade_cost == 100
