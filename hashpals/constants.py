import os

# --- GLOBAL CONFIGURATION ---
SCREEN_WIDTH = 480
SCREEN_HEIGHT = 320
FPS = 30
DB_FILE = os.getenv("HASHPALS_DB_FILE", "hashpals.db")
LOG_LEVEL = os.getenv("HASHPALS_LOG_LEVEL", "INFO").upper()
# How often the host asks the engine to apply decay (ms)
DECAY_POLL_INTERVAL_MS = int(os.getenv("HASHPALS_DECAY_POLL_MS", "30000"))

# --- STARTING STATS ---
DEFAULT_COINS = 100
DEFAULT_HAPPINESS = 70.0
DEFAULT_ENERGY = 80.0
DEFAULT_AI_CREDITS = 5
DEFAULT_MINING_SPEED = 1
DEFAULT_MINING_UPGRADE_COST = 100
DEFAULT_DAILY_FEEDS = 3

STAT_MIN = 0.0
STAT_MAX = 100.0

# --- DECAY (linear, full depletion over the window) ---
MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
HAPPINESS_DECAY_WINDOW_MS = 6 * HOUR_MS
MINING_ENERGY_DECAY_WINDOW_MS = 8 * HOUR_MS
HAPPINESS_DECAY_PER_MS = STAT_MAX / HAPPINESS_DECAY_WINDOW_MS
MINING_ENERGY_DECAY_PER_MS = STAT_MAX / MINING_ENERGY_DECAY_WINDOW_MS
DECAY_DEBOUNCE_MS = MINUTE_MS

# --- ACTION EFFECTS ---
FEED_ENERGY = 20
FEED_HAPPINESS = 5
PLAY_HAPPINESS = 15
PLAY_ENERGY_COST = 10
PET_HAPPINESS = 5
PET_COIN_CHANCE = 0.4
PET_COIN_MIN = 1
PET_COIN_MAX = 5

# --- MINING ---
MINING_MIN_ENERGY = 20      # needed to start
MINING_STOP_ENERGY = 5      # a tick below this stops mining
MINING_COIN_MIN = 1
MINING_COIN_MAX = 3         # multiplied by mining speed
MINING_BASE_INTERVAL_MS = 5000
MAX_MINING_SPEED = 5

# --- SCENES (unlock price in coins) ---
SCENE_UNLOCK_COSTS = {
    'warehouse': 0,
    'park': 200,
    'town': 500,
    'city': 1000,
}

# --- DAILY REWARDS (one 7-day cycle) ---
REWARD_CYCLE_DAYS = 7
DAILY_REWARD_SCHEDULE = [
    {'day': 1, 'type': 'coins', 'value': 50},
    {'day': 2, 'type': 'coins', 'value': 100},
    {'day': 3, 'type': 'item', 'value': 1, 'item_id': 'premium_food'},
    {'day': 4, 'type': 'coins', 'value': 150},
    {'day': 5, 'type': 'coins', 'value': 200},
    {'day': 6, 'type': 'item', 'value': 1, 'item_id': 'super_toy'},
    {'day': 7, 'type': 'coins', 'value': 500},
]

# Items that only come from daily rewards
REWARD_ITEMS = {
    'premium_food': {'id': 'premium_food', 'name': 'Premium Food', 'type': 'food',
                     'description': 'High quality food that boosts energy significantly',
                     'energy_boost': 40, 'happiness_boost': 10},
    'super_toy': {'id': 'super_toy', 'name': 'Super Toy', 'type': 'toy',
                  'description': 'A fun toy that makes your pet happy',
                  'energy_boost': 0, 'happiness_boost': 30},
}

# --- SHOP (Prices in Coins) ---
SHOP_ITEMS = {
    'food': [
        {'id': '1', 'name': 'Premium Kibble', 'cost': 50, 'energy_boost': 40, 'happiness_boost': 10,
         'description': 'High quality food that boosts energy significantly'},
        {'id': '5', 'name': 'Energy Treat', 'cost': 30, 'energy_boost': 20,
         'description': 'Special treat that quickly restores energy'},
        {'id': '7', 'name': 'Luxury Feast', 'cost': 75, 'energy_boost': 30, 'happiness_boost': 25,
         'description': 'Gourmet meal for your pet'},
    ],
    'toy': [
        {'id': '2', 'name': 'Squeaky Bone', 'cost': 80, 'happiness_boost': 30,
         'description': 'A fun toy that makes your pet happy'},
        {'id': '6', 'name': 'Interactive Ball', 'cost': 60, 'happiness_boost': 25,
         'description': 'A bouncy ball to play with'},
        {'id': '8', 'name': 'Mining Pickaxe', 'cost': 100, 'happiness_boost': 35,
         'description': 'A toy that simulates mining'},
    ],
    'accessory': [
        {'id': '3', 'name': 'Dogecoin Hat', 'cost': 150, 'accessory_type': 'hat',
         'description': 'Stylish hat for your crypto-loving pet'},
        {'id': '9', 'name': 'Miner Hat', 'cost': 200, 'accessory_type': 'hat',
         'description': 'A hat with a headlamp for mining in style'},
        {'id': '10', 'name': 'Cool Sunglasses', 'cost': 120, 'accessory_type': 'glasses',
         'description': 'Stylish sunglasses for your pet'},
        {'id': '11', 'name': 'Crypto Visor', 'cost': 180, 'accessory_type': 'glasses',
         'description': 'Futuristic glasses for monitoring crypto prices'},
        {'id': '12', 'name': 'Diamond Collar', 'cost': 250, 'accessory_type': 'collar',
         'description': 'Luxurious collar with diamond studs'},
        {'id': '13', 'name': 'Bitcoin Collar', 'cost': 220, 'accessory_type': 'collar',
         'description': 'A collar with Bitcoin symbols'},
    ],
    'credit': [
        {'id': 'c1', 'name': 'Basic Credit Pack', 'cost': 50, 'credit_amount': 5,
         'description': '5 AI conversation credits for your pet'},
        {'id': 'c2', 'name': 'Premium Credit Pack', 'cost': 120, 'credit_amount': 15,
         'description': '15 AI conversation credits for your pet'},
        {'id': 'c3', 'name': 'Ultimate Credit Pack', 'cost': 350, 'credit_amount': 50,
         'description': '50 AI conversation credits for your pet'},
    ],
}

# --- RETRO UI PALETTE ---
COLOR_BG = (40, 44, 52)
COLOR_UI_BAR_BG = (62, 68, 81)
COLOR_HAPPY = (229, 192, 123)
COLOR_ENERGY = (97, 175, 239)
COLOR_COINS = (255, 215, 0)
COLOR_TEXT = (171, 178, 191)
COLOR_MINING = (152, 195, 121)

# Scene backdrop tints
SCENE_COLORS = {
    'warehouse': (52, 48, 44),
    'park': (40, 70, 48),
    'town': (70, 56, 44),
    'city': (36, 42, 70),
}
