"""Constants and mappings for the fantasy points engine."""

# Position labels seen in rosters, config files and stats feeds -> canonical value
POSITION_ALIASES = {
    'goalkeeper': 'Goalkeeper',
    'gk': 'Goalkeeper',
    'g': 'Goalkeeper',
    'defender': 'Defender',
    'def': 'Defender',
    'd': 'Defender',
    'midfielder': 'Midfielder',
    'mid': 'Midfielder',
    'm': 'Midfielder',
    'forward': 'Forward',
    'attacker': 'Forward',
    'fwd': 'Forward',
    'att': 'Forward',
    'st': 'Forward',
    'f': 'Forward',
}

# Breakdown categories, in presentation order
CATEGORY_ORDER = [
    'minutes',
    'goals',
    'assists',
    'clean_sheet',
    'goals_conceded',
    'yellow_cards',
    'red_cards',
    'penalties_saved',
    'penalties_missed',
]

# Stat columns of a match-statistics row and their defaults
STAT_DEFAULTS = {
    'minutes_played': 0,
    'goals': 0,
    'assists': 0,
    'clean_sheet': False,
    'goals_conceded': 0,
    'yellow_cards': 0,
    'red_cards': 0,
    'penalties_saved': 0,
    'penalties_missed': 0,
}

# API-Football `games.position` codes that can earn a clean sheet
CLEAN_SHEET_API_POSITIONS = ('G', 'D')

MINUTES_PER_15 = 'per_15_minutes'
MINUTES_FLAT = 'flat_threshold'

TIE_BREAK_INPUT_ORDER = 'input_order'
TIE_BREAK_PLAYER_ID = 'player_id'
