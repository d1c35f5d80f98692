"""Constants for the archery tournament manager."""

# Arrow values in the order they appear on a scoresheet
ARROW_VALUES = ['X', 10, 9, 8, 7, 6, 5, 'M']

ARROWS_PER_SET = 10

# Set points
SET_WIN_POINTS = 2
SET_TIE_POINTS = 1
SET_LOSS_POINTS = 0

# A match is decided once a side reaches this many set points
MATCH_WIN_SET_POINTS = 5

# Four sets at 4-4 forces a shoot-off
SHOOT_OFF_AFTER_SETS = 4
SHOOT_OFF_TIED_POINTS = 4

# Ranking match points
MATCH_WIN_POINTS = 2
MATCH_TIE_POINTS = 1
MATCH_LOSS_POINTS = 0

MIN_TEAMS = 7
MAX_TEAMS = 10
PLAYOFF_SEEDS = 4

# Fixed playoff match ids
SEMIFINAL_1_ID = 101
SEMIFINAL_2_ID = 102
GOLD_MATCH_ID = 201
BRONZE_MATCH_ID = 202

MATCH_LABELS = {
    SEMIFINAL_1_ID: 'Semifinal 1',
    SEMIFINAL_2_ID: 'Semifinal 2',
    GOLD_MATCH_ID: 'Gold Medal Match',
    BRONZE_MATCH_ID: 'Bronze Medal Match',
}

# Palette cycled when registering new teams
TEAM_COLORS = [
    '#ef4444',
    '#f59e0b',
    '#10b981',
    '#3b82f6',
    '#8b5cf6',
    '#ec4899',
    '#06b6d4',
    '#84cc16',
    '#f97316',
    '#6366f1',
]

# Store keys
TOURNAMENT_STATE_KEY = 'tournamentState'
REGISTERED_TEAMS_KEY = 'registeredTeams'

BACKUP_VERSION = '1.0'
