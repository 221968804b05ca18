"""Shared application constants.

Centralizes the rank ladder and default reward values so the rule code and
configuration agree on one definition.
"""

# Rank ladder, lowest first
RANKS = ("F", "E", "D", "C", "B", "A", "S")

RANK_LABELS = {
    "F": "Foundation",
    "E": "Emerging",
    "D": "Developing",
    "C": "Competent",
    "B": "Breakthrough",
    "A": "Advanced",
    "S": "Supreme",
}

# XP granted for clearing each tier; settings.tier_xp overrides it
DEFAULT_TIER_XP = {
    "F": 25,
    "E": 50,
    "D": 75,
    "C": 100,
    "B": 150,
    "A": 200,
    "S": 300,
}

# A challenge splits its XP across at most this many domains
MAX_CHALLENGE_DOMAINS = 3

# Domain percentage shares must add up to this
XP_PERCENT_TOTAL = 100

# Submitter roles that skip the resubmission cooldown and auto-approve
PRIVILEGED_ROLES = ("SYSTEM_ADMIN", "GYM_ADMIN", "COACH")
