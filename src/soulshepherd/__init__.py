"""Soul Shepherd game state and progression engine.

The package owns the persisted game state of the Soul Shepherd focus timer
and the numeric progression model that drives it:

- ``soulshepherd.config``: formula table and boss catalog
- ``soulshepherd.progression``: leveling, boss combat, idle income, stat economy
- ``soulshepherd.rewards``: reward calculation for finished focus sessions
- ``soulshepherd.state``: validated, repaired, retrying state store
"""

__version__ = "1.0.0"
