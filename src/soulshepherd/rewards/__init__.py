from .calculator import RewardCalculator, SessionResult, round_half_up

__all__ = ["RewardCalculator", "SessionResult", "round_half_up"]
