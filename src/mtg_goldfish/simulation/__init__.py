"""Goldfish simulation: games, turn-N analysis, aggregation and land search."""

from .aggregate import DiagnosisStats, GameStats, summarize_diagnoses, summarize_games
from .analyze import TurnDiagnosis, run_game_to_turn
from .combo import REANIMATOR_COMBO, BoardView, Combo, ComboPiece, ComboRequirements
from .engine import GameResult, SimulationConfig, run_game
from .optimize import LandOptimizer, LandType, OptimizationResult
from .runner import analyze_games, run_trials, simulate_games

__all__ = [
    "REANIMATOR_COMBO",
    "BoardView",
    "Combo",
    "ComboPiece",
    "ComboRequirements",
    "DiagnosisStats",
    "GameResult",
    "GameStats",
    "LandOptimizer",
    "LandType",
    "OptimizationResult",
    "SimulationConfig",
    "TurnDiagnosis",
    "analyze_games",
    "run_game",
    "run_game_to_turn",
    "run_trials",
    "simulate_games",
    "summarize_diagnoses",
    "summarize_games",
]
