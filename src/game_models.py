from pydantic import BaseModel, Field
from typing import List, Optional, Tuple

import board_engine

# --- Pydantic Models for game configuration and state ---

class GameSettings(BaseModel):
    """Settings for a game session."""
    win_tile: int = Field(
        default=board_engine.WIN_TILE,
        gt=0,
        description="The tile value to achieve for winning the game (e.g., 2048)."
    )
    four_probability: float = Field(
        default=board_engine.FOUR_PROBABILITY,
        ge=0.0,
        le=1.0,
        description="Probability that a newly spawned tile is a 4 instead of a 2."
    )
    initial_tiles: int = Field(
        default=2,
        ge=0,
        le=board_engine.CELL_COUNT,
        description="Number of random tiles placed on a fresh board."
    )
    seed: Optional[int] = Field(
        default=None,
        description="Seed for the session's random generator; None draws from system entropy."
    )

class GameStateData(BaseModel):
    """Represents the complete state of a game session."""
    board: List[List[int]] = Field(..., description="The 4 x 4 game board, row 0 first.")
    score: int = Field(..., ge=0, description="Current score of the game.")
    high_score: int = Field(default=0, ge=0, description="Best score seen by this session.")
    progress: board_engine.GameProgressState = Field(
        ...,
        description="Current progress state of the game (IN_PROGRESS, GAME_WON, GAME_OVER)."
    )
    has_won: bool = Field(
        default=False,
        description="True once the win tile has been reached; the win is only signalled once."
    )
    win_tile: int = Field(default=board_engine.WIN_TILE, gt=0, description="The tile value required to win.")

class TurnOutcome(BaseModel):
    """Result of one turn, for the caller to drive animation and scoring."""
    accepted: bool = Field(
        ...,
        description="True if the move changed the board, False if the input was rejected."
    )
    moves: List[board_engine.MoveRecord] = Field(
        default_factory=list,
        description="(source, target) coordinates of every tile that slid or merged."
    )
    score_delta: int = Field(default=0, ge=0, description="Score gained by merges this turn.")
    spawned: Optional[Tuple[int, int]] = Field(
        default=None,
        description="Coordinate of the tile spawned after the move, if any."
    )
    progress: board_engine.GameProgressState = Field(
        ...,
        description="Progress state after the turn."
    )
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was rejected, game ended, or was won."
    )
