# game_session.py
# Drives one game on top of the stateless board engine: one call per user input,
# strictly serialized by the caller.

from typing import Optional
import logging
import random

import board_engine
from board_engine import DIRECTION, GameProgressState
from game_models import GameSettings, GameStateData, TurnOutcome

logger = logging.getLogger(__name__)


class GameSession:
    """
    Owns a board, the running score and the one-shot win flag.

    High-score persistence belongs to the caller: pass the stored value in as
    `high_score` and read the attribute back when it needs saving.
    """

    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        rng: Optional[random.Random] = None,
        high_score: int = 0,
        state: Optional[GameStateData] = None,
    ):
        self.settings = settings if settings is not None else GameSettings()
        self.rng = rng if rng is not None else random.Random(self.settings.seed)
        self.high_score = high_score
        self.board: board_engine.Board = board_engine.new_board()
        self.score = 0
        self.has_won = False
        self.progress = GameProgressState.IN_PROGRESS
        if state is None:
            self.reset()
        else:
            self._restore(state)

    @classmethod
    def resume(
        cls,
        state: GameStateData,
        rng: Optional[random.Random] = None,
        settings: Optional[GameSettings] = None,
    ) -> "GameSession":
        """
        Rebuilds a session from a snapshot held by the caller.
        Raises:
            ValueError: If the snapshot's board is not a valid 4 x 4 board.
        """
        if settings is None:
            settings = GameSettings(win_tile=state.win_tile)
        return cls(settings=settings, rng=rng, high_score=state.high_score, state=state)

    def _restore(self, state: GameStateData) -> None:
        board = board_engine.board_from_rows(state.board)
        win_tile = self.settings.win_tile
        self.board = board
        self.score = state.score
        self.high_score = max(self.high_score, state.score)
        self.has_won = state.has_won or board_engine.max_value(board) >= win_tile

        progress = board_engine.determine_game_status(board, win_tile)
        if progress == GameProgressState.GAME_WON and state.has_won:
            # already signalled; only a terminal board stops play now
            if not board_engine.has_empty_cell(board) and not board_engine.has_legal_move(board):
                progress = GameProgressState.GAME_OVER
            else:
                progress = state.progress
        self.progress = progress

    def reset(self) -> None:
        """Starts a new game. The high score is kept."""
        self.board = board_engine.initialize_board(
            self.rng,
            initial_tiles=self.settings.initial_tiles,
            four_probability=self.settings.four_probability,
        )
        self.score = 0
        self.has_won = False
        self.progress = GameProgressState.IN_PROGRESS
        logger.info("New game started.")

    def keep_playing(self) -> None:
        """
        Resumes play after the win has been signalled. A board with no empty
        cell and no legal move ends the game instead.
        Raises:
            ValueError: If the game is not in the GAME_WON state.
        """
        if self.progress != GameProgressState.GAME_WON:
            raise ValueError(f"Cannot keep playing from state {self.progress.name}.")
        if not board_engine.has_empty_cell(self.board) and not board_engine.has_legal_move(self.board):
            self._game_over()
            return
        self.progress = GameProgressState.IN_PROGRESS

    def _add_score(self, delta: int) -> None:
        self.score += delta
        if self.score > self.high_score:
            self.high_score = self.score

    def _game_over(self) -> None:
        self.progress = GameProgressState.GAME_OVER
        logger.info("Game over with score %d.", self.score)

    def play_turn(self, direction: DIRECTION) -> TurnOutcome:
        """
        Processes a player's move.

        The session will:
        1. Slide and merge the tiles. A move that changes nothing is rejected:
           no tile spawns and the score is untouched.
        2. Add the merge score, then stop with GAME_OVER if the board is stuck.
        3. Signal GAME_WON the first time the win tile is reached and end the
           turn there, without spawning.
        4. Spawn a new random tile (2 or 4) and check for a terminal board.

        Args:
            direction (DIRECTION): Direction of the move.
        Returns:
            TurnOutcome: Move records, score gained, spawn position and the
                         progress state after the turn.
        Raises:
            ValueError: If `direction` is not a DIRECTION.
        """
        if self.progress != GameProgressState.IN_PROGRESS:
            logger.debug("Turn %s ignored, game is %s.", direction, self.progress.name)
            return TurnOutcome(
                accepted=False,
                progress=self.progress,
                message=f"Game is {self.progress.name}; no moves accepted.",
            )

        result = board_engine.process_move(self.board, direction)
        if not result.moved:
            logger.debug("Move %s did not change the board.", direction.name)
            return TurnOutcome(
                accepted=False,
                progress=self.progress,
                message="Move was not effective; board state unchanged by slide.",
            )

        self._add_score(result.score)
        message: Optional[str] = None

        if not board_engine.has_empty_cell(self.board) and not board_engine.has_legal_move(self.board):
            self._game_over()
            return TurnOutcome(
                accepted=True,
                moves=result.moves,
                score_delta=result.score,
                progress=self.progress,
                message="Game Over. No more valid moves.",
            )

        if not self.has_won and board_engine.max_value(self.board) >= self.settings.win_tile:
            self.has_won = True
            self.progress = GameProgressState.GAME_WON
            logger.info("Win tile %d reached with score %d.", self.settings.win_tile, self.score)
            # no spawn on the winning turn
            return TurnOutcome(
                accepted=True,
                moves=result.moves,
                score_delta=result.score,
                progress=self.progress,
                message="Congratulations! You won!",
            )

        spawned = board_engine.spawn_random_tile(
            self.board, self.rng, self.settings.four_probability
        )
        if not board_engine.has_empty_cell(self.board) and not board_engine.has_legal_move(self.board):
            # covers both a failed spawn and a spawn that filled the last cell
            self._game_over()
            message = "Game Over. No more valid moves."

        return TurnOutcome(
            accepted=True,
            moves=result.moves,
            score_delta=result.score,
            spawned=spawned,
            progress=self.progress,
            message=message,
        )

    def snapshot(self) -> GameStateData:
        return GameStateData(
            board=board_engine.board_to_rows(self.board),
            score=self.score,
            high_score=self.high_score,
            progress=self.progress,
            has_won=self.has_won,
            win_tile=self.settings.win_tile,
        )
