# board_engine.py
# This file is the stateless rule engine for the 4x4 sliding-tile merge game.
# A board is a flat list of 16 ints, row-major, idx = row * 4 + col.

from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple
import logging
import random

logger = logging.getLogger(__name__)

BOARD_SIZE = 4
CELL_COUNT = BOARD_SIZE * BOARD_SIZE
WIN_TILE = 2048
FOUR_PROBABILITY = 0.1

Board = List[int]
Coordinate = Tuple[int, int]  # (row, col)


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    IN_PROGRESS = 1
    GAME_OVER = 2  # Lost
    GAME_WON = 3

class DIRECTION(Enum):
    """Represents the possible move directions."""
    UP = 1
    DOWN = 2
    LEFT = 3
    RIGHT = 4

class MoveRecord(NamedTuple):
    """One tile that slid or merged during a move."""
    source: Coordinate
    target: Coordinate

class MoveResult(NamedTuple):
    """
    Output of a directional move.
    moves: one record per relocated tile, in scan order.
    score: sum of the values created by merges (0 if nothing merged).
    """
    moves: List[MoveRecord]
    score: int

    @property
    def moved(self) -> bool:
        return bool(self.moves)

# --- Board Helper Functions ---

def coord_to_index(row: int, col: int) -> int:
    return row * BOARD_SIZE + col

def index_to_coord(index: int) -> Coordinate:
    return divmod(index, BOARD_SIZE)

def new_board() -> Board:
    """Returns a board with every cell empty."""
    return [0] * CELL_COUNT

def copy_board(board: Sequence[int]) -> Board:
    return list(board)

def _is_valid_cell(value: object) -> bool:
    # 0 or a power of two >= 2; bool is an int subclass but never a tile
    if not isinstance(value, int) or isinstance(value, bool):
        return False
    return value == 0 or (value >= 2 and value & (value - 1) == 0)

def validate_board(board: Sequence[int]) -> Board:
    """
    Checks a flat board coming from outside the engine.
    Args:
        board (Sequence[int]): 16 cell values, row-major.
    Returns:
        Board: A fresh list holding the same values.
    Raises:
        ValueError: If the board has the wrong length or holds a value that
                    is neither 0 nor a power of two >= 2.
    """
    cells = list(board)
    if len(cells) != CELL_COUNT:
        raise ValueError(f"Board must have exactly {CELL_COUNT} cells, got {len(cells)}.")
    for index, value in enumerate(cells):
        if not _is_valid_cell(value):
            row, col = index_to_coord(index)
            raise ValueError(
                f"Invalid cell value {value!r} at ({row}, {col}); "
                "expected 0 or a power of two >= 2."
            )
    return cells

def board_from_rows(rows: Sequence[Sequence[int]]) -> Board:
    """
    Flattens a 4 x 4 list of rows into a board.
    Args:
        rows (Sequence[Sequence[int]]): Row 0 first.
    Returns:
        Board: The flat, validated board.
    Raises:
        ValueError: If the rows do not form a 4 x 4 grid of valid cell values.
    """
    if len(rows) != BOARD_SIZE or not all(len(row) == BOARD_SIZE for row in rows):
        raise ValueError(f"Board must be a {BOARD_SIZE} x {BOARD_SIZE} matrix.")
    return validate_board([value for row in rows for value in row])

def board_to_rows(board: Sequence[int]) -> List[List[int]]:
    return [list(board[r * BOARD_SIZE:(r + 1) * BOARD_SIZE]) for r in range(BOARD_SIZE)]

def get_empty_cells(board: Sequence[int]) -> List[Coordinate]:
    """
    Get coordinates of empty (0-value) cells in the given board.
    Args:
        board (Sequence[int]): The board to check.
    Returns:
        List[Coordinate]: (row, col) tuples, in index order.
    """
    return [index_to_coord(index) for index, value in enumerate(board) if value == 0]

def spawn_random_tile(
    board: Board,
    rng: Optional[random.Random] = None,
    four_probability: float = FOUR_PROBABILITY,
) -> Optional[Coordinate]:
    """
    Places a new tile (2, or 4 with probability `four_probability`) on a
    uniformly chosen empty cell.
    Args:
        board (Board): The board to modify in place.
        rng (random.Random): Source of randomness. A fresh unseeded generator
                             is used when omitted.
        four_probability (float): Chance that the new tile is a 4.
    Returns:
        Optional[Coordinate]: Where the tile was placed, or None if the board
                              has no empty cell.
    """
    empty_cells = get_empty_cells(board)
    if not empty_cells:
        logger.debug("No empty cell left, tile not spawned.")
        return None

    if rng is None:
        rng = random.Random()
    row, col = rng.choice(empty_cells)
    board[coord_to_index(row, col)] = 2 if rng.random() < 1.0 - four_probability else 4
    return (row, col)

def initialize_board(
    rng: Optional[random.Random] = None,
    initial_tiles: int = 2,
    four_probability: float = FOUR_PROBABILITY,
) -> Board:
    """
    Creates a new board holding `initial_tiles` random tiles.
    Args:
        rng (random.Random): Source of randomness shared by every spawn.
        initial_tiles (int): Number of tiles to place. Default is 2.
        four_probability (float): Chance that each tile is a 4.
    Returns:
        Board: The initial board.
    """
    if rng is None:
        rng = random.Random()
    board = new_board()
    for _ in range(initial_tiles):
        spawn_random_tile(board, rng, four_probability)
    return board

# --- Core Move Logic ---

# Unit step (rows, cols) toward the edge tiles travel to.
# Row index grows upward: UP carries tiles toward row 3.
_STEPS: Dict[DIRECTION, Tuple[int, int]] = {
    DIRECTION.UP: (1, 0),
    DIRECTION.DOWN: (-1, 0),
    DIRECTION.LEFT: (0, -1),
    DIRECTION.RIGHT: (0, 1),
}

def _scan_order(step: int) -> range:
    """
    Positions along one axis in the order they are visited.
    Moving along the axis, the cell on the target edge is skipped and the
    rest are visited nearest-to-edge first. Across the axis, all positions
    are visited in increasing order.
    """
    if step < 0:
        return range(1, BOARD_SIZE)
    if step > 0:
        return range(BOARD_SIZE - 2, -1, -1)
    return range(BOARD_SIZE)

def _furthest_reachable(board: Board, row: int, col: int, d_row: int, d_col: int) -> Optional[int]:
    """
    Walks from (row, col) toward the target edge and returns the index of the
    furthest cell reachable over cells that are empty or equal to the moving
    tile. None if the neighbouring cell already blocks the tile.
    """
    value = board[coord_to_index(row, col)]
    furthest = None
    r, c = row + d_row, col + d_col
    while 0 <= r < BOARD_SIZE and 0 <= c < BOARD_SIZE:
        index = coord_to_index(r, c)
        if board[index] != 0 and board[index] != value:
            break
        furthest = index
        r += d_row
        c += d_col
    return furthest

def process_move(board: Board, direction: DIRECTION) -> MoveResult:
    """
    Slides and merges every tile toward one edge, modifying the board in place.

    Tiles are visited nearest-to-edge first so each one only moves after the
    tiles in front of it have settled; a single pass is enough. A cell that
    absorbed a merge takes no further part in this move, so a run of three or
    more equal tiles only merges pairwise.
    Args:
        board (Board): The board to modify.
        direction (DIRECTION): The direction to move.
    Returns:
        MoveResult: Move records in scan order and the score gained. An
                    empty record list means the board is unchanged.
    Raises:
        ValueError: If an invalid direction is specified.
    """
    if not isinstance(direction, DIRECTION):
        raise ValueError(f"Invalid direction specified for process_move: {direction!r}")

    d_row, d_col = _STEPS[direction]
    has_merged = [False] * CELL_COUNT
    moves: List[MoveRecord] = []
    score = 0

    for row in _scan_order(d_row):
        for col in _scan_order(d_col):
            prev = coord_to_index(row, col)
            if board[prev] == 0:
                continue

            dest = _furthest_reachable(board, row, col, d_row, d_col)
            if dest is None or has_merged[dest]:
                continue

            if board[dest] == board[prev]:
                board[dest] += board[prev]
                score += board[dest]
                has_merged[dest] = True
            else:
                board[dest] = board[prev]
            board[prev] = 0
            moves.append(MoveRecord((row, col), index_to_coord(dest)))

    return MoveResult(moves, score)

def move_left(board: Board) -> MoveResult:
    return process_move(board, DIRECTION.LEFT)

def move_right(board: Board) -> MoveResult:
    return process_move(board, DIRECTION.RIGHT)

def move_up(board: Board) -> MoveResult:
    return process_move(board, DIRECTION.UP)

def move_down(board: Board) -> MoveResult:
    return process_move(board, DIRECTION.DOWN)

# --- Game State Checks ---

def has_empty_cell(board: Sequence[int]) -> bool:
    return 0 in board

def has_legal_move(board: Sequence[int]) -> bool:
    """
    Check whether any direction would change the board.
    Every move is tried on a private copy; the caller's board is never touched.
    Args:
        board (Sequence[int]): The game board.
    Returns:
        bool: True if at least one move produces a move record.
    """
    probe = copy_board(board)
    for direction in DIRECTION:
        if process_move(probe, direction).moved:
            return True
    return False

def max_value(board: Sequence[int]) -> int:
    return max(board)

def determine_game_status(board: Sequence[int], win_tile: int = WIN_TILE) -> GameProgressState:
    """
    Determines the progress state implied by a board alone.
    Args:
        board (Sequence[int]): The current game board.
        win_tile (int): The tile value that signifies a win. Default is 2048.
    Returns:
        GameProgressState: The current state (IN_PROGRESS, GAME_WON, GAME_OVER).
    """
    if max_value(board) >= win_tile:
        return GameProgressState.GAME_WON

    if not has_empty_cell(board) and not has_legal_move(board):
        return GameProgressState.GAME_OVER

    return GameProgressState.IN_PROGRESS
