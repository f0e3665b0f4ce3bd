from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional, Tuple

import pygame

from block_blast.game import (
    BlockBlastGame,
    Board,
    ColorTag,
    Difficulty,
    GameConfig,
    JsonFileStore,
    LevelReward,
    PendingClear,
    Phase,
    PlayerRecord,
    Shape,
)

logger = logging.getLogger(__name__)

CLEAR_DELAY_MS = 400
GAME_OVER_DEBOUNCE_MS = 100
DEFAULT_SAVE_FILE = os.path.join(os.path.expanduser("~"), ".block_blast.json")

PALETTE = {
    ColorTag.YELLOW: (251, 191, 36),
    ColorTag.BLUE: (59, 130, 246),
    ColorTag.RED: (244, 63, 94),
    ColorTag.CYAN: (34, 211, 238),
    ColorTag.ORANGE: (249, 115, 22),
    ColorTag.GREEN: (16, 185, 129),
    ColorTag.PURPLE: (139, 92, 246),
    ColorTag.PINK: (232, 121, 249),
}


def _color_for_value(v: int) -> Tuple[int, int, int]:
    return (40, 40, 48) if v == 0 else PALETTE.get(ColorTag(v), (200, 200, 200))


def draw_board(screen: pygame.Surface, board: Board, cell_size: int, margin: int,
               clearing: Optional[PendingClear] = None) -> None:
    screen.fill((15, 23, 42))
    rows = set(clearing.lines.rows) if clearing else set()
    cols = set(clearing.lines.cols) if clearing else set()
    for y in range(board.size):
        for x in range(board.size):
            rect = pygame.Rect(margin + x * cell_size, margin + y * cell_size, cell_size - 1, cell_size - 1)
            color = _color_for_value(int(board.cells[y, x]))
            if y in rows or x in cols:
                color = (255, 255, 255)
            pygame.draw.rect(screen, color, rect)


def draw_shape(screen: pygame.Surface, shape: Shape, x0: int, y0: int, cell_size: int) -> None:
    for r, c in shape.cells():
        rect = pygame.Rect(x0 + c * cell_size, y0 + r * cell_size, cell_size - 1, cell_size - 1)
        pygame.draw.rect(screen, PALETTE[shape.color], rect)


def draw_pieces(screen: pygame.Surface, game: BlockBlastGame, cell_size: int, margin: int, selected: int) -> None:
    # Hand is drawn at the right side; empty slots stay as placeholders
    x0 = margin * 2 + game.board.size * cell_size
    small = max(8, cell_size // 2)
    for idx, piece in enumerate(game.hand):
        off_y = margin + idx * (small * 6)
        if piece is None:
            pygame.draw.rect(screen, (51, 65, 85), pygame.Rect(x0, off_y, small * 5, small * 5), 1)
            continue
        draw_shape(screen, piece.shape, x0, off_y, small)
        if idx == selected:
            outline = pygame.Rect(x0 - 2, off_y - 2, piece.shape.width * small + 4, piece.shape.height * small + 4)
            pygame.draw.rect(screen, (255, 255, 255), outline, 2)


def anchor_under_mouse(game: BlockBlastGame, selected: int, cell_size: int, margin: int) -> Tuple[int, int]:
    """Anchor that centres the selected shape on the cell under the pointer."""
    mx, my = pygame.mouse.get_pos()
    piece = game.hand[selected] if 0 <= selected < len(game.hand) else None
    h, w = (piece.shape.height, piece.shape.width) if piece is not None else (1, 1)
    row = round((my - margin) / cell_size - h / 2)
    col = round((mx - margin) / cell_size - w / 2)
    return int(row), int(col)


def draw_ghost(screen: pygame.Surface, game: BlockBlastGame, row: int, col: int, cell_size: int, margin: int,
               selected: int) -> None:
    if not (0 <= selected < len(game.hand)) or game.hand[selected] is None:
        return
    shape = game.hand[selected].shape
    color = (120, 220, 140) if game.can_place(selected, row, col) else (220, 120, 120)
    for r, c in shape.cells():
        rect = pygame.Rect(margin + (col + c) * cell_size, margin + (row + r) * cell_size, cell_size - 1, cell_size - 1)
        pygame.draw.rect(screen, color, rect, 2)


def _first_live_slot(game: BlockBlastGame) -> int:
    for idx, piece in enumerate(game.hand):
        if piece is not None:
            return idx
    return 0


def _format_timer(secs: float) -> str:
    secs = int(secs)
    return f"{secs // 60}:{secs % 60:02d}"


def reward_lines(reward: LevelReward) -> List[str]:
    """Level-up summary, one breakdown entry per line."""
    return [
        f"Level {reward.level} complete!",
        f"Level reward: +{reward.base} coins",
        f"Time bonus: +{reward.speed_bonus} coins",
        f"Time taken: {_format_timer(reward.elapsed)}",
        f"Total: +{reward.total} coins - press C to claim",
    ]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Block Blast with the mouse.")
    p.add_argument("--difficulty", choices=[d.value for d in Difficulty], default=None)
    p.add_argument("--name", type=str, default=None)
    p.add_argument("--save-file", type=str, default=DEFAULT_SAVE_FILE)
    p.add_argument("--seed", type=int, default=None)
    return p


def run(difficulty: Optional[str] = None, name: Optional[str] = None, save_file: str = DEFAULT_SAVE_FILE,
        seed: Optional[int] = None) -> None:
    store = JsonFileStore(save_file)
    saved = PlayerRecord.load(store)
    difficulty = Difficulty(difficulty or saved.difficulty)
    name = name if name is not None else saved.player_name
    config = GameConfig.for_difficulty(difficulty, random_seed=seed, deferred_clear=True)
    game = BlockBlastGame(config, store=store)
    game.record.save_preferences(store, name, difficulty.value)
    logger.info("Starting %s game for %r", difficulty.value, name or "anonymous")

    pygame.init()
    try:
        cell_size = 40 if game.board.size <= 8 else 32
        margin = 20
        board_px = game.board.size * cell_size
        side_panel_w = 10 * cell_size
        width = margin * 3 + board_px + side_panel_w
        height = margin * 2 + board_px
        screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption("Block Blast")
        font = pygame.font.SysFont(None, 24)

        selected = 0
        clear_at: Optional[int] = None
        game_over_since: Optional[int] = None
        confirm_restart = False

        key_to_index = {
            pygame.K_1: 0,
            pygame.K_2: 1,
            pygame.K_3: 2,
            pygame.K_KP1: 0,
            pygame.K_KP2: 1,
            pygame.K_KP3: 2,
        }

        running = True
        clock = pygame.time.Clock()
        while running:
            now = pygame.time.get_ticks()
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if confirm_restart:
                        # Y starts over, any other key keeps playing
                        confirm_restart = False
                        if event.key == pygame.K_y:
                            game.reset()
                            clear_at = None
                            game_over_since = None
                            selected = 0
                    elif event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key in key_to_index:
                        idx = key_to_index[event.key]
                        if idx < len(game.hand) and game.hand[idx] is not None:
                            selected = idx
                    elif event.key == pygame.K_n:
                        if game.game_over:
                            # reset discards any clear still waiting on its timer
                            game.reset()
                            clear_at = None
                            game_over_since = None
                            selected = 0
                        else:
                            confirm_restart = True
                    elif event.key == pygame.K_c and game.phase is Phase.LEVEL_COMPLETE:
                        game.claim_reward()
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    row, col = anchor_under_mouse(game, selected, cell_size, margin)
                    result = game.place(selected, row, col)
                    if result.success:
                        clear_at = now + CLEAR_DELAY_MS if result.pending else None
                        selected = _first_live_slot(game)

            if game.pending is not None and clear_at is not None and now >= clear_at:
                game.apply_clear(game.pending)
                clear_at = None
                selected = _first_live_slot(game)

            if game.game_over:
                game_over_since = game_over_since if game_over_since is not None else now
            else:
                game_over_since = None

            draw_board(screen, game.board, cell_size, margin, game.pending)
            if game.phase is Phase.ACTIVE:
                row, col = anchor_under_mouse(game, selected, cell_size, margin)
                draw_ghost(screen, game, row, col, cell_size, margin, selected)
            draw_pieces(screen, game, cell_size, margin, selected)

            prog = game.progression
            info_lines = [
                f"Player: {name or '-'}  ({difficulty.value})",
                f"Score: {prog.score} / {prog.target_score}",
                f"Level: {prog.level}   Time: {_format_timer(game.elapsed())}",
                f"High score: {game.record.high_score}",
                f"Coins: {game.record.coins}",
                "Select: 1/2/3   Place: left click",
                "Claim reward: C   New game: N   Quit: Esc",
            ]
            x_text = margin * 2 + board_px
            y_text = margin + 3 * (max(8, cell_size // 2) * 6)
            for i, txt in enumerate(info_lines):
                img = font.render(txt, True, (230, 230, 230))
                screen.blit(img, (x_text, y_text + i * 22))
            if prog.phase is Phase.LEVEL_COMPLETE and prog.reward is not None:
                overlay = pygame.Surface((board_px, board_px), pygame.SRCALPHA)
                overlay.fill((0, 0, 0, 180))
                screen.blit(overlay, (margin, margin))
                for i, txt in enumerate(reward_lines(prog.reward)):
                    img = font.render(txt, True, (250, 204, 21))
                    screen.blit(img, (margin * 2, margin * 2 + i * 26))
            if confirm_restart:
                msg = "Abandon this game and start over? Y / any key"
                screen.blit(font.render(msg, True, (250, 204, 21)), (margin, 2))
            elif game_over_since is not None and now - game_over_since >= GAME_OVER_DEBOUNCE_MS:
                screen.blit(font.render("Game Over - Press N to play again", True, (255, 100, 100)), (margin, 2))

            pygame.display.flip()
            clock.tick(60)
    finally:
        pygame.quit()


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    run(args.difficulty, args.name, args.save_file, args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
