# treasure_hunt/app/viewer.py
#!/usr/bin/env python3
"""
Treasure Hunt Viewer: edit a map, solve it, watch the search play back

- Keyboard:
    [W]/[S]/[G]/[T]/[E] -> tool: wall / start / goal / treasure / erase
    [1]/[2]/[3]         -> load sample map
    [M]                 -> random map
    [C]                 -> clear map
    [SPACE]             -> solve, then play/pause the playback
    [N]                 -> single playback event
    [R]                 -> reset overlays
    [+]/[-]             -> playback speed
    [Q]/[ESC]           -> quit
- Mouse: click a cell to apply the tool (same type again toggles it off)

CLI: --map=<file.json>  --seed=<int>  --headless (solve and print, no window)
"""

import sys, time, random, logging
from collections import deque
from pathlib import Path

from typing import List, Tuple, Optional, Dict
import pygame

from treasure_hunt.core import settings
from treasure_hunt.core.errors import SolveError
from treasure_hunt.core.logging_config import configure_logging
from treasure_hunt.core.maps import SAMPLE_MAPS, load_map, generate_random_map
from treasure_hunt.core.solver import solve
from treasure_hunt.core.types import CellState, CellType, Grid, Phase, Position, SimulationResult

logger = logging.getLogger(__name__)

# -------------------- Assets --------------------
ASSETS_DIR      = Path(__file__).resolve().parents[2] / "assets"
FLOOR_IMG       = ASSETS_DIR / "floor.png"
WALL_IMG        = ASSETS_DIR / "wall.png"
EXPLORER_IMG    = ASSETS_DIR / "explorer.png"
FLAG_IMG        = ASSETS_DIR / "flag.png"
CHEST_IMG       = ASSETS_DIR / "chest.png"

# ---------- Config ----------
PANEL_W = 420            # right band: metrics + buttons
GRID_MARGIN = 16
CELL_SIZE_DEFAULT = 48
FONT_NAME = None  # default pygame font
SPEEDS = [5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000]   # events/sec

TOOLS = {
    pygame.K_w: CellType.WALL,
    pygame.K_s: CellType.START,
    pygame.K_g: CellType.GOAL,
    pygame.K_t: CellType.TREASURE,
    pygame.K_e: CellType.EMPTY,
}

# Colors
WHITE        = (255,255,255)
BLACK        = (  0,  0,  0)
BLUE         = ( 70,130,180)
RED          = (220, 50, 47)
GOLD         = (255,190, 40)
FLOOR_GRAY   = (200,200,200)
WALL_DARK    = ( 52, 58, 70)
EXPLORED_A   = (255,  0,120, 90)
ROUTE_GOLD_A = (255,210,  0,160)
NEON_MINT    = (  0,255,200)

CARD_BG      = (24,28,36,220)
CARD_HI      = (255,255,255,18)
TEXT_LIGHT   = (230,235,240)
TEXT_ERROR   = (255,120,120)
ACCENT_GOLD  = (255,210,0)


# ---------- Asset loader ----------
class _Assets:
    def __init__(self):
        self._raw: Dict[str, Optional[pygame.Surface]] = {}
        self._scaled_cache: Dict[Tuple[str, int], pygame.Surface] = {}

    def prepare(self):
        for key, path in (("floor", FLOOR_IMG), ("wall", WALL_IMG), ("explorer", EXPLORER_IMG),
                          ("flag", FLAG_IMG), ("chest", CHEST_IMG)):
            if key not in self._raw:
                self._raw[key] = pygame.image.load(str(path)).convert_alpha() if path.exists() else None

    def get(self, key: str, size: int) -> Optional[pygame.Surface]:
        base = self._raw.get(key)
        if base is None:
            return None
        size = max(1, int(size))
        cache_key = (key, size)
        if cache_key not in self._scaled_cache:
            self._scaled_cache[cache_key] = pygame.transform.smoothscale(base, (size, size))
        return self._scaled_cache[cache_key]

ASSETS = _Assets()


# ---------- Simple UI Button ----------
class UIButton:
    def __init__(self, label: str, rect: pygame.Rect, callback, *, togglable: bool = False):
        self.label = label
        self.rect = rect
        self.callback = callback
        self.hover = False
        self.togglable = togglable
        self.active = False

    def draw(self, screen: pygame.Surface, font: pygame.font.Font):
        base = pygame.Surface(self.rect.size, pygame.SRCALPHA)
        if self.active and self.togglable:
            bg = (58, 86, 160, 235)
        elif self.hover:
            bg = (46, 50, 60, 230)
        else:
            bg = (36, 40, 48, 220)
        pygame.draw.rect(base, bg, base.get_rect(), border_radius=10)
        screen.blit(base, self.rect.topleft)
        if self.active and self.togglable:
            pygame.draw.rect(screen, (120, 170, 255), self.rect, width=2, border_radius=10)
        text = font.render(self.label, True, (235,238,242))
        screen.blit(text, text.get_rect(center=self.rect.center))

    def handle_mouse(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.MOUSEMOTION:
            self.hover = self.rect.collidepoint(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                self.callback()
                return True
        return False


# ---------- Viewer ----------
class Viewer:
    def __init__(self, grid: Grid, map_key: str = "custom", rng: Optional[random.Random] = None):
        pygame.init()
        self.grid = grid
        self.map_key = map_key
        self.rng = rng or random.Random()
        self.font_small = pygame.font.Font(FONT_NAME, 16)
        self.font = pygame.font.Font(FONT_NAME, 20)
        self.font_big = pygame.font.Font(FONT_NAME, 26)

        win_w = GRID_MARGIN*2 + grid.cols*CELL_SIZE_DEFAULT + PANEL_W
        win_h = max(GRID_MARGIN*2 + grid.rows*CELL_SIZE_DEFAULT, 640)
        self.screen = pygame.display.set_mode((win_w, win_h), pygame.RESIZABLE)
        pygame.display.set_caption("Treasure Hunt - Optimal Route")
        ASSETS.prepare()

        self._buttons: List[UIButton] = []
        self._layout(win_w, win_h)

        self.clock = pygame.time.Clock()
        self.tool = CellType.WALL
        self.speed_idx = 3
        self.events: deque = deque()
        self._reset_overlays()

    # ---------- layout ----------
    def _layout(self, win_w: int, win_h: int):
        """Integer cell size that fits the window, grid on the left, panel on the right."""
        avail_w = max(1, win_w - PANEL_W - 2*GRID_MARGIN)
        avail_h = max(1, win_h - 2*GRID_MARGIN)
        self.cell_size = max(8, min(avail_w // self.grid.cols, avail_h // self.grid.rows))
        self._grid_origin = (GRID_MARGIN, GRID_MARGIN)
        grid_right = GRID_MARGIN*2 + self.grid.cols*self.cell_size
        self._right_band = pygame.Rect(grid_right, 0, max(PANEL_W, win_w - grid_right), win_h)
        self._build_buttons()

    def _cell_at(self, px: int, py: int) -> Optional[Position]:
        ox, oy = self._grid_origin
        col = (px - ox) // self.cell_size
        row = (py - oy) // self.cell_size
        pos = Position(row, col)
        return pos if px >= ox and py >= oy and self.grid.in_bounds(pos) else None

    # ---------- main loop ----------
    def run(self):
        while True:
            self._handle_events()
            if self.running:
                self._tick_playback()
            self._draw()
            self.clock.tick(60)

    def _tick_playback(self):
        now = time.time()
        due = int((now - self._last_step_t) * SPEEDS[self.speed_idx])
        if due >= 1:
            self._last_step_t = now
            for _ in range(due):
                if not self._do_step():
                    break

    # ---------- solving ----------
    def _start_solve(self):
        self._reset_overlays()
        record = self.events.append
        try:
            result = solve(
                self.grid,
                on_phase_change=lambda label: record(("phase", label)),
                on_explore=lambda pos: record(("explore", pos)),
                on_test_route=lambda order, dist, best: record(("route", order, dist, best)),
                max_treasures=settings.MAX_TREASURES,
            )
        except SolveError as e:
            self.events.clear()
            self.error = e.message if not e.detail else f"{e.message} ({e.detail})"
            self.state = "Error"
            return
        record(("done", result))
        self.state = "Running"
        self.running = True
        self._last_step_t = time.time()

    def _do_step(self) -> bool:
        """Apply one recorded event to the display grid. False when none are left."""
        if not self.events:
            return False
        event = self.events.popleft()
        kind = event[0]
        if kind == "phase":
            self.phase = event[1]
        elif kind == "explore":
            pos = event[1]
            self.explored_count += 1
            if self.grid.cell_type(pos) == CellType.EMPTY:
                self.grid.set_cell_state(pos, CellState.EXPLORED)
        elif kind == "route":
            _, order, dist, best = event
            self.routes_tested += 1
            if best:
                self.best_order, self.best_distance = order, dist
        elif kind == "done":
            self._finish(event[1])
        return True

    def _finish(self, result: SimulationResult):
        self.result = result
        self.path = result.complete_path
        self.best_order = result.optimal_route
        for pos in self.path:
            if self.grid.cell_type(pos) == CellType.EMPTY:
                self.grid.set_cell_state(pos, CellState.FINAL_PATH)
        self.phase = Phase.COMPLETE.value.title()
        self.state = "Done"
        self.running = False

    # ---------- events ----------
    def _handle_events(self):
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                pygame.quit(); sys.exit(0)
            elif e.type == pygame.KEYDOWN:
                if e.key in (pygame.K_ESCAPE, pygame.K_q):
                    pygame.quit(); sys.exit(0)
                elif e.key == pygame.K_SPACE:
                    self._toggle_run()
                elif e.key == pygame.K_n:
                    if self.state == "Idle":
                        self._start_solve(); self.running = False; self.state = "Paused"
                    else:
                        self._do_step()
                elif e.key == pygame.K_r:
                    self._reset_overlays()
                elif e.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                    self._bump_speed(+1)
                elif e.key in (pygame.K_MINUS, pygame.K_UNDERSCORE, pygame.K_KP_MINUS):
                    self._bump_speed(-1)
                elif e.key == pygame.K_1:
                    self._switch_map("01_open_field")
                elif e.key == pygame.K_2:
                    self._switch_map("02_wall_detour")
                elif e.key == pygame.K_3:
                    self._switch_map("03_four_chests")
                elif e.key == pygame.K_m:
                    self._random_map()
                elif e.key == pygame.K_c:
                    self._clear_map()
                elif e.key in TOOLS:
                    self.tool = TOOLS[e.key]
            elif e.type == pygame.VIDEORESIZE:
                self.screen = pygame.display.set_mode((max(640, e.w), max(480, e.h)), pygame.RESIZABLE)
                self._layout(*self.screen.get_size())
            elif e.type in (pygame.MOUSEMOTION, pygame.MOUSEBUTTONDOWN):
                handled = False
                for b in self._buttons:
                    handled = b.handle_mouse(e) or handled
                if not handled and e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
                    pos = self._cell_at(*e.pos)
                    if pos is not None:
                        self._edit_cell(pos)

    def _edit_cell(self, pos: Position):
        if self.running:
            return
        self._reset_overlays()
        if self.grid.cell_type(pos) == self.tool:
            self.grid.set_cell_type(pos, CellType.EMPTY)
        else:
            self.grid.set_cell_type(pos, self.tool)
        self.map_key = "custom"

    def _toggle_run(self):
        if self.state in ("Idle", "Error", "Done"):
            self._start_solve()
        elif self.state in ("Running", "Paused"):
            self.running = not self.running
            self.state = "Running" if self.running else "Paused"
            self._last_step_t = time.time()
        self._refresh_active_states()

    def _bump_speed(self, dv: int):
        self.speed_idx = max(0, min(len(SPEEDS) - 1, self.speed_idx + dv))

    def _load_grid(self, grid: Grid, key: str):
        self.grid = grid
        self.map_key = key
        self._reset_overlays()
        self._layout(*self.screen.get_size())

    def _switch_map(self, key: str):
        try:
            self._load_grid(load_map(SAMPLE_MAPS[key]), key)
        except (OSError, ValueError) as ex:
            logger.error("Failed to load map %s: %s", key, ex)

    def _random_map(self):
        # the generator needs an interior; tiny custom maps grow to 3x3
        rows, cols = max(3, self.grid.rows), max(3, self.grid.cols)
        self._load_grid(generate_random_map(rows, cols, rng=self.rng), "random")

    def _clear_map(self):
        self.grid.clear()
        self.map_key = "custom"
        self._reset_overlays()

    def _reset_overlays(self):
        self.events.clear()
        self.grid.reset_states()
        self.running = False
        self.state = "Idle"
        self.phase = "-"
        self.error: Optional[str] = None
        self.explored_count = 0
        self.routes_tested = 0
        self.best_order: List[Position] = []
        self.best_distance: Optional[float] = None
        self.path: List[Position] = []
        self.result: Optional[SimulationResult] = None
        self._last_step_t = 0.0
        self._refresh_active_states()

    # ---------- drawing ----------
    def _draw(self):
        self.screen.fill((24, 26, 32))
        self._draw_grid()
        self._draw_metrics_and_buttons()
        pygame.display.flip()

    def _center(self, pos: Position) -> Tuple[int, int]:
        cs = self.cell_size
        ox, oy = self._grid_origin
        return ox + pos.col*cs + cs//2, oy + pos.row*cs + cs//2

    def _draw_grid(self):
        cs = self.cell_size
        ox, oy = self._grid_origin
        floor = ASSETS.get("floor", cs)
        wall = ASSETS.get("wall", cs)
        explored = pygame.Surface((cs, cs), pygame.SRCALPHA); explored.fill(EXPLORED_A)

        for row in range(self.grid.rows):
            for col in range(self.grid.cols):
                pos = Position(row, col)
                rect = pygame.Rect(ox + col*cs, oy + row*cs, cs, cs)
                if self.grid.cell_type(pos) == CellType.WALL:
                    if wall: self.screen.blit(wall, rect.topleft)
                    else:    pygame.draw.rect(self.screen, WALL_DARK, rect)
                else:
                    if floor: self.screen.blit(floor, rect.topleft)
                    else:     pygame.draw.rect(self.screen, FLOOR_GRAY, rect)
                    if self.grid.cell_state(pos) == CellState.EXPLORED:
                        self.screen.blit(explored, rect.topleft)
                pygame.draw.rect(self.screen, BLACK, rect, 1)

        # best ordering so far, as straight legs between points of interest
        if self.best_order and not self.path and self.grid.start and self.grid.goal:
            pts = [self._center(p) for p in [self.grid.start, *self.best_order, self.grid.goal]]
            layer = pygame.Surface(self.screen.get_size(), pygame.SRCALPHA)
            pygame.draw.lines(layer, ROUTE_GOLD_A, False, pts, 3)
            self.screen.blit(layer, (0, 0))

        if len(self.path) >= 2:
            pts = [self._center(p) for p in self.path]
            glow = pygame.Surface(self.screen.get_size(), pygame.SRCALPHA)
            pygame.draw.lines(glow, (0, 255, 220, 60), False, pts, 7)
            self.screen.blit(glow, (0,0), special_flags=pygame.BLEND_ADD)
            pygame.draw.lines(self.screen, NEON_MINT, False, pts, 5)

        visit_rank = {p.key: i + 1 for i, p in enumerate(self.best_order)}
        for t in self.grid.treasures:
            self._draw_badge(t, ASSETS.get("chest", cs * 0.8), GOLD, str(visit_rank.get(t.key, "T")))
        if self.grid.start:
            self._draw_badge(self.grid.start, ASSETS.get("explorer", cs * 0.8), BLUE, "S")
        if self.grid.goal:
            self._draw_badge(self.grid.goal, ASSETS.get("flag", cs * 0.8), RED, "G")

    def _draw_badge(self, pos: Position, icon: Optional[pygame.Surface], color: Tuple[int,int,int], label: str):
        cx, cy = self._center(pos)
        if icon is not None:
            self.screen.blit(icon, icon.get_rect(center=(cx, cy)))
            return
        pygame.draw.circle(self.screen, color, (cx, cy), max(6, self.cell_size//2 - 3))
        txt = self.font_small.render(label, True, WHITE)
        self.screen.blit(txt, txt.get_rect(center=(cx, cy)))

    # ---------- buttons + metrics ----------
    def _build_buttons(self):
        self._buttons.clear()
        rb = self._right_band
        x = rb.x + 16
        y = rb.y + 300  # leaves space for metrics card above
        w = max(160, rb.width - 32)
        h = 34
        gap = 8

        def add(label, cb, *, togglable=False, store_as: Optional[str] = None, rect=None):
            btn = UIButton(label, rect or pygame.Rect(x, y, w, h), cb, togglable=togglable)
            self._buttons.append(btn)
            if store_as:
                setattr(self, store_as, btn)

        add("Solve / Pause", self._toggle_run, togglable=True, store_as="btn_run"); y += h + gap
        add("Step Once", lambda: self._do_step()); y += h + gap
        add("Reset", self._reset_overlays); y += h + gap
        half = (w - 8)//2
        add("Speed −", lambda: self._bump_speed(-1), rect=pygame.Rect(x, y, half, h))
        add("Speed +", lambda: self._bump_speed(+1), rect=pygame.Rect(x + half + 8, y, half, h)); y += h + gap
        add("Random Map", self._random_map); y += h + gap
        add("Clear Map", self._clear_map); y += h + gap
        add("Map 1: Open Field", lambda: self._switch_map("01_open_field")); y += h + gap
        add("Map 2: Wall Detour", lambda: self._switch_map("02_wall_detour")); y += h + gap
        add("Map 3: Four Chests", lambda: self._switch_map("03_four_chests"))
        self._refresh_active_states()

    def _refresh_active_states(self):
        if hasattr(self, "btn_run"):
            self.btn_run.active = getattr(self, "running", False)

    def _draw_metrics_and_buttons(self):
        rb = self._right_band
        card = pygame.Surface((rb.width - 20, 280), pygame.SRCALPHA)
        pygame.draw.rect(card, CARD_BG, card.get_rect(), border_radius=14)
        hi = pygame.Surface((card.get_width(), 24), pygame.SRCALPHA)
        pygame.draw.rect(hi, CARD_HI, hi.get_rect(), border_radius=14)
        card.blit(hi, (0,0))
        self.screen.blit(card, (rb.x + 10, rb.y + 10))

        x0 = rb.x + 24
        y0 = rb.y + 18

        def line(text, big=False, color=TEXT_LIGHT):
            nonlocal y0
            f = self.font_big if big else self.font
            surf = f.render(text, True, color)
            self.screen.blit(surf, (x0, y0))
            y0 += surf.get_height() + 6

        line("Treasure Hunt", big=True, color=ACCENT_GOLD)
        line(f"State: {self.state}")
        line(f"Phase: {self.phase}")
        line(f"Explored: {self.explored_count}")
        line(f"Routes tested: {self.routes_tested}")
        line(f"Best distance: {self.best_distance if self.best_distance is not None else '-'}")
        line(f"Path len: {len(self.path)}")
        line("-" * 26)
        line(f"Map: {self.map_key}   Tool: {self.tool.value}")
        line(f"Speed: {SPEEDS[self.speed_idx]} events/s")
        if self.error:
            line(self.error, color=TEXT_ERROR)

        for b in self._buttons:
            b.draw(self.screen, self.font_small)


# ---------- CLI ----------
def _arg(name: str) -> Optional[str]:
    for arg in sys.argv[1:]:
        if arg.startswith(f"--{name}="):
            return arg.split("=", 1)[1]
    return None


def run_headless(grid: Grid) -> int:
    try:
        result = solve(grid, max_treasures=settings.MAX_TREASURES)
    except SolveError as e:
        print(f"Solve failed: {e}")
        return 1
    for k, v in result.metrics().items():
        print(f"{k}: {v}")
    print("order: " + " -> ".join(["S", *map(str, result.optimal_route), "G"]))
    return 0


def main():
    configure_logging()
    seed = _arg("seed")
    rng = random.Random(int(seed)) if seed is not None else random.Random()
    map_path = _arg("map")
    try:
        if map_path:
            grid, key = load_map(map_path), Path(map_path).stem
        else:
            grid, key = load_map(SAMPLE_MAPS["01_open_field"]), "01_open_field"
    except (OSError, ValueError) as ex:
        logger.error("Failed to load map: %s", ex)
        sys.exit(1)
    if "--headless" in sys.argv[1:]:
        sys.exit(run_headless(grid))
    Viewer(grid, key, rng).run()

if __name__ == "__main__":
    main()
