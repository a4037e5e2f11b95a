# curses_view.py
"""
Curses dashboard: one row per flower sensor with the latest values and
mood, a detail panel for the selected row, and a scrollable log page.
The view never touches the store; it reports user actions through the
callbacks the controller registers on it.
"""

import curses
from typing import Any, Callable, Dict, List, Optional

from app_logger import log_buffer   # shared in-memory log deque


def level_bar(value: float, full_scale: float, width: int = 20) -> str:
    """Clamped text gauge, e.g. ``level_bar(25, 50, 10) == '#####.....'``."""
    fraction = max(0.0, min(1.0, value / full_scale)) if full_scale else 0.0
    filled = int(round(fraction * width))
    return "#" * filled + "." * (width - filled)


class CursesView:
    """
    Minimal curses UI.  The controller calls ``update_row`` with a dict
    holding the columns of ``HEADER`` (the first column is the device key).
    """

    HEADER = ["device", "flower", "temp °C", "air %", "soil %",
              "light %", "mood", "edits"]

    def __init__(self, stdscr: "curses.window", link=None) -> None:
        """
        ``stdscr`` is the window supplied by ``curses.wrapper``; ``link``
        is anything with a ``status_message`` attribute.
        """
        self.stdscr = stdscr
        self.link = link
        self._rows: Dict[str, Dict[str, Any]] = {}
        self.mode: str = "table"
        self.selected: int = 0
        self.log_scroll: int = 0
        self._needs_redraw = True
        self.on_flower_name_change: Optional[Callable[[str, str], None]] = None
        self.on_clear_request: Optional[Callable[[str], None]] = None
        self.on_ask_request: Optional[Callable[[str], Any]] = None
        self._init_curses()

    def _init_curses(self) -> None:
        curses.curs_set(0)
        self.stdscr.nodelay(True)             # non-blocking getch()
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(1, curses.COLOR_WHITE, curses.COLOR_BLUE)
        curses.init_pair(2, curses.COLOR_GREEN, -1)
        curses.init_pair(3, curses.COLOR_RED, -1)
        self.header_attr = curses.color_pair(1) | curses.A_BOLD
        self.healthy_attr = curses.color_pair(2)
        self.distressed_attr = curses.color_pair(3) | curses.A_BOLD

    # ------------------------------------------------------------------
    # Public API - called by the controller
    # ------------------------------------------------------------------
    def update_row(self, device_key: str, data: Dict[str, Any]) -> None:
        self._rows[device_key] = data
        self._needs_redraw = True

    def run(self) -> None:
        """Poll keys and redraw only when needed."""
        while True:
            self._handle_key()
            if self._needs_redraw:
                self._render()
                self._needs_redraw = False
            curses.napms(10)

    def _keys(self) -> List[str]:
        return sorted(dict(self._rows).keys())

    def _selected_key(self) -> Optional[str]:
        keys = self._keys()
        if not keys:
            return None
        self.selected = min(self.selected, len(keys) - 1)
        return keys[self.selected]

    # ------------------------------------------------------------------
    # Key handling
    # ------------------------------------------------------------------
    def _handle_key(self) -> None:
        """
        * `l` / `t` → log view / table view
        * arrows → select a row (table) or scroll (log)
        * `n` rename, `c` clear statistics, `a` ask the flower
        """
        try:
            ch = self.stdscr.getch()
        except curses.error:
            ch = -1
        if ch == -1:
            return

        if ch in (ord('l'), ord('L')):
            self.mode = "log"
            self.log_scroll = 0
        elif ch in (ord('t'), ord('T')):
            self.mode = "table"
        elif self.mode == "log":
            max_y, _ = self.stdscr.getmaxyx()
            visible_lines = max_y - 2
            bottom = max(0, len(log_buffer) - visible_lines)
            if ch in (curses.KEY_DOWN, ord('j')):
                self.log_scroll = min(self.log_scroll + 1, bottom)
            elif ch in (curses.KEY_UP, ord('k')):
                self.log_scroll = max(self.log_scroll - 1, 0)
            elif ch == curses.KEY_NPAGE:
                self.log_scroll = min(self.log_scroll + visible_lines, bottom)
            elif ch == curses.KEY_PPAGE:
                self.log_scroll = max(self.log_scroll - visible_lines, 0)
        else:
            key = self._selected_key()
            if ch in (curses.KEY_DOWN, ord('j')):
                self.selected = min(self.selected + 1, max(0, len(self._rows) - 1))
            elif ch in (curses.KEY_UP, ord('k')):
                self.selected = max(self.selected - 1, 0)
            elif key is not None and ch in (ord('n'), ord('N')):
                name = self._prompt("Имя цветка: ")
                if name and self.on_flower_name_change:
                    self.on_flower_name_change(key, name)
            elif key is not None and ch in (ord('c'), ord('C')):
                if self.on_clear_request:
                    self.on_clear_request(key)
            elif key is not None and ch in (ord('a'), ord('A')):
                if self.on_ask_request:
                    self._rows[key] = dict(self._rows[key], answer="Цветочек думает...")
                    self.on_ask_request(key)

        self._needs_redraw = True

    def _prompt(self, label: str) -> str:
        max_y, max_x = self.stdscr.getmaxyx()
        self.stdscr.move(max_y - 1, 0)
        self.stdscr.clrtoeol()
        self.stdscr.addstr(max_y - 1, 0, label[: max_x - 1])
        curses.echo()
        curses.curs_set(1)
        self.stdscr.nodelay(False)
        try:
            raw = self.stdscr.getstr(max_y - 1, len(label), max(1, max_x - len(label) - 1))
        finally:
            curses.noecho()
            curses.curs_set(0)
            self.stdscr.nodelay(True)
        return raw.decode("utf-8", errors="replace").strip()

    # ------------------------------------------------------------------
    # Rendering helpers
    # ------------------------------------------------------------------
    def _render(self) -> None:
        self.stdscr.erase()
        if self.mode == "table":
            self._draw_table()
        else:
            self._draw_log()
        self._draw_footer()
        self.stdscr.refresh()

    def _put(self, y: int, x: int, text: str, attr: int = 0) -> None:
        max_y, max_x = self.stdscr.getmaxyx()
        if y >= max_y - 1 or x >= max_x:
            return
        try:
            self.stdscr.addstr(y, x, text[: max_x - x - 1], attr)
        except curses.error:
            pass  # terminal shrank between getmaxyx() and addstr()

    def _draw_table(self) -> None:
        max_y, max_x = self.stdscr.getmaxyx()
        col_widths = [max(len(h), 10) for h in self.HEADER]
        col_widths[0] = col_widths[1] = 16

        status = getattr(self.link, "status_message", "")
        self._put(0, 0, status)

        x = 0
        for title, w in zip(self.HEADER, col_widths):
            self._put(1, x, title.ljust(w), self.header_attr)
            x += w + 1
        self.stdscr.hline(2, 0, curses.ACS_HLINE, max_x)

        rows = dict(self._rows)
        keys = sorted(rows.keys())
        selected_key = self._selected_key()
        row_idx = 3
        for key in keys:
            if row_idx >= max_y - 8:
                break
            row = rows[key]
            cells = [
                (key or "<none>").ljust(col_widths[0]),
                str(row.get("name", "")).ljust(col_widths[1]),
                f"{row.get('temperature', 0.0):.1f}".ljust(col_widths[2]),
                f"{row.get('humidity', 0.0):.1f}".ljust(col_widths[3]),
                f"{row.get('soil_moisture', 0.0):.1f}".ljust(col_widths[4]),
                f"{row.get('light_level', 0.0):.1f}".ljust(col_widths[5]),
                str(row.get("mood", "")).ljust(col_widths[6]),
                str(row.get("edits", 0)).ljust(col_widths[7]),
            ]
            attr = curses.A_REVERSE if key == selected_key else 0
            x = 0
            for cell, w in zip(cells, col_widths):
                self._put(row_idx, x, cell, attr)
                x += w + 1
            row_idx += 1

        if selected_key is not None:
            self._draw_detail(row_idx + 1, rows[selected_key])

    def _draw_detail(self, y: int, row: Dict[str, Any]) -> None:
        """Gauges for the selected flower, clamped to the display ranges."""
        gauges = [
            ("🌡️", row.get("temperature", 0.0), 50.0),
            ("💧", row.get("humidity", 0.0), 100.0),
            ("🪴", row.get("soil_moisture", 0.0), 100.0),
            ("☀️", row.get("light_level", 0.0), 100.0),
        ]
        for offset, (icon, value, full) in enumerate(gauges):
            self._put(y + offset, 0, f"{icon} {level_bar(value, full)} {value:.0f}")

        mood_attr = (self.healthy_attr if row.get("mood") == "HEALTHY"
                     else self.distressed_attr)
        self._put(y + len(gauges), 0, str(row.get("recommendation", "")), mood_attr)
        if row.get("answer"):
            self._put(y + len(gauges) + 1, 0, str(row["answer"]))

    def _draw_log(self) -> None:
        max_y, max_x = self.stdscr.getmaxyx()
        visible_lines = max_y - 2
        logs = list(log_buffer)
        for idx, line in enumerate(logs[self.log_scroll:self.log_scroll + visible_lines]):
            self._put(idx, 0, line)

    def _draw_footer(self) -> None:
        max_y, max_x = self.stdscr.getmaxyx()
        mode_msg = f"[{'TABLE' if self.mode == 'table' else 'LOG'} MODE] "
        hint = "'l' logs, 't' table, 'n' name, 'c' clear, 'a' ask, Ctrl-C quit"
        try:
            self.stdscr.addstr(max_y - 1, 0, (mode_msg + hint)[: max_x - 1], curses.A_REVERSE)
        except curses.error:
            pass
