"""
MemIndex Result Renderer
========================
Formats lookup results and benchmark timings as aligned ASCII tables.

Features:
  - Auto-column-width with configurable max
  - None displayed as NULL
  - Row count + elapsed time footer
  - Modes: table, raw
"""

import sys
import time
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Iterable, List, Optional, TextIO


class Renderer:
    """
    Result renderer with configurable display modes.
    """

    def __init__(self, output: TextIO = None):
        self.output = output or sys.stdout
        self.mode: str = "table"        # table, raw
        self.show_headers: bool = True
        self.show_timer: bool = True
        self.max_col_width: int = 50

    # ─── Public API ─────────────────────────────────────────────────

    def render_rows(self, rows: Iterable, column_names: Optional[List[str]] = None,
                    elapsed: Optional[float] = None) -> int:
        """
        Render result rows (dicts or dataclass records).
        Returns number of rows rendered.
        `elapsed` (seconds) is shown in the footer when given; otherwise
        the rendering time itself is measured.
        """
        start = time.perf_counter()
        values = [self._extract_values(r) for r in rows]
        headers = column_names or (list(values[0].keys()) if values else [])

        if self.mode == "raw":
            self._render_raw(values, headers)
        else:
            self._render_table(values, headers)

        if elapsed is None:
            elapsed = time.perf_counter() - start

        count = len(values)
        if self.show_timer:
            self._print(f"\n{count} row(s) returned ({elapsed:.6f}s)")
        else:
            self._print(f"\n{count} row(s) returned")
        return count

    def render_message(self, message: str):
        """Render a plain status message."""
        if message:
            self._print(message)

    def render_error(self, error: Exception):
        """Render an error with classification prefix."""
        prefix = self._classify_error(type(error).__name__)
        self._print(f"{prefix}: {error}")

    # ─── Table Mode ─────────────────────────────────────────────────

    def _render_table(self, rows: List[Dict[str, Any]], headers: List[str]) -> None:
        if not headers:
            return
        widths = self._calculate_widths(headers, rows)

        if self.show_headers:
            self._print_table_separator(widths, headers)
            self._print_table_row(widths, headers, {h: h for h in headers})
            self._print_table_separator(widths, headers)

        for vals in rows:
            self._print_table_row(widths, headers, vals)

        if self.show_headers and rows:
            self._print_table_separator(widths, headers)

    def _calculate_widths(self, headers: List[str], rows: List[Dict]) -> Dict[str, int]:
        widths = {h: min(len(h), self.max_col_width) for h in headers}
        for row in rows:
            for h in headers:
                val = self._format_value(row.get(h))
                widths[h] = max(widths[h], min(len(val), self.max_col_width))
        return widths

    def _print_table_separator(self, widths: Dict[str, int], headers: List[str]):
        """Print +----+------+ separator line."""
        self._print("+" + "".join("-" * (widths[h] + 2) + "+" for h in headers))

    def _print_table_row(self, widths: Dict[str, int], headers: List[str], vals: Dict):
        """Print | col1 | col2 | row."""
        parts = ["|"]
        for h in headers:
            raw_val = vals.get(h)
            val_str = self._format_value(raw_val)
            if len(val_str) > self.max_col_width:
                val_str = val_str[:self.max_col_width - 3] + "..."
            w = widths[h]
            # Right-align numbers, left-align strings
            if isinstance(raw_val, (int, float)) and not isinstance(raw_val, bool):
                parts.append(f" {val_str:>{w}} |")
            else:
                parts.append(f" {val_str:<{w}} |")
        self._print("".join(parts))

    # ─── Raw Mode ───────────────────────────────────────────────────

    def _render_raw(self, rows: List[Dict[str, Any]], headers: List[str]) -> None:
        """Values separated by pipes, no formatting."""
        if self.show_headers and headers:
            self._print("|".join(headers))
        for vals in rows:
            self._print("|".join(self._format_value(vals.get(h)) for h in headers))

    # ─── Helpers ────────────────────────────────────────────────────

    def _extract_values(self, row) -> Dict[str, Any]:
        if isinstance(row, dict):
            return row
        if is_dataclass(row) and not isinstance(row, type):
            return asdict(row)
        return {"value": row}

    def _format_value(self, value) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            if value.is_integer():
                return str(int(value))
            return f"{value:.6g}"
        return str(value)

    def _classify_error(self, error_type: str) -> str:
        """Map error class name to user-friendly prefix."""
        mapping = {
            "InvalidKeyError": "InvalidArgument",
            "ValueError": "ConfigError",
            "RuntimeError": "ExecutionError",
            "KeyError": "ExecutionError",
            "TypeError": "ExecutionError",
            "KeyboardInterrupt": "Interrupted",
        }
        return mapping.get(error_type, f"Error[{error_type}]")

    def _print(self, text: str):
        print(text, file=self.output)
