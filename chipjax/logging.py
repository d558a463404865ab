"""Console logging utilities for chipjax sessions.

Provides a small level-filtered console logger, an emulator-specific
subclass for session, ROM and fault messages, and a real-time tqdm progress
bar for jitted ``lax.scan`` loops driven through ``io_callback``.
"""

import time
import sys
from typing import Any, Dict, Optional, Callable, Tuple

import jax
from jax.experimental import io_callback
from tqdm import tqdm

from chipjax.decode import mnemonic


class ConsoleLogger:
    """Console logger with level filtering, colors and timestamps."""

    LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    def __init__(
        self,
        name: str = "chipjax",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        if self.log_level not in self.LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(self.LEVELS)}")
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {k: "" for k in (*self.LEVELS, "RESET")}
        )

        self.level_order = {level: i for i, level in enumerate(self.LEVELS)}

    def is_enabled_for(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order[self.log_level]

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        if self.use_colors:
            level_str = f"{self.colors.get(level.upper(), '')}{level_str}{self.colors['RESET']}"

        return f"{timestamp}{level_str}[{self.name}] {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self.is_enabled_for(level):
            print(self._format_message(level, message), file=self.stream, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class EmulatorLogger(ConsoleLogger):
    """Logger for emulation sessions: configuration, ROM, trace and faults."""

    def __init__(self, name: str = "chipjax", **kwargs):
        super().__init__(name, **kwargs)
        self.faults = []

    def log_session_start(self, config: Dict[str, Any]):
        """Log session configuration."""
        self.info("=" * 60)
        self.info("Starting emulation session with configuration:")
        for key, value in config.items():
            self.info(f"  {key}: {value}")
        self.info("=" * 60)

    def log_rom_loaded(self, path: str, size: int):
        self.info(f"Loaded ROM {path} ({size} bytes)")

    def log_instruction(self, pc: int, instruction: int):
        """Trace one instruction at DEBUG level."""
        if self.is_enabled_for("DEBUG"):
            self.debug(f"0x{pc:03X}: {instruction:04X} {mnemonic(instruction)}")

    def log_fault(self, fault: Exception):
        """Log a machine fault, including the mnemonic when it carries an opcode."""
        self.faults.append(fault)
        opcode = getattr(fault, "opcode", None)
        suffix = f" [{mnemonic(opcode)}]" if opcode is not None else ""
        self.error(f"{fault}{suffix}")

    def log_session_end(self, cycles: int):
        elapsed = time.time() - self.start_time
        rate = cycles / elapsed if elapsed > 0 else 0.0
        self.info(f"Session ended after {cycles:,} cycles in {elapsed:.1f}s ({rate:.0f} Hz)")


def build_tqdm_progress_bar(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **kwargs,
) -> Tuple[Callable, Callable]:
    """Build a tqdm bar that jitted code advances through ``io_callback``.

    The bar moves in chunks of ``print_rate`` cycles; the last chunk carries
    whatever is left so the bar always ends at ``n``.
    """
    if desc is None:
        desc = f"Emulating ({n:,} cycles)"

    for kwarg in ("total", "mininterval", "maxinterval", "miniters"):
        kwargs.pop(kwarg, None)

    if print_rate is None:
        print_rate = max(1, min(n // 20, 1000))
    else:
        print_rate = max(1, min(print_rate, n))
    remainder = n % print_rate

    bars = {}

    def _open():
        bars["bar"] = tqdm(total=n, desc=desc, unit="cycle", **kwargs)

    def _advance(steps):
        if "bar" in bars:
            bars["bar"].update(int(steps))

    def _close():
        if "bar" in bars:
            bars.pop("bar").close()

    def _when(pred, callback, *args):
        jax.lax.cond(
            pred,
            lambda _: io_callback(callback, None, *args, ordered=True),
            lambda _: None,
            operand=None,
        )

    def update_progress_bar(iter_num):
        done = iter_num + 1
        _when(iter_num == 0, _open)
        _when(done % print_rate == 0, _advance, print_rate)
        if remainder:
            _when(done == n, _advance, remainder)

    def close_progress_bar(result, iter_num):
        _when(iter_num == n - 1, _close)
        return result

    return update_progress_bar, close_progress_bar


def scan_with_progress(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **tqdm_kwargs,
) -> Callable:
    """Decorator adding a live progress bar to a ``lax.scan`` body.

    The scanned function must receive the iteration number as ``x``.
    """
    update_progress_bar, close_progress_bar = build_tqdm_progress_bar(
        n, print_rate, desc, **tqdm_kwargs
    )

    def decorator(func):
        def wrapper(carry, x):
            iter_num = x[0] if isinstance(x, tuple) else x
            update_progress_bar(iter_num)
            return close_progress_bar(func(carry, x), iter_num)

        return wrapper

    return decorator
