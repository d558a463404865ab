"""Interactive and headless drivers for the CHIP-8 core.

The driver owns everything outside a single instruction: ROM loading, host
keyboard mapping, frame pacing, wall-clock 60 Hz timer decay, rendering
and the reaction to faults.
"""

import sys
from typing import Optional

import hydra
import jax
import jax.numpy as jnp
import pygame
from hydra.utils import to_absolute_path
from omegaconf import DictConfig, OmegaConf

from chipjax.state import EmulatorState, create_state
from chipjax.emulator import step, tick, fetch, decrement_timers, load_rom_bytes
from chipjax.errors import Chip8Fault, raise_for_fault
from chipjax.keypad import press_key, release_key, is_waiting_for_key
from chipjax.logging import EmulatorLogger, scan_with_progress
from chipjax.rendering import chip8_display_to_rgb, create_color_scheme, save_screenshot
from chipjax.constants import SCREEN_WIDTH, SCREEN_HEIGHT, TIMER_HZ

# COSMAC VIP keypad layout on the left-hand block of a QWERTY keyboard
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


def read_rom(path: str) -> bytes:
    with open(path, 'rb') as f:
        return f.read()


def run_headless(
    state: EmulatorState,
    frames: int,
    instructions_per_frame: int = 10,
    show_progress: bool = True,
) -> EmulatorState:
    """Run ``frames`` frames under ``jax.jit`` without a window.

    Timers decay once every ``instructions_per_frame`` cycles, matching the
    interactive driver. The machine freezes on the first fault; the caller
    inspects ``state.fault`` or calls ``raise_for_fault``.
    """
    cycles = frames * instructions_per_frame

    def run_cycle(state, i):
        state = step(state)
        state = jax.lax.cond(
            i % instructions_per_frame == instructions_per_frame - 1,
            decrement_timers,
            lambda s: s,
            state
        )
        return state, None

    if show_progress:
        run_cycle = scan_with_progress(cycles)(run_cycle)

    @jax.jit
    def _run(state):
        state, _ = jax.lax.scan(run_cycle, state, jnp.arange(cycles))
        return state

    return _run(state)


class Chip8Runner:
    """pygame front end that paces frames at ``fps`` and timers at 60 Hz."""

    def __init__(
        self,
        rom_data: bytes,
        logger: EmulatorLogger,
        seed: int = 0,
        scale: int = 10,
        color_scheme: str = "classic",
        instructions_per_frame: int = 10,
        fps: int = 60,
    ):
        self.rom_data = rom_data
        self.logger = logger
        self.seed = seed
        self.scale = scale
        self.on_color, self.off_color = create_color_scheme(color_scheme)
        self.instructions_per_frame = instructions_per_frame
        self.fps = fps
        self.cycles = 0
        # Elapsed time in units of 1/(1000 * TIMER_HZ) s, not yet spent on timer ticks
        self.timer_clock = 0
        self.state = self.reset()

    def reset(self) -> EmulatorState:
        """Fresh machine with the ROM loaded."""
        state = create_state(jax.random.PRNGKey(self.seed))
        return load_rom_bytes(state, self.rom_data)

    def handle_event(self, event) -> bool:
        """Apply one pygame event. Returns False when the session should end."""
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False
            if event.key == pygame.K_F5:
                self.state = self.reset()
                self.logger.info("Reset")
            elif event.key in KEY_MAP:
                self.state = press_key(self.state, KEY_MAP[event.key])
        elif event.type == pygame.KEYUP and event.key in KEY_MAP:
            self.state = release_key(self.state, KEY_MAP[event.key])
        return True

    def advance_timers(self, elapsed_ms: Optional[int] = None) -> int:
        """Decay the timers by the number of 60 Hz periods in ``elapsed_ms``.

        Leftover time carries over to the next call. Without ``elapsed_ms`` one
        frame at ``fps`` is assumed. Returns the number of decrements applied.
        """
        if elapsed_ms is None:
            self.timer_clock += TIMER_HZ * 1000 // self.fps
        else:
            self.timer_clock += TIMER_HZ * int(elapsed_ms)
        ticks, self.timer_clock = divmod(self.timer_clock, 1000)
        # Timers are 8-bit, anything past 255 ticks is a no-op
        for _ in range(min(ticks, 255)):
            self.state = decrement_timers(self.state)
        return ticks

    def run_frame(self, elapsed_ms: Optional[int] = None):
        """Execute one frame worth of cycles, then decay the timers.

        Raises:
            Chip8Fault: when an instruction faults
        """
        for _ in range(self.instructions_per_frame):
            if is_waiting_for_key(self.state):
                break
            if self.logger.is_enabled_for("DEBUG"):
                _, instruction = fetch(self.state)
                self.logger.log_instruction(int(self.state.pc), int(instruction))
            self.state = tick(self.state)
            self.cycles += 1
        self.advance_timers(elapsed_ms)

    def draw(self, screen):
        frame = chip8_display_to_rgb(self.state.display, self.scale, self.on_color, self.off_color)
        screen.blit(pygame.surfarray.make_surface(frame.swapaxes(0, 1)), (0, 0))
        pygame.display.flip()

    def run(self) -> Optional[Chip8Fault]:
        """Main loop. Returns the fault that stopped the session, if any."""
        pygame.init()
        screen = pygame.display.set_mode((SCREEN_WIDTH * self.scale, SCREEN_HEIGHT * self.scale))
        pygame.display.set_caption("chipjax")
        clock = pygame.time.Clock()

        fault = None
        running = True
        try:
            while running:
                elapsed_ms = clock.tick(self.fps)
                for event in pygame.event.get():
                    running = self.handle_event(event) and running

                try:
                    self.run_frame(elapsed_ms)
                except Chip8Fault as e:
                    self.logger.log_fault(e)
                    fault = e
                    running = False

                self.draw(screen)
        finally:
            pygame.quit()

        self.logger.log_session_end(self.cycles)
        return fault


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    logger = EmulatorLogger(log_level=cfg.log_level)
    logger.log_session_start(OmegaConf.to_container(cfg))

    if cfg.rom is None:
        logger.critical("No ROM given, run with rom=path/to/program.ch8")
        sys.exit(2)

    rom_path = to_absolute_path(cfg.rom)
    rom_data = read_rom(rom_path)
    logger.log_rom_loaded(rom_path, len(rom_data))

    if cfg.headless:
        state = load_rom_bytes(create_state(jax.random.PRNGKey(cfg.seed)), rom_data)
        state = run_headless(state, cfg.frames, cfg.instructions_per_frame)
        if cfg.screenshot:
            save_screenshot(state.display, to_absolute_path(cfg.screenshot), cfg.scale, cfg.color_scheme)
            logger.info(f"Saved screenshot to {cfg.screenshot}")
        try:
            raise_for_fault(state)
        except Chip8Fault as e:
            logger.log_fault(e)
            sys.exit(1)
        logger.log_session_end(cfg.frames * cfg.instructions_per_frame)
        return

    runner = Chip8Runner(
        rom_data,
        logger,
        seed=cfg.seed,
        scale=cfg.scale,
        color_scheme=cfg.color_scheme,
        instructions_per_frame=cfg.instructions_per_frame,
        fps=cfg.fps,
    )
    if runner.run() is not None:
        sys.exit(1)


if __name__ == "__main__":
    main()
