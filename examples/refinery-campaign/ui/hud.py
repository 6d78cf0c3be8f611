"""Island slots, resource readout, and condition list."""
from __future__ import annotations

import pygame

from tick_campaign import ProgressionController

from game.island import MAX_SLOTS, Island

SCREEN_W = 760
SCREEN_H = 520
SLOT_SIZE = 90

MODE_COLORS = {
    None: (90, 90, 100),
    "fuel": (230, 150, 40),
    "materials": (80, 170, 230),
}
MET = (100, 230, 120)
UNMET = (200, 200, 200)
DANGER = (255, 90, 90)


class Hud:
    def __init__(self) -> None:
        self._font: pygame.font.Font | None = None
        self.message = ""
        self.message_color = UNMET

    def _get_font(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.SysFont("monospace", 15)
        return self._font

    def set(self, message: str, color: tuple[int, int, int] = UNMET) -> None:
        self.message = message
        self.message_color = color

    def _text(self, surface: pygame.Surface, text: str, pos: tuple[int, int],
              color: tuple[int, int, int] = UNMET) -> None:
        surface.blit(self._get_font().render(text, True, color), pos)

    def draw(self, surface: pygame.Surface, island: Island,
             controller: ProgressionController) -> None:
        level = controller.current_level
        title = f"Level {level.id}: {level.name}" if level else "No level"
        self._text(surface, title, (16, 12), (255, 255, 255))
        self._text(surface, f"Turn {island.turn}", (SCREEN_W - 120, 12))

        for i in range(MAX_SLOTS):
            rect = pygame.Rect(16 + i * (SLOT_SIZE + 12), 48, SLOT_SIZE, SLOT_SIZE)
            if i < len(island.slots):
                mode = island.slots[i]
                pygame.draw.rect(surface, MODE_COLORS[mode], rect)
                self._text(surface, f"{i + 1}:{mode or 'idle'}", (rect.x + 4, rect.bottom - 20),
                           (20, 20, 20))
            else:
                pygame.draw.rect(surface, (50, 50, 60), rect, 2)

        y = 160
        fuel_color = DANGER if island.fuel <= 3 else UNMET
        self._text(surface, f"Fuel {island.fuel:5.1f}", (16, y), fuel_color)
        self._text(surface, f"Materials {island.materials:5.1f}", (200, y))
        self._text(surface, f"Waste {island.waste:5.1f}", (420, y))

        status = controller.conditions.get_status()
        y += 36
        self._text(surface, f"Win ({status['win_progress']:.0%})", (16, y), (255, 255, 255))
        for cond in status["win_conditions"]:
            y += 22
            color = MET if cond["is_met"] else UNMET
            self._text(surface, f"  {cond['description']}  {cond['progress']:.0%}", (16, y), color)
        y += 30
        self._text(surface, "Lose", (16, y), (255, 255, 255))
        for cond in status["lose_conditions"]:
            y += 22
            color = DANGER if cond["progress"] >= 0.7 else UNMET
            self._text(surface, f"  {cond['description']}", (16, y), color)

        stats = controller.stats
        self._text(
            surface,
            f"Attempts {stats.attempts}  Wins {stats.victories}  Losses {stats.defeats}",
            (16, SCREEN_H - 64),
        )
        self._text(
            surface,
            "F/M/I build  1-6 cycle mode  X demolish  SPACE end turn  R restart  N next",
            (16, SCREEN_H - 40),
            (140, 140, 160),
        )
        if self.message:
            self._text(surface, self.message, (16, SCREEN_H - 88), self.message_color)
