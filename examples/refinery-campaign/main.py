"""Refinery Campaign: play the bundled levels on a toy island.

Controls:
  F / M / I   Build a fuel / materials / idle refinery
  1-6         Cycle the production mode of a slot
  X           Demolish the newest refinery
  Space       End the turn and check conditions
  R           Restart the level
  N           Skip to the next unlocked level
  Escape      Quit
"""
from __future__ import annotations

import argparse
import logging
import sys

import pygame

from tick_campaign import (
    CampaignConfig,
    LevelRegistry,
    ProgressionController,
    SignalBus,
    default_campaign,
    make_progression_system,
)

from game.island import Island
from ui.hud import DANGER, MET, SCREEN_H, SCREEN_W, Hud

FPS = 30

logger = logging.getLogger("refinery-campaign")


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Refinery Campaign demo")
    p.add_argument("--levels", type=str, default=None,
                   metavar="FILE", help="YAML level file (default: bundled campaign)")
    p.add_argument("--delay", type=float, default=2.0,
                   help="Seconds before advancing after a win (default: 2.0)")
    p.add_argument("--log-level", type=str, default="INFO",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    levels = LevelRegistry.from_yaml(args.levels) if args.levels else default_campaign()
    bus = SignalBus()
    controller = ProgressionController(
        levels, bus=bus, config=CampaignConfig(celebration_delay=args.delay)
    )
    controller.bind()
    system = make_progression_system(controller, bus)
    island = Island()
    hud = Hud()

    def on_started(signal: str, data: dict) -> None:
        island.reset()
        hud.set(f"{data['level'].name}: {data['level'].description}")

    def on_completed(signal: str, data: dict) -> None:
        hud.set(f"Level complete on turn {data['completion_turn']}!", MET)

    def on_failed(signal: str, data: dict) -> None:
        causes = ", ".join(o.condition.description for o in data["triggered_conditions"])
        hud.set(f"Level failed: {causes}. Press R to retry.", DANGER)

    def on_campaign(signal: str, data: dict) -> None:
        if data["is_campaign_complete"]:
            hud.set("Campaign complete. Thanks for playing!", MET)

    def on_condition_signal(signal: str, data: dict) -> None:
        turn = data["result"].turn if "result" in data else data["turn"]
        logger.info("%s on turn %d", signal, turn)

    bus.subscribe("progression:levelStarted", on_started)
    bus.subscribe("progression:levelCompleted", on_completed)
    bus.subscribe("progression:levelFailed", on_failed)
    bus.subscribe("progression:campaignCompleted", on_campaign)
    bus.subscribe("conditions:*", on_condition_signal)

    controller.advance_to_next_level()
    bus.flush()

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_W, SCREEN_H))
    pygame.display.set_caption("Refinery Campaign")
    clock = pygame.time.Clock()

    build_keys = {pygame.K_f: "fuel", pygame.K_m: "materials", pygame.K_i: None}
    slot_keys = [pygame.K_1, pygame.K_2, pygame.K_3, pygame.K_4, pygame.K_5, pygame.K_6]

    running = True
    while running:
        clock.tick(FPS)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type != pygame.KEYDOWN:
                continue
            elif event.key == pygame.K_ESCAPE:
                running = False
            elif event.key in build_keys:
                if not island.build(build_keys[event.key]):
                    hud.set("No free slots", DANGER)
            elif event.key in slot_keys:
                island.cycle_mode(slot_keys.index(event.key))
            elif event.key == pygame.K_x:
                island.demolish()
            elif event.key == pygame.K_SPACE and controller.is_level_active:
                island.end_turn()
                system(island.snapshot())
            elif event.key == pygame.K_r:
                bus.publish("game:restartLevel")
            elif event.key == pygame.K_n:
                bus.publish("game:nextLevel")

        # Celebration delay runs on wall time between turns
        controller.update()
        bus.flush()

        screen.fill((20, 20, 30))
        hud.draw(screen, island, controller)
        pygame.display.flip()

    controller.destroy()
    pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()
