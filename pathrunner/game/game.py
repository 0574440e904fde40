# pathrunner/game/game.py
import sys, argparse, logging
from typing import Mapping, Optional, Tuple
import pygame
from pygame import (
    K_SPACE, K_ESCAPE, K_p, K_r, K_n,
    K_LEFT, K_RIGHT, K_UP, K_DOWN, K_a, K_d, K_w, K_s,
)
from .config import (
    WIDTH, HEIGHT, FPS, MAX_DT, SEED_DEFAULT,
    COLOR_BG, COLOR_FG, COLOR_PATH, COLOR_BLUE, COLOR_GREEN,
    COLOR_BULLET, COLOR_WARNING, COLOR_DANGER,
)
from .geometry import clamp
from .player import Tint
from .simulation import Simulation, Frame, Status

TINT_RGB = {Tint.BLUE: COLOR_BLUE, Tint.GREEN: COLOR_GREEN}

# arrows = full speed, WASD = fine control at half speed
KEY_DIRECTIONS = {
    K_LEFT: (-1.0, 0.0), K_RIGHT: (1.0, 0.0), K_UP: (0.0, -1.0), K_DOWN: (0.0, 1.0),
    K_a: (-0.5, 0.0), K_d: (0.5, 0.0), K_w: (0.0, -0.5), K_s: (0.0, 0.5),
}


def parse_args():
    p = argparse.ArgumentParser()
    p.add_argument("--seed", type=int, default=None,
                   help="Path seed. Omit for SEED_DEFAULT, use -1 for random each launch.")
    p.add_argument("--log-level", default="WARNING",
                   help="Python logging level for the simulation (DEBUG shows spawns/patterns)")
    return p.parse_args()


def direction_from_keys(keys: Mapping[int, bool]) -> Tuple[float, float]:
    """Sum the held movement keys into a direction vector clamped to [-1, 1]."""
    dx = dy = 0.0
    for key, (kx, ky) in KEY_DIRECTIONS.items():
        if keys[key]:
            dx += kx
            dy += ky
    return clamp(dx, -1.0, 1.0), clamp(dy, -1.0, 1.0)


def _px_rect(x: float, y: float, w: float, h: float) -> pygame.Rect:
    return pygame.Rect(round(x * WIDTH), round(y * HEIGHT),
                       max(1, round(w * WIDTH)), max(1, round(h * HEIGHT)))


def draw_frame(surf: pygame.Surface, frame: Frame, font: Optional[pygame.font.Font] = None):
    """Draw one simulation frame (path, entities, player, HUD)."""
    surf.fill(COLOR_BG)
    for seg in frame.segments:
        pygame.draw.rect(surf, COLOR_PATH, _px_rect(seg.x, seg.y, seg.width, seg.height))

    for o in frame.obstacles:
        pygame.draw.rect(surf, TINT_RGB[o.color], _px_rect(o.x, o.y, o.width, o.height),
                         border_radius=3)

    for w in frame.warnings:
        cx = round(w.x * WIDTH)
        pygame.draw.polygon(surf, COLOR_WARNING, ((cx - 7, 0), (cx + 7, 0), (cx, 12)))
        pygame.draw.polygon(surf, COLOR_WARNING,
                            ((cx - 7, HEIGHT), (cx + 7, HEIGHT), (cx, HEIGHT - 12)))

    for p in frame.projectiles:
        cx, cy = p.center
        color = (120, 60, 70) if p.passed_player else COLOR_BULLET
        pygame.draw.circle(surf, color, (round(cx * WIDTH), round(cy * HEIGHT)),
                           max(1, round(p.radius * WIDTH)))

    pl = frame.player
    color = TINT_RGB[pl.color] if frame.status is not Status.GAME_OVER else COLOR_DANGER
    pygame.draw.circle(surf, color, (round(pl.x), round(pl.y)), round(pl.radius))
    pygame.draw.circle(surf, COLOR_FG, (round(pl.x), round(pl.y)), round(pl.radius), width=2)

    if font is not None:
        hud = f"Score: {frame.score}   Lvl: {frame.difficulty_level}   {frame.pattern.label}"
        surf.blit(font.render(hud, True, COLOR_FG), (12, 10))
        if frame.banner:
            txt = font.render(frame.banner, True, COLOR_WARNING)
            surf.blit(txt, (WIDTH // 2 - txt.get_width() // 2, 60))


def run():
    args = parse_args()
    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Resolve seed: None -> use SEED_DEFAULT; -1 -> random
    if args.seed is None:
        launch_seed = SEED_DEFAULT
    elif args.seed == -1:
        launch_seed = None  # signals Simulation to randomize
    else:
        launch_seed = args.seed

    pygame.init()
    pygame.display.set_caption("Path Runner")
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("jetbrainsmono", 18)

    sim = Simulation(launch_seed)

    btn_w, btn_h = 200, 70
    restart_rect = pygame.Rect((WIDTH - btn_w)//2, (HEIGHT - btn_h)//2, btn_w, btn_h)

    while True:
        dt = clock.tick(FPS) / 1000.0
        if dt > MAX_DT:  # clamp stalls
            dt = MAX_DT

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pygame.quit(); sys.exit()
            if event.type == pygame.WINDOWFOCUSLOST:
                sim.player.stop()
            if event.type == pygame.KEYDOWN:
                if event.key == K_ESCAPE:
                    pygame.quit(); sys.exit()
                if event.key == K_SPACE:
                    sim.toggle_color()
                if event.key == K_p:
                    if not sim.pause():
                        sim.resume()
                if event.key == K_r and sim.status is not Status.RUNNING:
                    # Restart SAME seed
                    sim.restart(sim.seed)
                if event.key == K_n and sim.status is not Status.RUNNING:
                    # Restart with NEW RANDOM seed
                    sim.restart(None)
            if (event.type == pygame.MOUSEBUTTONDOWN and event.button == 1
                    and sim.status is Status.GAME_OVER and restart_rect.collidepoint(event.pos)):
                sim.restart(sim.seed)

        sim.set_direction(*direction_from_keys(pygame.key.get_pressed()))
        sim.step(dt)

        for ev in sim.drain_events():
            if ev.kind == "game_over":
                print(f"GAME OVER score={ev.score} cause={ev.cause} seed={sim.seed}")

        frame = sim.frame()
        draw_frame(screen, frame, font)
        screen.blit(font.render("arrows/WASD move | SPACE color | P pause | ESC quit",
                                True, (160, 180, 210)), (12, 32))

        if frame.status is Status.PAUSED:
            txt = font.render("Paused (P to resume, R restart)", True, COLOR_FG)
            screen.blit(txt, (WIDTH // 2 - txt.get_width() // 2, HEIGHT // 2))

        if frame.status is Status.GAME_OVER:
            pygame.draw.rect(screen, (40, 60, 90), restart_rect, border_radius=10)
            pygame.draw.rect(screen, (90, 130, 180), restart_rect, width=2, border_radius=10)

            btn_txt = font.render(f"Score {frame.score} - Restart (R)", True, (220, 235, 255))
            screen.blit(btn_txt, (restart_rect.centerx - btn_txt.get_width()//2,
                                  restart_rect.centery - btn_txt.get_height() - 5))

            btn_txt2 = font.render("New Random (N)", True, (220, 235, 255))
            screen.blit(btn_txt2, (restart_rect.centerx - btn_txt2.get_width()//2,
                                   restart_rect.centery + 5))

        pygame.display.flip()

if __name__ == "__main__":
    run()
