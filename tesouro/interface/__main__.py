"""
Tesouro command-line entry point.

Usage:
    tesouro play [--biome praia] [--seed 7]
    tesouro headless [--seed 7]
    tesouro simulate --persona balanced --games 20
    tesouro serve --port 8000
"""

import argparse
import logging
from pathlib import Path

from ..config import load_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tesouro", description="Tesouro deck engine")
    parser.add_argument("--config", type=Path, help="YAML or JSON config override")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    sub = parser.add_subparsers(dest="command", required=True)

    play = sub.add_parser("play", help="Play in the terminal")
    play.add_argument("--biome", help="Starting biome")
    play.add_argument("--seed", type=int, help="Random seed")

    headless = sub.add_parser("headless", help="JSON lines on stdin/stdout")
    headless.add_argument("--biome", help="Starting biome")
    headless.add_argument("--seed", type=int, help="Random seed")
    headless.add_argument("--sessions-dir", type=Path, default=Path("sessions"))

    simulate = sub.add_parser("simulate", help="Autoplay seeded games")
    simulate.add_argument("--persona", default="balanced")
    simulate.add_argument("--games", type=int, default=10)
    simulate.add_argument("--turns", type=int, default=30)
    simulate.add_argument("--seed", type=int, default=0)
    simulate.add_argument("--biome", help="Biome for every game")
    simulate.add_argument("--out", type=Path, help="Directory for the markdown report")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--sessions-dir", type=Path, default=Path("sessions"))

    return parser


def main(argv: list[str] | None = None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command == "play":
        from ..systems.turns import GameEngine
        from ..tools.rng import SeededRandom
        from .cli import run_cli

        engine = GameEngine(
            config=load_config(args.config),
            rng=SeededRandom(args.seed),
            biome=args.biome,
        )
        run_cli(engine)

    elif args.command == "headless":
        from .headless import run_headless

        run_headless(
            seed=args.seed,
            biome=args.biome,
            sessions_dir=args.sessions_dir,
            config_path=args.config,
        )

    elif args.command == "simulate":
        from ..simulation import run_simulation
        from .renderer import console

        report = run_simulation(
            persona=args.persona,
            games=args.games,
            max_turns=args.turns,
            seed=args.seed,
            biome=args.biome,
            config=load_config(args.config),
        )
        console.print_json(data=report.to_dict())
        if args.out:
            path = report.save(args.out)
            console.print(f"Report saved to {path}")

    elif args.command == "serve":
        from ..api.main import serve

        serve(host=args.host, port=args.port, sessions_dir=args.sessions_dir, config_path=args.config)


if __name__ == "__main__":
    main()
