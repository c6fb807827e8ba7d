from __future__ import annotations

import argparse
import subprocess
import sys


def _run_bootstrap() -> None:
    subprocess.run(
        [sys.executable, "-m", "pip", "install", "-e", "."],
        check=True,
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the stock lookup Discord bot.")
    parser.add_argument(
        "--bootstrap",
        action="store_true",
        help="Install/update dependencies before starting.",
    )
    parser.add_argument(
        "--update-tickers",
        action="store_true",
        help="Regenerate data/japan_tickers.json from the JPX list before starting.",
    )
    args = parser.parse_args()

    if args.bootstrap:
        _run_bootstrap()
    if args.update_tickers:
        from scripts.update_ticker_list import main as update_main

        update_main([])
    from bot import main as bot_main

    bot_main()


if __name__ == "__main__":
    main()
