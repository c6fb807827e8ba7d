"""Regenerate data/japan_tickers.json from the JPX listed issues spreadsheet."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import re
from io import BytesIO
from pathlib import Path

import aiohttp
import pandas as pd

log = logging.getLogger(__name__)

# JPX "listed issues" workbook (Shift_JIS .xls, first sheet).
JPX_LIST_URL = (
    "https://www.jpx.co.jp/markets/statistics-equities/misc/"
    "tvdivq0000001vg2-att/data_j.xls"
)
DEFAULT_OUTPUT = Path(__file__).resolve().parents[1] / "data" / "japan_tickers.json"
CODE_COLUMN = "コード"
NAME_COLUMN = "銘柄名"
CODE_RE = re.compile(r"^[0-9]{4}$")


def _code(value) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip().zfill(4)


def to_entries(df: pd.DataFrame) -> list[dict[str, str]]:
    """Extract ``{"code", "name"}`` rows, keeping only 4-digit codes with a name."""
    missing = {CODE_COLUMN, NAME_COLUMN} - set(df.columns)
    if missing:
        raise ValueError(f"missing column(s): {', '.join(sorted(missing))}")

    out: list[dict[str, str]] = []
    for code_raw, name_raw in zip(df[CODE_COLUMN], df[NAME_COLUMN]):
        code = _code(code_raw)
        name = "" if pd.isna(name_raw) else str(name_raw).strip()
        if not CODE_RE.match(code) or not name:
            continue
        out.append({"code": code, "name": name})
    return out


async def download(url: str = JPX_LIST_URL, *, timeout_s: float = 60.0) -> bytes:
    timeout = aiohttp.ClientTimeout(total=timeout_s)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        async with session.get(url) as resp:
            resp.raise_for_status()
            return await resp.read()


def write_entries(entries: list[dict[str, str]], output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    tmp = output.with_suffix(".tmp")
    tmp.write_text(json.dumps(entries, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(output)


async def update(url: str = JPX_LIST_URL, output: Path = DEFAULT_OUTPUT) -> int:
    content = await download(url)
    df = pd.read_excel(BytesIO(content), sheet_name=0)
    entries = to_entries(df)
    write_entries(entries, output)
    log.info("Saved %d tickers to %s", len(entries), output)
    return len(entries)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--url", default=JPX_LIST_URL)
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    try:
        count = asyncio.run(update(args.url, args.output))
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
        log.error("Ticker list update failed: %s", exc)
        raise SystemExit(1) from exc
    print(f"saved {count} tickers: {args.output}")


if __name__ == "__main__":
    main()
