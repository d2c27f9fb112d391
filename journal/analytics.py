from __future__ import annotations

import math
from datetime import date

import pandas as pd

from journal.constants import EMOTION_LABELS, EMOTIONS

ENTRY_COLUMNS = ["date", "emotion", "intensity", "notes", "pnl", "trade_count"]


def _as_list(entries):
    if isinstance(entries, dict):
        return list(entries.values())
    return list(entries or [])


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def entries_frame(entries) -> pd.DataFrame:
    rows = [
        {
            "date": entry.date,
            "emotion": entry.emotion,
            "intensity": entry.intensity,
            "notes": entry.notes or "",
            "pnl": entry.pnl,
            "trade_count": len(entry.trading_data or []),
        }
        for entry in _as_list(entries)
    ]
    df = pd.DataFrame(rows, columns=ENTRY_COLUMNS)
    if df.empty:
        return df
    df["date"] = pd.to_datetime(df["date"])
    df["intensity"] = df["intensity"].astype(int)
    df["pnl"] = pd.to_numeric(df["pnl"], errors="coerce")
    return df.sort_values("date", kind="stable").reset_index(drop=True)


def current_month_entries(entries, today: date | None = None):
    today = today or date.today()
    prefix = f"{today.year}-{today.month:02d}"
    return [entry for entry in _as_list(entries) if entry.date.startswith(prefix)]


def _most_frequent(df):
    # Ties go to the emotion logged first.
    counts = df["emotion"].value_counts(sort=False)
    return counts.idxmax()


def month_stats(entries) -> dict:
    df = entries_frame(entries)
    if df.empty:
        return {"total": 0, "most_frequent": "N/A", "avg_intensity": 0}
    top = _most_frequent(df)
    return {
        "total": int(len(df)),
        "most_frequent": EMOTION_LABELS.get(top, top),
        "avg_intensity": round(float(df["intensity"].mean()), 1),
    }


def monthly_summaries(entries) -> list[dict]:
    df = entries_frame(entries)
    if df.empty:
        return []
    summaries = []
    for (year, month), group in df.groupby([df["date"].dt.year, df["date"].dt.month]):
        counts = group["emotion"].value_counts()
        summaries.append(
            {
                "year": int(year),
                "month": int(month),
                "total_entries": int(len(group)),
                "most_frequent": _most_frequent(group),
                "avg_intensity": round(float(group["intensity"].mean()), 1),
                "emotion_counts": {key: int(counts.get(key, 0)) for key, _ in EMOTIONS},
            }
        )
    summaries.sort(key=lambda item: (item["year"], item["month"]), reverse=True)
    return summaries


def pnl_stats(entries) -> dict:
    df = entries_frame(entries)
    traded = df[df["pnl"].notna()] if not df.empty else df
    if traded.empty:
        return {"total_pnl": 0.0, "win_rate": 0, "avg_pnl": 0.0, "total_trades": 0}
    total = float(traded["pnl"].sum())
    wins = int((traded["pnl"] > 0).sum())
    return {
        "total_pnl": round(total, 2),
        "win_rate": _round_half_up(wins / len(traded) * 100),
        "avg_pnl": round(total / len(traded), 2),
        "total_trades": int(traded["trade_count"].sum()),
    }


def intensity_pnl_points(entries) -> list[tuple[int, float]]:
    df = entries_frame(entries)
    if df.empty:
        return []
    traded = df[df["pnl"].notna()]
    return [(int(row.intensity), float(row.pnl)) for row in traded.itertuples(index=False)]
