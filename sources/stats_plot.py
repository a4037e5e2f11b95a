#!/usr/bin/env python3
"""
Flower statistics: the history of one device as four line charts.

Features
--------
* Reads the device log back through the reading store (either backend).
* One chart per value: temperature, air humidity, soil moisture, light.
* The x axis is the measurement number; the log keeps no timestamps.
* Refreshes on a timer, so a running logger shows up live.
"""

import sys
from dataclasses import asdict
from typing import Iterable

import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from matplotlib.animation import FuncAnimation

import config
from models import LogEntry
from reading_store import ReadingStore, open_store

COLUMNS = ["temperature", "humidity", "soil_moisture", "light_level"]
TITLES = {
    "temperature": "Температура, °C",
    "humidity": "Влажность воздуха, %",
    "soil_moisture": "Влажность почвы, %",
    "light_level": "Освещенность, %",
}
COLORS = {
    "temperature": "#d62728",
    "humidity": "#1f77b4",
    "soil_moisture": "#8c564b",
    "light_level": "#ff7f0e",
}


def history_frame(entries: Iterable[LogEntry]) -> pd.DataFrame:
    """
    One row per log entry, indexed by measurement number starting at 1.
    An empty log gives an empty frame with the same columns.
    """
    df = pd.DataFrame([asdict(e) for e in entries], columns=COLUMNS)
    df.index = pd.RangeIndex(start=1, stop=len(df) + 1, name="measurement")
    return df


class FlowerStatsPlot:
    """
    Live statistics figure for one device.

    Parameters
    ----------
    store : ReadingStore
        Where the history is read from.
    device_key : str
        Which device to show.
    interval_ms : int, optional
        Refresh interval of the animation.
    max_points : int, optional
        Only the newest N entries are drawn.
    """

    def __init__(self, store: ReadingStore, device_key: str,
                 interval_ms: int = config.STATS_INTERVAL_MS,
                 max_points: int = 2000):
        self.store = store
        self.device_key = device_key
        self.interval_ms = interval_ms
        self.max_points = max_points
        self.data_df = pd.DataFrame(columns=COLUMNS)

        sns.set_style("whitegrid")
        self.fig, axes = plt.subplots(len(COLUMNS), 1, figsize=(12, 10), sharex=True)
        self.axes = dict(zip(COLUMNS, axes))
        self.lines = {}
        self.max_tags = {}
        for column, ax in self.axes.items():
            self.lines[column], = ax.plot([], [], color=COLORS[column], linewidth=2)
            ax.set_ylabel(TITLES[column], color=COLORS[column])
            self.max_tags[column] = ax.text(
                0.98, 0.95, "",
                transform=ax.transAxes,
                ha="right", va="top",
                fontsize=9,
                color=COLORS[column],
                bbox=dict(facecolor="white", edgecolor=COLORS[column], pad=1.5),
            )
        axes[-1].set_xlabel("Измерение")

        name = store.get_name(device_key) or device_key or "?"
        self.fig.suptitle(f"Статистика цветка {name}")
        self.fig.tight_layout()

    def refresh(self) -> pd.DataFrame:
        """Reload the log and redraw every line; returns the plotted frame."""
        df = history_frame(self.store.read_all(self.device_key))
        if len(df) > self.max_points:
            df = df.iloc[-self.max_points:]
        self.data_df = df

        for column, ax in self.axes.items():
            self.lines[column].set_data(df.index, df[column])
            if df.empty:
                self.max_tags[column].set_text("")
                continue
            low, high = df[column].min(), df[column].max()
            pad = max(1, (high - low) * 0.1)
            ax.set_xlim(df.index.min(), max(df.index.max(), df.index.min() + 1))
            ax.set_ylim(low - pad, high + pad)
            self.max_tags[column].set_text(f"max {high}")
        return df

    def _animate(self, frame_idx):
        self.refresh()
        return tuple(self.lines.values()) + tuple(self.max_tags.values())

    def save(self, path) -> None:
        self.refresh()
        self.fig.savefig(path)

    def run(self) -> None:
        """Start the live plot and block until the window is closed."""
        self.refresh()
        anim = FuncAnimation(self.fig, func=self._animate,
                             interval=self.interval_ms, blit=False,
                             cache_frame_data=False)
        plt.show()


if __name__ == "__main__":
    # usage: python stats_plot.py [device_key]
    device_key = sys.argv[1] if len(sys.argv) > 1 else config.DEVICE_NAME
    store = open_store()
    try:
        FlowerStatsPlot(store, device_key).run()
    finally:
        store.close()
