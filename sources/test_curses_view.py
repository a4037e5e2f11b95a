import pytest

from curses_view import level_bar


@pytest.mark.parametrize("value, full, expected", [
    (25, 50, "#####....."),
    (0, 100, ".........."),
    (100, 100, "##########"),
    (-7, 50, ".........."),      # below range clamps to empty
    (180, 100, "##########"),    # above range clamps to full
])
def test_level_bar_clamps(value, full, expected):
    assert level_bar(value, full, width=10) == expected


def test_level_bar_zero_scale():
    assert level_bar(10, 0, width=4) == "...."
