"""横並びフォームのグリッドクラス生成。"""

from collections.abc import Mapping
from typing import Any, Final

from .enums import GridPosition

DEFAULT_BREAKPOINT: Final[str] = "md"


def grid_class(grid: Mapping[str, Any] | None, position: str, *, offset: bool = False) -> str:
    """グリッド指定からBootstrapの列クラスを生成する。

    位置に整数が直接指定されていれば ``md`` ブレークポイントのクラスを、
    ブレークポイントごとの辞書であれば該当する全ブレークポイントのクラスを返す。

    Examples:
        >>> grid_class({"left": 2, "middle": 6}, "left")
        'col-md-2'
        >>> grid_class({"sm": {"left": 4}, "lg": {"left": 2}}, "left", offset=True)
        'col-sm-offset-4 col-lg-offset-2'

    Args:
        grid: グリッド指定。
        position: left / middle / right のいずれか。
        offset: Trueなら ``offset-`` 付きのクラスにする。

    Returns:
        空白区切りのクラス文字列。該当がなければ空文字。
    """
    if not grid:
        return ""
    position = GridPosition(position)
    prefix = "col-{}-offset-" if offset else "col-{}-"

    if position in grid:
        return f"{prefix.format(DEFAULT_BREAKPOINT)}{grid[position]}"

    classes = [
        f"{prefix.format(screen)}{positions[position]}"
        for screen, positions in grid.items()
        if isinstance(positions, Mapping) and position in positions
    ]
    return " ".join(classes)
