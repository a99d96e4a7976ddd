"""フォームヘルパーで使用される列挙型を定義するモジュール。"""

from enum import StrEnum


class Alignment(StrEnum):
    """フォームの配置モードを定義する列挙型。

    Attributes:
        DEFAULT (str): ラベルと入力を縦に積む標準レイアウト。
        HORIZONTAL (str): グリッドでラベルを入力の横に並べるレイアウト。
        INLINE (str): 1行に詰めたコンパクトなレイアウト。
    """

    DEFAULT = "default"
    HORIZONTAL = "horizontal"
    INLINE = "inline"


class GridPosition(StrEnum):
    """横並びフォームのグリッド位置。"""

    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"
