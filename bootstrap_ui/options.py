"""オプション辞書のCSSクラス操作。

フィールドやボタンのオプション辞書が持つ ``class`` を、文字列・リストのどちらで
指定されていても同じように扱うための関数群。
"""

from collections.abc import Iterable, Mapping
from typing import Any, Final

BUTTON_CLASSES: Final[tuple[str, ...]] = (
    "default",
    "btn-default",
    "success",
    "btn-success",
    "warning",
    "btn-warning",
    "danger",
    "btn-danger",
    "info",
    "btn-info",
    "primary",
    "btn-primary",
    "link",
    "btn-link",
)

BUTTON_CLASS_ALIASES: Final[dict[str, str]] = {
    "default": "btn-default",
    "success": "btn-success",
    "warning": "btn-warning",
    "danger": "btn-danger",
    "info": "btn-info",
    "primary": "btn-primary",
    "link": "btn-link",
}


def split_classes(value: Any) -> list[str]:
    """クラス指定を重複のないクラス名のリストに変換する。

    Args:
        value: 空白区切りの文字列、文字列のリスト、またはNone。

    Returns:
        出現順を保ったクラス名のリスト。
    """
    if not value:
        return []
    if isinstance(value, str):
        items: Iterable[str] = value.split()
    else:
        items = (part for item in value for part in str(item).split())
    return list(dict.fromkeys(items))


def as_options(value: Any) -> dict[str, Any]:
    """ラベル等のオプション値を辞書に正規化する。

    Args:
        value: 辞書、文字列（text扱い）、またはNone。

    Returns:
        新しい辞書。
    """
    if value is None or value is True:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    return {"text": value}


def check_classes(classes: str | Iterable[str], options: Mapping[str, Any]) -> bool:
    """オプションが指定クラスをすべて持つかを判定する。

    Args:
        classes: 確認するクラス。
        options: ``class`` キーを持ちうるオプション辞書。

    Returns:
        すべてのクラスが含まれていればTrue。
    """
    wanted = split_classes(classes)
    present = split_classes(options.get("class"))
    return bool(wanted) and all(name in present for name in wanted)


def has_any_class(classes: Iterable[str], options: Mapping[str, Any]) -> bool:
    """オプションが指定クラスのいずれかを持つかを判定する。"""
    present = split_classes(options.get("class"))
    return any(name in present for name in classes)


def inject_classes(classes: str | Iterable[str], options: Mapping[str, Any]) -> dict[str, Any]:
    """オプションの ``class`` にクラスを追加した新しい辞書を返す。

    既存のクラスを先頭に残し、追加クラスは重複しないように末尾へ加える。

    Args:
        classes: 追加するクラス。
        options: 元のオプション辞書。

    Returns:
        ``class`` を空白区切りの文字列にした新しい辞書。
    """
    result = dict(options)
    merged = split_classes(options.get("class")) + split_classes(classes)
    result["class"] = " ".join(dict.fromkeys(merged))
    return result


def rename_classes(aliases: Mapping[str, str], options: Mapping[str, Any]) -> dict[str, Any]:
    """別名で指定されたクラスを正式なクラス名に置き換える。"""
    result = dict(options)
    renamed = [aliases.get(name, name) for name in split_classes(options.get("class"))]
    result["class"] = " ".join(dict.fromkeys(renamed))
    return result


def apply_button_classes(options: Mapping[str, Any]) -> dict[str, Any]:
    """ボタン用のBootstrapクラスを適用する。

    スタイル指定（primary等）がなければ ``btn-default`` を補い、別名は
    ``btn-`` 付きのクラスに置き換える。

    Args:
        options: ボタンのオプション辞書。

    Returns:
        クラスを適用した新しい辞書。
    """
    if has_any_class(BUTTON_CLASSES, options):
        result = inject_classes("btn", options)
    else:
        result = inject_classes(["btn", "btn-default"], options)
    return rename_classes(BUTTON_CLASS_ALIASES, result)
