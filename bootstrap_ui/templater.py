"""名前付きHTML断片テンプレートの置換エンジン。

``{{name}}`` 形式のプレースホルダーを持つ文字列テンプレートを名前で管理し、
値をHTMLエスケープしながら埋め込む。テンプレートはスタックで管理され、
一時的な上書きと復元ができる。
"""

import json
import logging
import re
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Final

from django.forms.utils import flatatt
from django.utils.html import conditional_escape
from django.utils.module_loading import import_string
from django.utils.safestring import SafeString, mark_safe

from .errors import TemplateNotFoundError

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN: Final[re.Pattern[str]] = re.compile(r"\{\{(\w+)\}\}")


def load_templates(reference: str) -> dict[str, str]:
    """外部参照からテンプレート辞書を読み込む。

    ``.json`` で終わる参照はJSONファイルのパス、それ以外はドット区切りの
    インポートパス（モジュール内の辞書）として扱う。

    Args:
        reference: JSONファイルのパス、またはインポートパス。

    Returns:
        テンプレート名から文字列への辞書。

    Raises:
        FileNotFoundError: JSONファイルが存在しない場合。
        ImportError: インポートパスが解決できない場合。
        TypeError: 読み込んだ値が辞書でない場合。
    """
    if reference.endswith(".json"):
        with Path(reference).open(encoding="utf-8") as fp:
            loaded = json.load(fp)
    else:
        loaded = import_string(reference)

    if not isinstance(loaded, Mapping):
        raise TypeError(f"Templates loaded from {reference!r} must be a mapping")

    logger.debug("テンプレートを読み込みました: reference=%s, count=%d", reference, len(loaded))
    return {str(name): str(template) for name, template in loaded.items()}


def format_attributes(attrs: Mapping[str, Any], exclude: tuple[str, ...] = ()) -> SafeString:
    """HTML属性を ``name="value"`` 形式の文字列にする。

    True は値なし属性、False/None は出力しない。リストの値は空白で連結する。

    Args:
        attrs: 属性辞書。
        exclude: 出力しない属性名。

    Returns:
        先頭に空白を持つエスケープ済みの属性文字列。
    """
    normalized: dict[str, Any] = {}
    for name, value in attrs.items():
        if name in exclude or value is None or value is False:
            continue
        if isinstance(value, (list, tuple)):
            value = " ".join(str(item) for item in value)
        if name == "class" and not value:
            continue
        normalized[name] = value
    return flatatt(normalized)


class StringTemplater:
    """名前付きテンプレートのスタック付きコレクション。

    Attributes:
        _templates: 現在有効なテンプレート。
        _stack: push() で退避したテンプレートの履歴。
    """

    def __init__(self, templates: Mapping[str, str] | None = None) -> None:
        self._templates: dict[str, str] = {}
        self._stack: list[dict[str, str]] = []
        if templates:
            self.add(templates)

    def add(self, templates: Mapping[str, str] | str) -> None:
        """テンプレートを追加・上書きする。

        Args:
            templates: テンプレート辞書、または load_templates() に渡す参照。
        """
        if isinstance(templates, str):
            templates = load_templates(templates)
        self._templates.update(templates)

    def get(self, name: str) -> str | None:
        """テンプレート文字列を取得する。存在しなければNone。"""
        return self._templates.get(name)

    def all(self) -> dict[str, str]:
        """現在有効なテンプレートの複製を返す。"""
        return dict(self._templates)

    def push(self) -> int:
        """現在のテンプレートを退避する。

        Returns:
            退避後のスタックの深さ。
        """
        self._stack.append(dict(self._templates))
        return len(self._stack)

    def pop(self) -> None:
        """直前に退避したテンプレートを復元する。スタックが空なら何もしない。"""
        if self._stack:
            self._templates = self._stack.pop()

    @property
    def depth(self) -> int:
        return len(self._stack)

    @contextmanager
    def scoped(self, templates: Mapping[str, str] | str | None = None) -> Iterator["StringTemplater"]:
        """ブロック内だけテンプレートを上書きする。

        ブロック内で行った追加の上書きも、ブロックを抜けると破棄される。

        Args:
            templates: 一時的に適用するテンプレート。

        Yields:
            このテンプレーター自身。
        """
        self.push()
        try:
            if templates:
                self.add(templates)
            yield self
        finally:
            self.pop()

    def format(self, name: str, data: Mapping[str, Any] | None = None) -> SafeString:
        """テンプレートに値を埋め込む。

        値は conditional_escape でエスケープされる（SafeStringはそのまま）。
        データにないプレースホルダーは空文字になる。

        Args:
            name: テンプレート名。
            data: プレースホルダー名から値への辞書。

        Returns:
            整形済みのSafeString。

        Raises:
            TemplateNotFoundError: テンプレートが存在しない場合。
        """
        template = self._templates.get(name)
        if template is None:
            raise TemplateNotFoundError(f"Cannot find template named '{name}'.")
        data = data or {}

        def substitute(match: re.Match[str]) -> str:
            value = data.get(match.group(1))
            if value is None or value is False:
                return ""
            return conditional_escape(value)

        return mark_safe(PLACEHOLDER_PATTERN.sub(substitute, template))
