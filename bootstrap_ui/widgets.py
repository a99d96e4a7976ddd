"""フィールド種別ごとのウィジェット（要素の描画）とウィジェットレジストリ。

各ウィジェットは ``render(data, context)`` で要素のHTMLを返し、
``secure_fields(data)`` で改ざん検知の対象になるフィールド名を返す。
レジストリは名前からウィジェットを引き、未登録の名前は ``_default`` で描画する。
"""

import inspect
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Final, Protocol

from django.utils.module_loading import import_string
from django.utils.safestring import SafeString, mark_safe

from .contexts import FormContext
from .options import apply_button_classes
from .templater import StringTemplater, format_attributes


class Widget(Protocol):
    """ウィジェットのインターフェース。"""

    def render(self, data: dict[str, Any], context: FormContext) -> SafeString: ...

    def secure_fields(self, data: Mapping[str, Any]) -> list[str]: ...


# =============================================================================
# 選択肢の正規化
# =============================================================================


def normalize_choices(options: Any) -> list[tuple[Any, Any]]:
    """選択肢を ``(値, 表示名)`` のリストにする。

    辞書、タプルのリスト、値だけのリストを受け付ける。表示名がリストの要素は
    グループ（optgroup）として扱う。
    """
    if not options:
        return []
    if isinstance(options, Mapping):
        return list(options.items())
    choices = []
    for option in options:
        if isinstance(option, (list, tuple)) and len(option) == 2:
            choices.append((option[0], option[1]))
        else:
            choices.append((option, option))
    return choices


def is_group(label: Any) -> bool:
    return isinstance(label, (list, tuple, Mapping))


def selected_values(val: Any) -> set[str]:
    """現在値を比較用の文字列集合にする。"""
    if val is None:
        return set()
    if isinstance(val, (list, tuple, set, frozenset)):
        return {str(item) for item in val}
    return {str(val)}


def render_text(text: Any, escape: bool) -> Any:
    if escape or text is None:
        return text
    return mark_safe(str(text))


# =============================================================================
# ウィジェット
# =============================================================================


class BasicWidget:
    """``<input>`` 要素を描画する汎用ウィジェット。

    ``prepend`` / ``append`` が指定されると Bootstrap の input-group で囲む。
    """

    def __init__(self, templater: StringTemplater) -> None:
        self.templater = templater

    def render(self, data: dict[str, Any], context: FormContext) -> SafeString:
        data = {"name": "", "val": None, "type": "text", "prepend": None, "append": None, **data}
        data.pop("inline", None)
        data.pop("escape", None)
        name = data.pop("name")
        value = data.pop("val")
        field_type = data.pop("type")
        prepend = data.pop("prepend")
        append = data.pop("append")

        if value is not None and field_type not in ("password", "file"):
            data["value"] = value

        html = self.templater.format(
            "input",
            {"name": name, "type": field_type, "attrs": format_attributes(data)},
        )
        if not prepend and not append:
            return html

        return self.templater.format(
            "inputGroupContainer",
            {"prepend": self._addon(prepend), "content": html, "append": self._addon(append)},
        )

    def _addon(self, content: Any) -> SafeString | str:
        if not content:
            return ""
        css_class = "input-group-btn" if "<button" in str(content) else "input-group-addon"
        return self.templater.format("inputGroupAddon", {"class": css_class, "content": content})

    def secure_fields(self, data: Mapping[str, Any]) -> list[str]:
        name = data.get("name")
        return [name] if name else []


class ButtonWidget:
    """Bootstrapのボタンクラスを付与した ``<button>`` を描画する。"""

    def __init__(self, templater: StringTemplater) -> None:
        self.templater = templater

    def render(self, data: dict[str, Any], context: FormContext) -> SafeString:
        data = {"text": "", "type": "submit", "escape": True, **data}
        text = render_text(data.pop("text"), data.pop("escape"))
        data = apply_button_classes(data)
        return self.templater.format("button", {"text": text, "attrs": format_attributes(data)})

    def secure_fields(self, data: Mapping[str, Any]) -> list[str]:
        name = data.get("name")
        return [name] if name else []


class CheckboxWidget:
    """単一のチェックボックスを描画する。"""

    def __init__(self, templater: StringTemplater) -> None:
        self.templater = templater

    @staticmethod
    def is_checked(val: Any, value: Any) -> bool:
        if val is True:
            return True
        if val in (None, False, "", "0", 0):
            return False
        return str(val) == str(value)

    def render(self, data: dict[str, Any], context: FormContext) -> SafeString:
        data = {"name": "", "value": 1, "val": None, "checked": None, **data}
        data.pop("inline", None)
        data.pop("type", None)
        name = data.pop("name")
        value = data.pop("value")
        val = data.pop("val")
        checked = data.pop("checked")
        if checked is None:
            checked = self.is_checked(val, value)
        data["checked"] = bool(checked)

        return self.templater.format(
            "checkbox",
            {"name": name, "value": value, "attrs": format_attributes(data)},
        )

    def secure_fields(self, data: Mapping[str, Any]) -> list[str]:
        name = data.get("name")
        return [name] if name else []


class LabelWidget:
    """``<label>`` を描画する。"""

    template: str = "label"

    def __init__(self, templater: StringTemplater) -> None:
        self.templater = templater

    def render(self, data: dict[str, Any], context: FormContext) -> SafeString:
        data = {"text": "", "input": "", "hidden": "", "escape": True, **data}
        text = render_text(data.pop("text"), data.pop("escape"))
        input_html = data.pop("input")
        hidden = data.pop("hidden")
        return self.templater.format(
            self.template,
            {"text": text, "input": input_html, "hidden": hidden, "attrs": format_attributes(data)},
        )

    def secure_fields(self, data: Mapping[str, Any]) -> list[str]:
        return []


class NestingLabelWidget(LabelWidget):
    """入力要素を内側に含む ``<label>`` を描画する。"""

    template = "nestingLabel"


class RadioWidget:
    """ラジオボタンの集合を描画する。

    ``label`` の属性は各選択肢のラベルに適用される。``inline`` がTrueなら
    ``radioWrapperInline`` で囲む。
    """

    def __init__(self, templater: StringTemplater, label: LabelWidget) -> None:
        self.templater = templater
        self.label = label

    def render(self, data: dict[str, Any], context: FormContext) -> SafeString:
        data = {
            "name": "",
            "options": None,
            "val": None,
            "label": None,
            "inline": False,
            "id": None,
            "escape": True,
            **data,
        }
        data.pop("type", None)
        name = data.pop("name")
        choices = normalize_choices(data.pop("options"))
        current = selected_values(data.pop("val"))
        label_attrs = data.pop("label")
        inline = data.pop("inline")
        id_prefix = data.pop("id") or f"id_{name}"
        escape = data.pop("escape")

        wrapper = "radioWrapper"
        if inline and self.templater.get("radioWrapperInline") is not None:
            wrapper = "radioWrapperInline"

        items = []
        for index, (value, text) in enumerate(choices):
            item_id = f"{id_prefix}_{index}"
            radio = self.templater.format(
                "radio",
                {
                    "name": name,
                    "value": value,
                    "attrs": format_attributes({**data, "id": item_id, "checked": str(value) in current}),
                },
            )
            if label_attrs is False:
                label_html = radio
            else:
                label_data = {**(label_attrs or {}), "for": item_id, "text": text, "input": radio, "escape": escape}
                label_html = self.label.render(label_data, context)
            items.append(self.templater.format(wrapper, {"label": label_html, "input": radio}))
        return mark_safe("".join(items))

    def secure_fields(self, data: Mapping[str, Any]) -> list[str]:
        name = data.get("name")
        return [name] if name else []


class SelectBoxWidget:
    """``<select>`` を描画する。選択肢のグループは ``<optgroup>`` になる。"""

    multiple: bool = False

    def __init__(self, templater: StringTemplater) -> None:
        self.templater = templater

    def render(self, data: dict[str, Any], context: FormContext) -> SafeString:
        data = {"name": "", "options": None, "val": None, "empty": False, "escape": True, "multiple": False, **data}
        data.pop("type", None)
        data.pop("inline", None)
        name = data.pop("name")
        choices = normalize_choices(data.pop("options"))
        current = selected_values(data.pop("val"))
        empty = data.pop("empty")
        escape = data.pop("escape")
        multiple = bool(data.pop("multiple")) or self.multiple

        if empty:
            choices.insert(0, ("", "" if empty is True else empty))

        content = mark_safe("".join(self._render_options(choices, current, escape)))
        template = "selectMultiple" if multiple else "select"
        return self.templater.format(
            template,
            {"name": name, "content": content, "attrs": format_attributes(data)},
        )

    def _render_options(self, choices: Iterable[tuple[Any, Any]], current: set[str], escape: bool) -> list[str]:
        rendered = []
        for value, text in choices:
            if is_group(text):
                content = mark_safe("".join(self._render_options(normalize_choices(text), current, escape)))
                rendered.append(self.templater.format("optgroup", {"label": value, "content": content}))
                continue
            attrs = format_attributes({"selected": str(value) in current})
            rendered.append(
                self.templater.format(
                    "option",
                    {"value": value, "text": render_text(text, escape), "attrs": attrs},
                )
            )
        return rendered

    def secure_fields(self, data: Mapping[str, Any]) -> list[str]:
        name = data.get("name")
        return [name] if name else []


class MultiSelectWidget(SelectBoxWidget):
    """複数選択の ``<select>`` を描画する。"""

    multiple = True


class MultiCheckboxWidget:
    """選択肢ごとのチェックボックスを ``checkboxWrapper`` で囲んで描画する。"""

    def __init__(self, templater: StringTemplater, label: LabelWidget) -> None:
        self.templater = templater
        self.label = label

    def render(self, data: dict[str, Any], context: FormContext) -> SafeString:
        data = {"name": "", "options": None, "val": None, "id": None, "escape": True, **data}
        for key in ("type", "inline", "multiple", "empty"):
            data.pop(key, None)
        name = data.pop("name")
        choices = normalize_choices(data.pop("options"))
        current = selected_values(data.pop("val"))
        id_prefix = data.pop("id") or f"id_{name}"
        escape = data.pop("escape")
        label_attrs = data.pop("label", None) or {}

        rendered = self._render_items(choices, current, name, id_prefix, escape, data, label_attrs, context)
        return mark_safe("".join(rendered))

    def _render_items(
        self,
        choices: Sequence[tuple[Any, Any]],
        current: set[str],
        name: str,
        id_prefix: str,
        escape: bool,
        attrs: Mapping[str, Any],
        label_attrs: Mapping[str, Any],
        context: FormContext,
    ) -> list[str]:
        rendered = []
        for index, (value, text) in enumerate(choices):
            item_id = f"{id_prefix}_{index}"
            if is_group(text):
                items = self._render_items(
                    normalize_choices(text), current, name, item_id, escape, attrs, label_attrs, context
                )
                legend = self.templater.format("legend", {"text": value})
                rendered.append(
                    self.templater.format("fieldset", {"content": mark_safe(legend + "".join(items))})
                )
                continue
            checkbox = self.templater.format(
                "checkbox",
                {
                    "name": name,
                    "value": value,
                    "attrs": format_attributes({**attrs, "id": item_id, "checked": str(value) in current}),
                },
            )
            label_html = self.label.render(
                {**label_attrs, "for": item_id, "text": text, "input": checkbox, "escape": escape},
                context,
            )
            rendered.append(self.templater.format("checkboxWrapper", {"label": label_html, "input": checkbox}))
        return rendered

    def secure_fields(self, data: Mapping[str, Any]) -> list[str]:
        name = data.get("name")
        return [name] if name else []


class TextareaWidget:
    """``<textarea>`` を描画する。"""

    def __init__(self, templater: StringTemplater) -> None:
        self.templater = templater

    def render(self, data: dict[str, Any], context: FormContext) -> SafeString:
        data = {"name": "", "val": None, "escape": True, **data}
        for key in ("type", "inline", "prepend", "append"):
            data.pop(key, None)
        name = data.pop("name")
        value = render_text(data.pop("val"), data.pop("escape"))
        return self.templater.format(
            "textarea",
            {"name": name, "value": "" if value is None else value, "attrs": format_attributes(data)},
        )

    def secure_fields(self, data: Mapping[str, Any]) -> list[str]:
        name = data.get("name")
        return [name] if name else []


# =============================================================================
# レジストリ
# =============================================================================

DEFAULT_WIDGET: Final[str] = "_default"

DEFAULT_WIDGETS: Final[dict[str, Any]] = {
    "button": ButtonWidget,
    "checkbox": CheckboxWidget,
    "radio": (RadioWidget, "nestingLabel"),
    "select": SelectBoxWidget,
    "multiselect": MultiSelectWidget,
    "multicheckbox": (MultiCheckboxWidget, "nestingLabel"),
    "textarea": TextareaWidget,
    "hidden": BasicWidget,
    "label": LabelWidget,
    "nestingLabel": NestingLabelWidget,
    DEFAULT_WIDGET: BasicWidget,
}


class WidgetRegistry:
    """名前からウィジェットを生成・キャッシュするレジストリ。

    登録値は次のいずれか:
        - ウィジェットクラス（テンプレーターを引数に生成される）
        - ``(クラス, 依存ウィジェット名, ...)`` のタプル
        - 上記クラスのドット区切りのインポートパス
        - 生成済みのウィジェットインスタンス
    """

    def __init__(self, templater: StringTemplater, widgets: Mapping[str, Any] | None = None) -> None:
        self.templater = templater
        self._widgets: dict[str, Any] = dict(DEFAULT_WIDGETS)
        if widgets:
            self.add(widgets)

    def add(self, widgets: Mapping[str, Any]) -> None:
        self._widgets.update(widgets)

    def __contains__(self, name: str) -> bool:
        return name in self._widgets

    def get(self, name: str) -> Widget:
        """ウィジェットを取得する。

        Args:
            name: ウィジェット名（通常はフィールド種別）。

        Returns:
            ウィジェットインスタンス。未登録の名前には ``_default`` を返す。

        Raises:
            ImportError: インポートパスが解決できない場合。
            KeyError: ``_default`` も登録されていない場合。
        """
        if name not in self._widgets:
            name = DEFAULT_WIDGET
        spec = self._widgets[name]
        if isinstance(spec, (str, list, tuple)) or inspect.isclass(spec):
            spec = self._build(spec)
            self._widgets[name] = spec
        return spec

    def _build(self, spec: Any) -> Widget:
        dependencies: list[str] = []
        if isinstance(spec, (list, tuple)):
            spec, *dependencies = spec
        if isinstance(spec, str):
            spec = import_string(spec)
        return spec(self.templater, *(self.get(dependency) for dependency in dependencies))
