"""フィールド値・エラー・メタ情報を提供するコンテキスト。

フォームヘルパーはフィールド名からの値解決をこのモジュールのコンテキストに任せる。
Djangoのフォームを包む DjangoFormContext、辞書で指定する ArrayContext、
モデルを持たないフォーム用の NullContext を提供する。
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from django import forms
from django.forms.utils import pretty_name


class FormContext(Protocol):
    """値解決コンテキストのインターフェース。"""

    def val(self, field: str) -> Any: ...

    def errors(self, field: str) -> list[str]: ...

    def is_required(self, field: str) -> bool: ...

    def field_type(self, field: str) -> str | None: ...

    def multiple(self, field: str) -> bool | str: ...

    def choices(self, field: str) -> Sequence[Any] | None: ...

    def label(self, field: str) -> str: ...

    def help_text(self, field: str) -> str: ...

    def name(self, field: str) -> str: ...

    def dom_id(self, field: str) -> str: ...

    def attributes(self, field: str) -> dict[str, Any]: ...

    def fields(self) -> list[str]: ...

    def is_multipart(self) -> bool: ...


def default_dom_id(name: str) -> str:
    """Djangoの慣例（``id_<name>``）に沿ったDOM IDを返す。"""
    return f"id_{name}"


class NullContext:
    """モデルを持たないフォーム用のコンテキスト。

    値・エラーを持たず、ラベルはフィールド名から生成する。
    """

    def val(self, field: str) -> Any:
        return None

    def errors(self, field: str) -> list[str]:
        return []

    def is_required(self, field: str) -> bool:
        return False

    def field_type(self, field: str) -> str | None:
        return None

    def multiple(self, field: str) -> bool | str:
        return False

    def choices(self, field: str) -> Sequence[Any] | None:
        return None

    def label(self, field: str) -> str:
        return pretty_name(field)

    def help_text(self, field: str) -> str:
        return ""

    def name(self, field: str) -> str:
        return field

    def dom_id(self, field: str) -> str:
        return default_dom_id(field)

    def attributes(self, field: str) -> dict[str, Any]:
        return {}

    def fields(self) -> list[str]:
        return []

    def is_multipart(self) -> bool:
        return False


class ArrayContext(NullContext):
    """辞書で値・エラー・必須指定を与えるコンテキスト。

    Attributes:
        data: フィールド名から値への辞書。
        error_map: フィールド名からエラーメッセージへの辞書。
        required: 必須フィールド名の集合。
        schema: フィールド名からフィールド種別への辞書。
    """

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        errors: Mapping[str, str | Sequence[str]] | None = None,
        required: Sequence[str] = (),
        schema: Mapping[str, str] | None = None,
    ) -> None:
        self.data = dict(data or {})
        self.error_map = dict(errors or {})
        self.required = set(required)
        self.schema = dict(schema or {})

    def val(self, field: str) -> Any:
        return self.data.get(field)

    def errors(self, field: str) -> list[str]:
        messages = self.error_map.get(field)
        if not messages:
            return []
        if isinstance(messages, str):
            return [messages]
        return [str(message) for message in messages]

    def is_required(self, field: str) -> bool:
        return field in self.required

    def field_type(self, field: str) -> str | None:
        return self.schema.get(field)

    def fields(self) -> list[str]:
        return list(dict.fromkeys([*self.schema, *self.data]))


class DjangoFormContext:
    """Djangoのフォームを包むコンテキスト。

    値・エラー・ラベル・ヘルプ文・必須指定を BoundField から取得する。
    フォームに存在しないフィールド名は Django の KeyError をそのまま送出する。
    """

    def __init__(self, form: forms.BaseForm) -> None:
        self.form = form

    def _bound(self, field: str) -> forms.BoundField:
        return self.form[field]

    def val(self, field: str) -> Any:
        return self._bound(field).value()

    def errors(self, field: str) -> list[str]:
        if not self.form.is_bound:
            return []
        return [str(message) for message in self._bound(field).errors]

    def is_required(self, field: str) -> bool:
        return self._bound(field).field.required

    def field_type(self, field: str) -> str | None:
        widget = self._bound(field).field.widget
        if isinstance(widget, forms.CheckboxSelectMultiple):
            return "select"
        if isinstance(widget, forms.RadioSelect):
            return "radio"
        if isinstance(widget, forms.SelectMultiple):
            return "multiselect"
        if isinstance(widget, forms.Select):
            return "select"
        if isinstance(widget, forms.CheckboxInput):
            return "checkbox"
        if isinstance(widget, forms.Textarea):
            return "textarea"
        if isinstance(widget, forms.widgets.Input):
            return widget.input_type
        return None

    def multiple(self, field: str) -> bool | str:
        widget = self._bound(field).field.widget
        if isinstance(widget, forms.CheckboxSelectMultiple):
            return "checkbox"
        return bool(getattr(widget, "allow_multiple_selected", False))

    def choices(self, field: str) -> Sequence[Any] | None:
        choices = getattr(self._bound(field).field, "choices", None)
        if choices is None:
            return None
        return list(choices)

    def label(self, field: str) -> str:
        return str(self._bound(field).label)

    def help_text(self, field: str) -> str:
        return str(self._bound(field).help_text or "")

    def name(self, field: str) -> str:
        return self._bound(field).html_name

    def dom_id(self, field: str) -> str:
        bound = self._bound(field)
        return bound.auto_id or default_dom_id(bound.html_name)

    def attributes(self, field: str) -> dict[str, Any]:
        """ウィジェット由来のHTML属性（placeholder、maxlength、required等）を返す。"""
        bound = self._bound(field)
        widget = bound.field.widget
        attrs = {**widget.attrs, **bound.field.widget_attrs(widget)}
        return bound.build_widget_attrs(attrs, widget)

    def fields(self) -> list[str]:
        return list(self.form.fields)

    def is_multipart(self) -> bool:
        return self.form.is_multipart()


def build_context(source: Any) -> FormContext:
    """create() に渡された値から適切なコンテキストを作る。

    Args:
        source: Djangoのフォーム、辞書、既存のコンテキスト、またはNone/False。

    Returns:
        FormContext。
    """
    if source is None or source is False:
        return NullContext()
    if isinstance(source, forms.BaseForm):
        return DjangoFormContext(source)
    if isinstance(source, Mapping):
        return ArrayContext(**source)
    return source
