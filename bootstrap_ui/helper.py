"""Bootstrap対応のフォームヘルパー。

Djangoのフォーム（または辞書・モデルなし）を値のコンテキストとして、
Bootstrap 3 のマークアップでフォームタグ・入力欄・静的コントロールを描画する。

使用方法:
    helper = FormHelper(request)
    html = helper.create(form, align="horizontal")
    html += helper.input("email", help="連絡先として使用します。")
    html += helper.submit("送信")
    html += helper.end()

配置モードとグリッドは create() から end() までの間だけ有効で、
ヘルパーのインスタンスごとに保持される（リクエスト間で共有しない）。
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from django.http import HttpRequest
from django.utils.safestring import SafeString, mark_safe
from django.utils.translation import gettext

from .conf import HelperConfig, get_config
from .contexts import FormContext, NullContext, build_context
from .enums import Alignment
from .grid import grid_class
from .options import apply_button_classes, as_options, check_classes, inject_classes
from .params import build_alignment_templates, normalize_create_options, resolve_alignment
from .security import SecureFieldRegistry, csrf_token
from .template_sets import (
    BASE_TEMPLATES,
    BOOTSTRAP_TEMPLATES,
    CONTAINER_ERROR_VARIANT,
    CONTAINER_VARIANT,
    GROUP_VARIANT,
    MULTICHECKBOX_WRAPPER,
    TemplateResolver,
    merge_template_set,
)
from .templater import StringTemplater, format_attributes, load_templates
from .widgets import WidgetRegistry

logger = logging.getLogger(__name__)

# =============================================================================
# 定数
# =============================================================================

# ウィジェットに渡さないフィールドオプション
FIELD_ONLY_OPTIONS: Final[tuple[str, ...]] = ("label", "error", "help", "templates", "secure", "hidden_field")

# 選択肢をコンテキストから補うフィールド種別
CHOICE_TYPES: Final[frozenset[str]] = frozenset({"select", "multiselect", "radio", "multicheckbox"})

# method="post" で代用し、_method で実際のメソッドを送るHTTPメソッド
EMULATED_METHODS: Final[frozenset[str]] = frozenset({"put", "patch", "delete"})

METHOD_FIELD: Final[str] = "_method"


@dataclass
class FormState:
    """create() から end() までのフォームの状態。

    Attributes:
        alignment: 配置モード。
        grid: horizontal の場合のグリッド指定。
        context: 値解決コンテキスト。
        secure: 改ざん検知トークンを出力するか。
        registry: 描画したフィールドの記録。
        template_depth: create() でテンプレートを退避した時点のスタックの深さ。
        error_class: このフォームだけで使うエラー時のクラス。
    """

    alignment: Alignment
    grid: Mapping[str, Any] | None
    context: FormContext
    secure: bool = False
    registry: SecureFieldRegistry = field(default_factory=SecureFieldRegistry)
    template_depth: int = 0
    error_class: str | None = None


class FormHelper:
    """Bootstrapのマークアップでフォームを描画するヘルパー。

    Attributes:
        request: CSRFトークンの取得に使うリクエスト。
        config: 設定値。
        templater: テンプレートのスタック。
        widgets: ウィジェットレジストリ。
        resolver: フィールド種別に応じたテンプレート名の解決。
    """

    def __init__(self, request: HttpRequest | None = None, **config: Any) -> None:
        """ヘルパーを初期化する。

        Args:
            request: 描画中のリクエスト。
            **config: settings.BOOTSTRAP_UI より優先する設定値。
        """
        self.request = request
        self.config: HelperConfig = get_config(**config)
        self.templater = StringTemplater({**BASE_TEMPLATES, **BOOTSTRAP_TEMPLATES})
        self.templater.add(self.config.templates)
        self.template_set = merge_template_set(self.config.template_set)
        self.widgets = WidgetRegistry(self.templater, self.config.widgets)
        self.resolver = TemplateResolver(self.templater)
        self._state: FormState | None = None

    # =========================================================================
    # 状態
    # =========================================================================

    @property
    def alignment(self) -> Alignment | None:
        """現在のフォームの配置モード。フォームの外ではNone。"""
        return self._state.alignment if self._state else None

    @property
    def grid(self) -> Mapping[str, Any] | None:
        return self._state.grid if self._state else None

    @property
    def context(self) -> FormContext:
        return self._state.context if self._state else NullContext()

    def grid_class(self, position: str, *, offset: bool = False) -> str:
        """現在のグリッド指定から列クラスを返す。"""
        return grid_class(self.grid, position, offset=offset)

    def templates(self, templates: Mapping[str, str] | str | None = None) -> dict[str, str]:
        """テンプレートを追加し、追加前のテンプレートを返す。"""
        previous = self.templater.all()
        if templates:
            self.templater.add(templates)
        return previous

    # =========================================================================
    # フォームタグ
    # =========================================================================

    def create(self, form: Any = None, options: Mapping[str, Any] | None = None, **kwargs: Any) -> SafeString:
        """フォームの開始タグを返す。

        Args:
            form: Djangoのフォーム、コンテキスト用の辞書、またはNone（モデルなし）。
            options: フォームのオプションとHTML属性。
            **kwargs: options に追加するオプション。

        Options:
            align: "default" / "horizontal" / "inline"、またはグリッド辞書。
            grid: horizontal で使うグリッド。
            templates: このフォームだけに適用するテンプレート（辞書または参照）。
            secure: 改ざん検知トークンを出力するか。
            error_class: このフォームでエラー時に入力要素へ付与するクラス。
            method: HTTPメソッド（デフォルトは post）。
            url: action 属性。
            type: "file" なら multipart/form-data にする。

        Returns:
            フォームの開始タグと、必要なhiddenフィールド。

        Raises:
            InvalidAlignmentError: align が未知の値の場合。
        """
        options = normalize_create_options({**(options or {}), **kwargs})
        if self._state is not None:
            logger.debug("end() されていないフォームの状態を破棄します")
            self._reset()

        context = build_context(form)
        css_class = options.pop("class", None)
        grid = options.pop("grid", None)
        templates = options.pop("templates", None) or {}
        secure = bool(options.pop("secure", self.config.secure))
        error_class = options.pop("error_class", None)
        resolved = resolve_alignment(
            options.pop("align", None),
            css_class=css_class,
            default_align=self.config.align,
            default_grid=grid or self.config.grid,
        )

        if isinstance(templates, str):
            templates = load_templates(templates)
        alignment_templates = build_alignment_templates(resolved, self.template_set)
        depth = self.templater.push()
        self.templater.add({**alignment_templates, **templates})

        if resolved.alignment is not Alignment.DEFAULT:
            css_class = inject_classes(f"form-{resolved.alignment}", {"class": css_class})["class"]

        self._state = FormState(
            alignment=resolved.alignment,
            grid=resolved.grid,
            context=context,
            secure=secure,
            template_depth=depth,
            error_class=error_class,
        )
        logger.debug("フォームを開始しました: align=%s, grid=%s", resolved.alignment, resolved.grid)
        return self._form_start(context, css_class, options)

    def _form_start(self, context: FormContext, css_class: Any, options: dict[str, Any]) -> SafeString:
        method = str(options.pop("method", "post")).lower()
        action = options.pop("url", None)
        action = options.pop("action", action)
        form_type = options.pop("type", None)
        options.setdefault("role", "form")

        attrs: dict[str, Any] = {
            "method": "post" if method in EMULATED_METHODS else method,
            "accept-charset": "utf-8",
            "action": action,
        }
        if form_type == "file" or context.is_multipart():
            attrs["enctype"] = "multipart/form-data"
        attrs["class"] = css_class
        attrs.update(options)

        html = self.templater.format("formStart", {"attrs": format_attributes(attrs)})

        hidden = []
        if method in EMULATED_METHODS:
            hidden.append(self._hidden_tag(METHOD_FIELD, method.upper(), lock=True))
        token = csrf_token(self.request) if method != "get" else None
        if token:
            hidden.append(self._hidden_tag("csrfmiddlewaretoken", token))
        if not hidden:
            return html
        block = self.templater.format("hiddenBlock", {"content": mark_safe("".join(hidden))})
        return mark_safe(html + block)

    def end(self, secure_attributes: Mapping[str, Any] | None = None) -> SafeString:
        """フォームの終了タグを返し、配置モードとグリッドをリセットする。

        Args:
            secure_attributes: 改ざん検知トークンのhidden要素に追加する属性。

        Returns:
            改ざん検知トークン（有効な場合）とフォームの終了タグ。
        """
        html = ""
        if self._state is not None and self._state.secure:
            html = self._secure_block(self._state.registry, secure_attributes or {})
        html += self.templater.format("formEnd")
        self._reset()
        return mark_safe(html)

    def _reset(self) -> None:
        if self._state is not None:
            while self.templater.depth >= self._state.template_depth > 0:
                self.templater.pop()
        self._state = None

    def _secure_block(self, registry: SecureFieldRegistry, attributes: Mapping[str, Any]) -> SafeString:
        attrs = {"autocomplete": "off", **attributes, "value": registry.dumps()}
        tag = self.templater.format(
            "input",
            {"type": "hidden", "name": self.config.token_field, "attrs": format_attributes(attrs)},
        )
        return self.templater.format("hiddenBlock", {"content": tag})

    def unlock_field(self, name: str) -> None:
        """フィールドを改ざん検知の照合対象から外す（JavaScriptで追加する項目等）。"""
        if self._state is not None:
            self._state.registry.unlock(name)

    # =========================================================================
    # 入力欄
    # =========================================================================

    def input(self, field_name: str, options: Mapping[str, Any] | None = None, **kwargs: Any) -> SafeString:
        """ラベル・ラッパー・ヘルプ・エラーを含む入力欄を返す。

        Args:
            field_name: フィールド名。
            options: フィールドのオプションとHTML属性。
            **kwargs: options に追加するオプション。

        Options:
            type: フィールド種別。省略時はコンテキストから推定する。
            label: ラベル文字列、属性の辞書、またはFalse（ラベルなし）。
            help: ヘルプ文。省略時はDjangoフィールドの help_text。
            error: Falseならエラーを表示しない。文字列ならエラー文を置き換える。
            required: 必須表示。省略時はコンテキストから取得する。
            options: 選択肢。
            inline: checkbox / radio をインライン表示にする。
            multiple: select で True なら複数選択、"checkbox" ならチェックボックス群。
            prepend / append: input-group のアドオン。
            templates: このフィールドだけに適用するテンプレート。

        Returns:
            入力欄のHTML。
        """
        options = {**(options or {}), **kwargs}
        field_templates = options.pop("templates", None)
        with self.templater.scoped(field_templates):
            options = self._parse_options(field_name, options)
            options = self._normalize_field_options(options)
            return self._render_input(field_name, options)

    def _parse_options(self, field_name: str, options: dict[str, Any]) -> dict[str, Any]:
        context = self.context
        options = {
            "type": None,
            "label": None,
            "error": None,
            "required": None,
            "options": None,
            "help": None,
            "prepend": None,
            "append": None,
            **options,
        }

        if options["type"] is None:
            options["type"] = context.field_type(field_name) or ("select" if options["options"] is not None else "text")
        if "multiple" not in options and options["type"] == "select":
            multiple = context.multiple(field_name)
            if multiple:
                options["multiple"] = multiple
        if options["options"] is None and options["type"] in CHOICE_TYPES:
            options["options"] = context.choices(field_name)
        if options["required"] is None:
            options["required"] = context.is_required(field_name)
        if options["help"] is None:
            options["help"] = context.help_text(field_name) or None

        options.setdefault("name", context.name(field_name))
        options.setdefault("id", context.dom_id(field_name))
        if "val" not in options:
            options["val"] = context.val(field_name)

        for key, value in context.attributes(field_name).items():
            if key == "class":
                options["class"] = inject_classes(options.get("class"), {"class": value})["class"]
            elif key not in options:
                options[key] = value

        if options["label"] is not False:
            options["label"] = as_options(options["label"])
        return options

    def _normalize_field_options(self, options: dict[str, Any]) -> dict[str, Any]:
        field_type = options["type"]
        label = options["label"]

        if field_type in ("checkbox", "radio"):
            inline_class = f"{field_type}-inline"
            if options.get("inline") is None:
                options["inline"] = label is not False and check_classes(inline_class, label)
            if options["inline"] and label is not False:
                options["label"] = inject_classes(inline_class, label)
        elif field_type == "select":
            if options.get("multiple") == "checkbox":
                self.templater.add({"checkboxWrapper": MULTICHECKBOX_WRAPPER})
                options["type"] = "multicheckbox"
                del options["multiple"]
        elif field_type in ("multiselect", "textarea"):
            pass
        elif label is not False and "class=" not in (self.templater.get("label") or ""):
            options["label"] = inject_classes("control-label", label)

        if options["type"] not in self.config.plain_types:
            options = inject_classes("form-control", options)

        if options["help"]:
            options["help"] = self.templater.format("help", {"content": options["help"]})
        return options

    def _render_input(self, field_name: str, options: dict[str, Any]) -> SafeString:
        field_type = options["type"]
        errors = self._field_errors(field_name, options["error"])
        error_class = self._state.error_class if self._state and self._state.error_class else self.config.error_class
        if errors and error_class:
            options = inject_classes(error_class, options)

        if field_type == "hidden":
            return self.hidden(field_name, self._widget_data(options))
        if field_type == "submit":
            return self.submit(options["val"], {"name": options["name"], "id": options["id"]})

        input_html = self._get_input(field_name, options)
        label_html = self._get_label(field_name, options, input_html)
        error_html = self._format_errors(errors)

        group_template = self.resolver.resolve(field_type, GROUP_VARIANT)
        group = self.templater.format(
            group_template,
            {"input": input_html, "label": label_html, "error": error_html, "help": options["help"]},
        )

        variant = CONTAINER_ERROR_VARIANT if errors else CONTAINER_VARIANT
        container_template = self.resolver.resolve(field_type, variant)
        return self.templater.format(
            container_template,
            {
                "content": group,
                "error": error_html,
                "required": " required" if options["required"] else "",
                "type": field_type,
                "help": options["help"],
            },
        )

    def _widget_data(self, options: Mapping[str, Any]) -> dict[str, Any]:
        data = {key: value for key, value in options.items() if key not in FIELD_ONLY_OPTIONS}
        field_type = data["type"]
        if field_type == "radio" and options["label"] is not False:
            data["label"] = {key: value for key, value in options["label"].items() if key != "text"}
        if field_type in ("multiselect", "multicheckbox"):
            data.pop("multiple", None)
        if field_type in self.widgets:
            data.pop("prepend", None)
            data.pop("append", None)
        if field_type in ("multicheckbox", "hidden"):
            data.pop("required", None)
        if field_type not in CHOICE_TYPES:
            data.pop("options", None)
        return data

    def _get_input(self, field_name: str, options: dict[str, Any]) -> SafeString:
        if options["type"] == "staticControl":
            return self.static_control(
                field_name,
                {
                    "name": options["name"],
                    "id": options["id"],
                    "val": options["val"],
                    "secure": options.get("secure", True),
                    "hidden_field": options.get("hidden_field", True),
                },
            )
        return self._render_widget(options["type"], self._widget_data(options))

    def _get_label(self, field_name: str, options: dict[str, Any], input_html: SafeString) -> SafeString | str:
        label = options["label"]
        field_type = options["type"]
        if label is False:
            return input_html if field_type == "checkbox" else ""

        attrs = {key: value for key, value in label.items() if key != "text"}
        text = label.get("text")
        if text is None:
            text = self.context.label(field_name)

        if field_type == "checkbox":
            return self._render_widget("nestingLabel", {"for": options["id"], **attrs, "text": text, "input": input_html})
        if field_type == "radio":
            return self._render_widget("label", {"text": text, "escape": attrs.get("escape", True)})
        if field_type == "multicheckbox":
            return self._render_widget("label", {**attrs, "text": text})
        return self._render_widget("label", {"for": options["id"], **attrs, "text": text})

    def _render_widget(self, name: str, data: dict[str, Any]) -> SafeString:
        widget = self.widgets.get(name)
        html = widget.render(dict(data), self.context)
        if self._state is not None and self._state.secure:
            self._state.registry.register_many(widget.secure_fields(data))
        return html

    # =========================================================================
    # エラー
    # =========================================================================

    def _field_errors(self, field_name: str, error: Any) -> list[str]:
        if error is False:
            return []
        messages = self.context.errors(field_name)
        if not messages:
            return []
        if error:
            return [error] if isinstance(error, str) else [str(message) for message in error]
        return messages

    def _format_errors(self, errors: list[str]) -> SafeString | str:
        if not errors:
            return ""
        if len(errors) == 1:
            content: Any = errors[0]
        else:
            items = "".join(self.templater.format("errorItem", {"text": message}) for message in errors)
            content = self.templater.format("errorList", {"content": mark_safe(items)})
        return self.templater.format("error", {"content": content})

    def error(self, field_name: str, text: str | None = None) -> SafeString | str:
        """フィールドのエラーを返す。エラーがなければ空文字。

        Args:
            field_name: フィールド名。
            text: エラー文を置き換える文字列。
        """
        return self._format_errors(self._field_errors(field_name, text))

    # =========================================================================
    # 個別の要素
    # =========================================================================

    def _init_field(self, field_name: str, options: Mapping[str, Any]) -> dict[str, Any]:
        context = self.context
        data = dict(options)
        data.setdefault("name", context.name(field_name))
        data.setdefault("id", context.dom_id(field_name))
        if "val" not in data:
            data["val"] = context.val(field_name)
        return data

    def _hidden_tag(self, name: str, value: Any, *, lock: bool = False) -> SafeString:
        if lock and self._state is not None and self._state.secure:
            self._state.registry.register(name, lock=True, value=value)
        return self.widgets.get("hidden").render({"type": "hidden", "name": name, "val": value}, self.context)

    def hidden(self, field_name: str, options: Mapping[str, Any] | None = None, **kwargs: Any) -> SafeString:
        """hidden要素を返す。改ざん検知が有効なら値を固定する。

        Options:
            secure: Falseなら値を固定せずフィールド名だけを登録する。
        """
        options = {**(options or {}), **kwargs}
        secure = options.pop("secure", True)
        data = self._init_field(field_name, options)
        data["type"] = "hidden"
        for key in ("required", "inline", "prepend", "append"):
            data.pop(key, None)

        if self._state is not None and self._state.secure:
            self._state.registry.register(data["name"], lock=secure is True, value=data["val"])
        return self.widgets.get("hidden").render(data, self.context)

    def static_control(self, field_name: str, options: Mapping[str, Any] | None = None, **kwargs: Any) -> SafeString:
        """値を読み取り専用のテキストとして表示する。

        Args:
            field_name: フィールド名。
            options: オプションとHTML属性。
            **kwargs: options に追加するオプション。

        Options:
            hidden_field: Trueなら値を送信するhidden要素を併せて出力する（デフォルトTrue）。
            secure: Trueならhidden要素の値を改ざん検知の対象として固定する（デフォルトTrue）。

        Returns:
            静的コントロールのHTML。
        """
        options = {"secure": True, "hidden_field": True, **(options or {}), **kwargs}
        secure = options.pop("secure")
        hidden_field = options.pop("hidden_field")
        options.pop("required", None)
        data = self._init_field(field_name, options)

        static = self.templater.format("staticControl", {"content": data["val"]})
        if not hidden_field:
            return static
        hidden = self.hidden(field_name, {"name": data["name"], "id": data["id"], "val": data["val"], "secure": secure})
        return mark_safe(static + hidden)

    def label(
        self,
        field_name: str,
        text: str | None = None,
        options: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> SafeString:
        """フィールドの ``<label>`` を返す。"""
        data = {**(options or {}), **kwargs}
        data.setdefault("for", self.context.dom_id(field_name))
        data["text"] = text if text is not None else self.context.label(field_name)
        return self._render_widget("label", data)

    def button(self, title: str, options: Mapping[str, Any] | None = None, **kwargs: Any) -> SafeString:
        """Bootstrapのボタンクラスを付与した ``<button>`` を返す。"""
        return self._render_widget("button", {**(options or {}), **kwargs, "text": title})

    def submit(self, caption: str | None = None, options: Mapping[str, Any] | None = None, **kwargs: Any) -> SafeString:
        """送信ボタンを submitContainer で囲んで返す。"""
        data = apply_button_classes({"type": "submit", **(options or {}), **kwargs})
        data["value"] = caption or gettext("Submit")
        if self._state is not None and self._state.secure and data.get("name"):
            self._state.registry.register(data["name"])

        field_type = data.pop("type")
        tag = self.templater.format("inputSubmit", {"type": field_type, "attrs": format_attributes(data)})
        return self.templater.format("submitContainer", {"content": tag})

    def inputs(
        self,
        fields: Iterable[str] | Mapping[str, Mapping[str, Any]] | None = None,
        *,
        legend: str | None = None,
        fieldset: bool | Mapping[str, Any] = True,
    ) -> SafeString:
        """複数の入力欄をまとめて返す。

        Args:
            fields: フィールド名のリスト、またはフィールド名からオプションへの辞書。
                Noneならコンテキストの全フィールド。
            legend: fieldset の見出し。
            fieldset: Falseなら fieldset で囲まない。辞書なら fieldset の属性。

        Returns:
            入力欄のHTML。
        """
        if fields is None:
            fields = self.context.fields()
        items = fields.items() if isinstance(fields, Mapping) else ((name, {}) for name in fields)
        content = mark_safe("".join(self.input(name, options) for name, options in items))

        if fieldset is False:
            return content
        if legend:
            content = mark_safe(self.templater.format("legend", {"text": legend}) + content)
        attrs = fieldset if isinstance(fieldset, Mapping) else {}
        return self.templater.format("fieldset", {"content": content, "attrs": format_attributes(attrs)})
