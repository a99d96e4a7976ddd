"""組み込みテンプレートとテンプレート名の解決。

テンプレートは次の順で重ねられる:
    BASE_TEMPLATES < BOOTSTRAP_TEMPLATES < 配置モード別のTEMPLATE_SET < 呼び出しごとの上書き
"""

from collections.abc import Mapping
from typing import Final

from .enums import Alignment
from .templater import StringTemplater

# フォーム部品の基本テンプレート
BASE_TEMPLATES: Final[dict[str, str]] = {
    "button": "<button{{attrs}}>{{text}}</button>",
    "checkbox": '<input type="checkbox" name="{{name}}" value="{{value}}"{{attrs}}>',
    "checkboxFormGroup": "{{label}}",
    "checkboxWrapper": "{{label}}",
    "error": '<div class="error-message">{{content}}</div>',
    "errorList": "<ul>{{content}}</ul>",
    "errorItem": "<li>{{text}}</li>",
    "fieldset": "<fieldset{{attrs}}>{{content}}</fieldset>",
    "formStart": "<form{{attrs}}>",
    "formEnd": "</form>",
    "formGroup": "{{label}}{{input}}",
    "hiddenBlock": '<div style="display:none;">{{content}}</div>',
    "input": '<input type="{{type}}" name="{{name}}"{{attrs}}>',
    "inputSubmit": '<input type="{{type}}"{{attrs}}>',
    "inputContainer": '<div class="input {{type}}{{required}}">{{content}}</div>',
    "inputContainerError": '<div class="input {{type}}{{required}} error">{{content}}{{error}}</div>',
    "label": "<label{{attrs}}>{{text}}</label>",
    "nestingLabel": "{{hidden}}<label{{attrs}}>{{input}}{{text}}</label>",
    "legend": "<legend>{{text}}</legend>",
    "option": '<option value="{{value}}"{{attrs}}>{{text}}</option>',
    "optgroup": '<optgroup label="{{label}}"{{attrs}}>{{content}}</optgroup>',
    "select": '<select name="{{name}}"{{attrs}}>{{content}}</select>',
    "selectMultiple": '<select name="{{name}}" multiple="multiple"{{attrs}}>{{content}}</select>',
    "radio": '<input type="radio" name="{{name}}" value="{{value}}"{{attrs}}>',
    "radioWrapper": "{{label}}",
    "radioFormGroup": "{{label}}{{input}}",
    "textarea": '<textarea name="{{name}}"{{attrs}}>{{value}}</textarea>',
    "submitContainer": '<div class="submit">{{content}}</div>',
}

# Bootstrapのデフォルトテンプレート
BOOTSTRAP_TEMPLATES: Final[dict[str, str]] = {
    "error": '<p class="help-block">{{content}}</p>',
    "help": '<p class="help-block">{{content}}</p>',
    "inputContainer": '<div class="form-group{{required}}">{{content}}{{help}}</div>',
    "inputContainerError": '<div class="form-group{{required}} has-error">{{content}}{{error}}{{help}}</div>',
    "inputGroupContainer": '<div class="input-group">{{prepend}}{{content}}{{append}}</div>',
    "inputGroupAddon": '<span class="{{class}}">{{content}}</span>',
    "radioWrapper": '<div class="radio">{{label}}</div>',
    "radioWrapperInline": "{{label}}",
    "staticControl": '<p class="form-control-static">{{content}}</p>',
}

# 配置モードごとのテンプレート。horizontal の %s にはグリッドクラスが入る。
TEMPLATE_SET: Final[dict[str, dict[str, str]]] = {
    Alignment.DEFAULT: {
        "checkboxContainer": '<div class="checkbox">{{content}}{{help}}</div>',
        "checkboxContainerError": '<div class="checkbox has-error">{{content}}{{error}}{{help}}</div>',
    },
    Alignment.INLINE: {
        "label": '<label class="sr-only"{{attrs}}>{{text}}</label>',
        "inputContainer": "{{content}}",
    },
    Alignment.HORIZONTAL: {
        "label": '<label class="control-label %s"{{attrs}}>{{text}}</label>',
        "formGroup": '{{label}}<div class="%s">{{input}}{{error}}{{help}}</div>',
        "checkboxFormGroup": '<div class="%s"><div class="checkbox">{{label}}</div>{{error}}{{help}}</div>',
        "radioFormGroup": '{{label}}<div class="%s">{{input}}{{error}}{{help}}</div>',
        "submitContainer": '<div class="form-group"><div class="%s">{{content}}</div></div>',
        "inputContainer": '<div class="form-group{{required}}">{{content}}</div>',
        "inputContainerError": '<div class="form-group{{required}} has-error">{{content}}</div>',
    },
}

# multiple="checkbox" の select で使うラッパー
MULTICHECKBOX_WRAPPER: Final[str] = '<div class="checkbox">{{label}}</div>'

FIELD_TYPES: Final[tuple[str, ...]] = (
    "checkbox",
    "radio",
    "select",
    "multiselect",
    "multicheckbox",
    "textarea",
    "hidden",
    "staticControl",
    "text",
    "password",
    "email",
    "number",
    "url",
    "tel",
    "search",
    "date",
    "datetime-local",
    "time",
    "file",
    "color",
)

GROUP_VARIANT: Final[str] = "FormGroup"
CONTAINER_VARIANT: Final[str] = "Container"
CONTAINER_ERROR_VARIANT: Final[str] = "ContainerError"

GENERIC_TEMPLATES: Final[dict[str, str]] = {
    GROUP_VARIANT: "formGroup",
    CONTAINER_VARIANT: "inputContainer",
    CONTAINER_ERROR_VARIANT: "inputContainerError",
}

# (フィールド種別, バリエーション) -> 種別専用テンプレート名
TYPED_TEMPLATES: Final[dict[tuple[str, str], str]] = {
    (field_type, variant): f"{field_type}{variant}"
    for field_type in FIELD_TYPES
    for variant in GENERIC_TEMPLATES
}


def merge_template_set(
    overrides: Mapping[str, Mapping[str, str]] | None = None,
) -> dict[str, dict[str, str]]:
    """配置モード別テンプレートに設定の上書きをマージした新しい辞書を返す。"""
    merged = {str(align): dict(templates) for align, templates in TEMPLATE_SET.items()}
    for align, templates in (overrides or {}).items():
        merged.setdefault(str(align), {}).update(templates)
    return merged


class TemplateResolver:
    """フィールド種別に応じたテンプレート名を解決する。

    種別専用のテンプレート（例: ``checkboxFormGroup``）が定義されていれば
    それを、なければ汎用テンプレート（例: ``formGroup``）を返す。
    """

    def __init__(self, templater: StringTemplater, table: Mapping[tuple[str, str], str] = TYPED_TEMPLATES) -> None:
        self.templater = templater
        self.table = table

    def resolve(self, field_type: str | None, variant: str) -> str:
        """テンプレート名を解決する。

        Args:
            field_type: フィールド種別。
            variant: GROUP_VARIANT / CONTAINER_VARIANT / CONTAINER_ERROR_VARIANT。

        Returns:
            使用するテンプレート名。表にない種別も ``<種別><バリエーション>`` の名前で探し、
            定義されていなければ汎用名にフォールバックする。
        """
        if field_type:
            typed = self.table.get((field_type, variant), f"{field_type}{variant}")
            if self.templater.get(typed) is not None:
                return typed
        return GENERIC_TEMPLATES[variant]
