"""Bootstrapフォーム用のテンプレートタグ。

使用例:
    {% load bootstrap_ui %}
    {% bootstrap_form form align="horizontal" submit="送信" %}

    {% bootstrap_helper as helper %}
    {% bootstrap_create helper form class="form-inline" %}
    {% bootstrap_input helper "email" placeholder="メールアドレス" %}
    {% bootstrap_end helper %}
"""

from typing import Any

from django import template
from django.utils.safestring import SafeString, mark_safe

from ..helper import FormHelper

register = template.Library()


@register.simple_tag(takes_context=True)
def bootstrap_helper(context: template.Context, **config: Any) -> FormHelper:
    """リクエストごとのFormHelperを生成する。"""
    return FormHelper(context.get("request"), **config)


@register.simple_tag
def bootstrap_create(helper: FormHelper, form: Any = None, **options: Any) -> SafeString:
    return helper.create(form, options)


@register.simple_tag
def bootstrap_input(helper: FormHelper, field_name: str, **options: Any) -> SafeString:
    return helper.input(field_name, options)


@register.simple_tag
def bootstrap_static(helper: FormHelper, field_name: str, **options: Any) -> SafeString:
    return helper.static_control(field_name, options)


@register.simple_tag
def bootstrap_submit(helper: FormHelper, caption: str | None = None, **options: Any) -> SafeString:
    return helper.submit(caption, options)


@register.simple_tag
def bootstrap_end(helper: FormHelper) -> SafeString:
    return helper.end()


@register.simple_tag(takes_context=True)
def bootstrap_form(
    context: template.Context,
    form: Any,
    submit: str | None = None,
    legend: str | None = None,
    **options: Any,
) -> SafeString:
    """フォーム全体（開始タグ・全フィールド・送信ボタン・終了タグ）を描画する。

    Args:
        context: テンプレートコンテキスト。request を含めばCSRFトークンを出力する。
        form: Djangoのフォーム。
        submit: 送信ボタンの表示名。省略時はボタンを出力しない。
        legend: fieldset の見出し。
        **options: create() に渡すオプション。

    Returns:
        フォームのHTML。
    """
    helper = FormHelper(context.get("request"))
    parts = [
        helper.create(form, options),
        helper.inputs(legend=legend, fieldset=bool(legend)),
    ]
    if submit:
        parts.append(helper.submit(submit))
    parts.append(helper.end())
    return mark_safe("".join(parts))
