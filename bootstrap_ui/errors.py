"""フォームヘルパーの例外定義。"""

from django.core.exceptions import SuspiciousOperation


class InvalidAlignmentError(ValueError):
    """`align` オプションに未知の値が指定された場合に送出される。"""


class TemplateNotFoundError(KeyError):
    """存在しない名前のテンプレートを整形しようとした場合に送出される。"""


class FormTamperedError(SuspiciousOperation):
    """送信されたフォームが描画時の内容から改ざんされている場合に送出される。"""
