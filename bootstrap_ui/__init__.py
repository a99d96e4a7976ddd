"""Bootstrap対応のフォームヘルパー。

Djangoのフォームを Bootstrap 3 のマークアップ（グリッドクラス、配置バリエーション、
ヘルプ/エラーブロック）で描画するためのアプリケーション。
"""

from .errors import InvalidAlignmentError, TemplateNotFoundError
from .helper import FormHelper

__all__ = ["FormHelper", "InvalidAlignmentError", "TemplateNotFoundError"]
