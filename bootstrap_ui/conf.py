"""フォームヘルパーの設定読み込み。

settings.BOOTSTRAP_UI（辞書）から設定を読み込み、未指定の項目はデフォルト値で補う。

設定例:
    BOOTSTRAP_UI = {
        "align": "horizontal",
        "grid": {"left": 3, "middle": 9, "right": 0},
        "templates": {"help": '<span class="help-block">{{content}}</span>'},
        "widgets": {"date": "myapp.widgets.DatePickerWidget"},
    }
"""

import copy
from dataclasses import dataclass, field, fields, replace
from typing import Any, Final

from django.conf import settings

SETTINGS_NAME: Final[str] = "BOOTSTRAP_UI"

DEFAULT_GRID: Final[dict[str, int]] = {"left": 2, "middle": 6, "right": 4}

# form-control クラスを付与しないフィールド種別
DEFAULT_PLAIN_TYPES: Final[tuple[str, ...]] = (
    "checkbox",
    "radio",
    "hidden",
    "staticControl",
    "multicheckbox",
)

DEFAULT_TOKEN_FIELD: Final[str] = "_bootstrap_ui_token"


@dataclass(frozen=True)
class HelperConfig:
    """FormHelperの設定値。

    Attributes:
        align: create()で配置が決まらない場合の配置モード。
        grid: 横並びフォームで使うグリッド指定。
        error_class: エラー時に入力要素へ付与するCSSクラス。Noneなら付与しない。
        templates: 組み込みテンプレートを上書きするテンプレート。
        template_set: 配置モードごとのテンプレートへのマージ内容。
        widgets: ウィジェット名からクラス（またはドット区切りのパス）への対応。
        plain_types: form-control クラスを付与しないフィールド種別。
        secure: 改ざん検知用トークンをデフォルトで出力するか。
        token_field: 改ざん検知用トークンのフィールド名。
    """

    align: Any = "default"
    grid: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_GRID))
    error_class: str | None = None
    templates: dict[str, str] = field(default_factory=dict)
    template_set: dict[str, dict[str, str]] = field(default_factory=dict)
    widgets: dict[str, Any] = field(default_factory=dict)
    plain_types: tuple[str, ...] = DEFAULT_PLAIN_TYPES
    secure: bool = False
    token_field: str = DEFAULT_TOKEN_FIELD

    def merged(self, **overrides: Any) -> "HelperConfig":
        """指定した項目だけを差し替えた設定を返す。

        Args:
            **overrides: 差し替える設定値。Noneの項目は無視する。

        Returns:
            新しいHelperConfig。

        Raises:
            TypeError: 未知の設定名が含まれる場合。
        """
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown {SETTINGS_NAME} option(s): {', '.join(sorted(unknown))}")

        values = {key: value for key, value in overrides.items() if value is not None}
        if "plain_types" in values:
            values["plain_types"] = tuple(values["plain_types"])
        return replace(self, **copy.deepcopy(values))


def get_config(**overrides: Any) -> HelperConfig:
    """settingsとキーワード引数から設定を組み立てる。

    settings側の値は呼び出しごとに複製するため、インスタンス間で共有されない。

    Args:
        **overrides: settingsより優先する設定値。

    Returns:
        HelperConfig。
    """
    configured: dict[str, Any] = getattr(settings, SETTINGS_NAME, {}) or {}
    return HelperConfig().merged(**configured).merged(**overrides)
