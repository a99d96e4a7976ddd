"""フォームオプションの解析・正規化。

create() に渡されたオプションから配置モードとグリッドを決定する。
旧形式のオプションの互換処理もここで行い、ヘルパー本体には持ち込まない。
"""

import logging
import warnings
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from .enums import Alignment
from .errors import InvalidAlignmentError
from .grid import grid_class
from .options import check_classes

logger = logging.getLogger(__name__)

# =============================================================================
# 定数
# =============================================================================

LEGACY_HORIZONTAL_MESSAGE: Final[str] = "The `horizontal` option is deprecated. Use `align` instead."
LEGACY_ALIGN_TRUE_MESSAGE: Final[str] = "Passing `align=True` is deprecated. Use `align='horizontal'` instead."

DETECTABLE_ALIGNMENTS: Final[tuple[Alignment, ...]] = (Alignment.HORIZONTAL, Alignment.INLINE)

# オフセット付きのグリッドクラスを使うテンプレート
OFFSET_TEMPLATES: Final[tuple[str, ...]] = ("checkboxFormGroup", "submitContainer")
# 中央列のグリッドクラスを使うテンプレート
MIDDLE_TEMPLATES: Final[tuple[str, ...]] = ("formGroup", "radioFormGroup")


# =============================================================================
# 結果型
# =============================================================================


@dataclass(frozen=True)
class ResolvedAlignment:
    """配置モードの解決結果。

    Attributes:
        alignment: 決定した配置モード。
        grid: horizontal の場合のグリッド指定。それ以外はNone。
    """

    alignment: Alignment
    grid: Mapping[str, Any] | None = None


# =============================================================================
# 旧形式オプションの互換処理
# =============================================================================


def normalize_create_options(options: Mapping[str, Any]) -> dict[str, Any]:
    """create() のオプションから旧形式の指定を取り除いて現行形式にする。

    - ``horizontal`` オプションは ``align`` に置き換える（Trueは "horizontal"）。
    - ``align=True`` は ``align="horizontal"`` に置き換える。

    いずれも DeprecationWarning を発行する。

    Args:
        options: create() に渡されたオプション。

    Returns:
        正規化された新しいオプション辞書。
    """
    result = dict(options)

    if "horizontal" in result:
        horizontal = result.pop("horizontal")
        if horizontal is True:
            horizontal = Alignment.HORIZONTAL.value
        result["align"] = horizontal or None
        warnings.warn(LEGACY_HORIZONTAL_MESSAGE, DeprecationWarning, stacklevel=3)

    if result.get("align") is True:
        result["align"] = Alignment.HORIZONTAL.value
        warnings.warn(LEGACY_ALIGN_TRUE_MESSAGE, DeprecationWarning, stacklevel=3)

    return result


# =============================================================================
# 配置モードの解決
# =============================================================================


def detect_alignment(css_class: Any, default: Any) -> Any:
    """フォームタグのクラスから配置モードを推定する。

    Args:
        css_class: フォームタグの ``class`` 指定。
        default: 推定できない場合の値。

    Returns:
        ``form-horizontal`` / ``form-inline`` を含めば対応する配置モード、
        含まなければ default。
    """
    for alignment in DETECTABLE_ALIGNMENTS:
        if check_classes(f"form-{alignment}", {"class": css_class}):
            return alignment
    return default


def resolve_alignment(
    align: Any,
    *,
    css_class: Any = None,
    default_align: Any = Alignment.DEFAULT,
    default_grid: Mapping[str, Any] | None = None,
) -> ResolvedAlignment:
    """配置モードとグリッドを決定する。

    Args:
        align: 明示された配置指定。配置名、グリッド辞書、またはNone。
        css_class: 配置が明示されていない場合に推定に使うフォームのクラス。
        default_align: 推定もできない場合の配置指定（設定値）。
        default_grid: horizontal でグリッドが明示されていない場合のグリッド。

    Returns:
        ResolvedAlignment。

    Raises:
        InvalidAlignmentError: 配置指定が未知の値の場合。
    """
    if not align:
        align = detect_alignment(css_class, default_align)

    if isinstance(align, Mapping):
        logger.debug("グリッド指定により horizontal を選択しました: grid=%s", dict(align))
        return ResolvedAlignment(Alignment.HORIZONTAL, dict(align))

    try:
        alignment = Alignment(align)
    except ValueError:
        raise InvalidAlignmentError("Invalid `align` option value.") from None

    if alignment is Alignment.HORIZONTAL:
        return ResolvedAlignment(alignment, dict(default_grid or {}))
    return ResolvedAlignment(alignment)


def _fill_grid(template: str, css_class: str) -> str:
    """最初の ``%s`` をグリッドクラスに置き換える。``%s`` がなければそのまま返す。"""
    return template.replace("%s", css_class, 1)


def build_alignment_templates(
    resolved: ResolvedAlignment,
    template_set: Mapping[str, Mapping[str, str]],
) -> dict[str, str]:
    """配置モードに対応するテンプレートを組み立てる。

    horizontal では ``%s`` のプレースホルダーにグリッドクラスを埋め込む。

    Args:
        resolved: 解決済みの配置モード。
        template_set: 配置モード別のテンプレート。

    Returns:
        テンプレーターに追加するテンプレート辞書。
    """
    templates = dict(template_set.get(resolved.alignment, {}))
    if resolved.alignment is not Alignment.HORIZONTAL:
        return templates

    grid = resolved.grid
    left = grid_class(grid, "left")
    middle = grid_class(grid, "middle")
    offsetted = " ".join(filter(None, [grid_class(grid, "left", offset=True), middle]))

    if "label" in templates:
        templates["label"] = _fill_grid(templates["label"], left)
    for name in MIDDLE_TEMPLATES:
        if name in templates:
            templates[name] = _fill_grid(templates[name], middle)
    for name in OFFSET_TEMPLATES:
        if name in templates:
            templates[name] = _fill_grid(templates[name], offsetted)
    return templates
