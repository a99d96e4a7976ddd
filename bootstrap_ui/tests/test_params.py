"""配置モード・グリッド・オプション正規化のテスト。"""

import warnings

from django.test import SimpleTestCase

from ..enums import Alignment
from ..errors import InvalidAlignmentError
from ..grid import grid_class
from ..options import apply_button_classes, check_classes, inject_classes, split_classes
from ..params import (
    build_alignment_templates,
    detect_alignment,
    normalize_create_options,
    resolve_alignment,
)
from ..template_sets import merge_template_set

DEFAULT_GRID = {"left": 2, "middle": 6, "right": 4}


class NormalizeCreateOptionsTests(SimpleTestCase):
    """normalize_create_options関数のテストケース。"""

    def test_horizontal_true_is_translated(self):
        """horizontal=True が align="horizontal" に置き換わることを確認する。"""
        with self.assertWarns(DeprecationWarning):
            options = normalize_create_options({"horizontal": True, "id": "f"})
        self.assertEqual(options, {"align": "horizontal", "id": "f"})

    def test_horizontal_string_is_translated(self):
        with self.assertWarns(DeprecationWarning):
            options = normalize_create_options({"horizontal": "inline"})
        self.assertEqual(options, {"align": "inline"})

    def test_align_true_is_translated(self):
        """align=True が align="horizontal" に置き換わることを確認する。"""
        with self.assertWarns(DeprecationWarning):
            options = normalize_create_options({"align": True})
        self.assertEqual(options["align"], "horizontal")

    def test_current_options_do_not_warn(self):
        """現行形式のオプションでは警告が出ないことを確認する。"""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            options = normalize_create_options({"align": "inline"})
        self.assertEqual(options, {"align": "inline"})

    def test_input_is_not_mutated(self):
        original = {"horizontal": True}
        with self.assertWarns(DeprecationWarning):
            normalize_create_options(original)
        self.assertEqual(original, {"horizontal": True})


class ResolveAlignmentTests(SimpleTestCase):
    """resolve_alignment関数のテストケース。"""

    def test_each_alignment_is_resolved(self):
        """各配置指定がちょうど1つの配置モードに解決されることを確認する。"""
        cases = {
            "default": Alignment.DEFAULT,
            "horizontal": Alignment.HORIZONTAL,
            "inline": Alignment.INLINE,
        }
        for align, expected in cases.items():
            with self.subTest(align=align):
                resolved = resolve_alignment(align, default_grid=DEFAULT_GRID)
                self.assertIs(resolved.alignment, expected)

    def test_grid_mapping_selects_horizontal(self):
        """グリッド辞書の指定で horizontal になりそのグリッドを使うことを確認する。"""
        resolved = resolve_alignment({"left": 3, "middle": 9}, default_grid=DEFAULT_GRID)
        self.assertIs(resolved.alignment, Alignment.HORIZONTAL)
        self.assertEqual(resolved.grid, {"left": 3, "middle": 9})

    def test_horizontal_uses_default_grid(self):
        resolved = resolve_alignment("horizontal", default_grid=DEFAULT_GRID)
        self.assertEqual(resolved.grid, DEFAULT_GRID)

    def test_non_horizontal_has_no_grid(self):
        self.assertIsNone(resolve_alignment("inline", default_grid=DEFAULT_GRID).grid)
        self.assertIsNone(resolve_alignment("default", default_grid=DEFAULT_GRID).grid)

    def test_detects_alignment_from_class(self):
        """フォームのクラスから配置モードを推定することを確認する。"""
        resolved = resolve_alignment(None, css_class="well form-inline")
        self.assertIs(resolved.alignment, Alignment.INLINE)
        resolved = resolve_alignment(None, css_class=["form-horizontal"], default_grid=DEFAULT_GRID)
        self.assertIs(resolved.alignment, Alignment.HORIZONTAL)

    def test_falls_back_to_configured_default(self):
        """明示も推定もできない場合は設定値を使うことを確認する。"""
        resolved = resolve_alignment(None, css_class="well", default_align="inline")
        self.assertIs(resolved.alignment, Alignment.INLINE)

    def test_invalid_alignment_raises(self):
        """未知の配置指定で InvalidAlignmentError が送出されることを確認する。"""
        with self.assertRaises(InvalidAlignmentError):
            resolve_alignment("diagonal")

    def test_invalid_configured_default_raises(self):
        with self.assertRaises(InvalidAlignmentError):
            resolve_alignment(None, default_align="vertical")

    def test_detect_alignment_default(self):
        self.assertEqual(detect_alignment(None, "default"), "default")


class BuildAlignmentTemplatesTests(SimpleTestCase):
    """build_alignment_templates関数のテストケース。"""

    def setUp(self):
        self.template_set = merge_template_set()

    def test_horizontal_templates_get_grid_classes(self):
        """horizontal のテンプレートにグリッドクラスが埋め込まれることを確認する。"""
        resolved = resolve_alignment("horizontal", default_grid=DEFAULT_GRID)
        templates = build_alignment_templates(resolved, self.template_set)

        self.assertIn("col-md-2", templates["label"])
        self.assertIn('<div class="col-md-6">', templates["formGroup"])
        self.assertIn("col-md-offset-2 col-md-6", templates["checkboxFormGroup"])
        self.assertIn("col-md-offset-2 col-md-6", templates["submitContainer"])
        self.assertIn('<div class="col-md-6">', templates["radioFormGroup"])
        self.assertNotIn("%s", "".join(templates.values()))

    def test_inline_templates_are_copied_unchanged(self):
        resolved = resolve_alignment("inline")
        templates = build_alignment_templates(resolved, self.template_set)
        self.assertEqual(templates, self.template_set["inline"])

    def test_override_without_placeholder(self):
        """グリッド用の %s を持たない上書きテンプレートがそのまま使われることを確認する。"""
        template_set = merge_template_set({"horizontal": {"formGroup": "{{label}}<div>{{input}}</div>"}})
        resolved = resolve_alignment("horizontal", default_grid=DEFAULT_GRID)
        templates = build_alignment_templates(resolved, template_set)
        self.assertEqual(templates["formGroup"], "{{label}}<div>{{input}}</div>")
        self.assertIn("col-md-2", templates["label"])

    def test_template_set_is_not_modified(self):
        resolved = resolve_alignment("horizontal", default_grid=DEFAULT_GRID)
        build_alignment_templates(resolved, self.template_set)
        self.assertIn("%s", self.template_set["horizontal"]["label"])


class GridClassTests(SimpleTestCase):
    """grid_class関数のテストケース。"""

    def test_integer_positions_use_md(self):
        self.assertEqual(grid_class(DEFAULT_GRID, "left"), "col-md-2")
        self.assertEqual(grid_class(DEFAULT_GRID, "middle"), "col-md-6")
        self.assertEqual(grid_class(DEFAULT_GRID, "right"), "col-md-4")

    def test_offset(self):
        self.assertEqual(grid_class(DEFAULT_GRID, "left", offset=True), "col-md-offset-2")

    def test_breakpoint_mapping(self):
        """ブレークポイントごとの指定で全ブレークポイントのクラスを返すことを確認する。"""
        grid = {"sm": {"left": 4, "middle": 8}, "lg": {"left": 2, "middle": 10}}
        self.assertEqual(grid_class(grid, "left"), "col-sm-4 col-lg-2")
        self.assertEqual(grid_class(grid, "middle", offset=True), "col-sm-offset-8 col-lg-offset-10")
        self.assertEqual(grid_class(grid, "right"), "")

    def test_empty_grid(self):
        self.assertEqual(grid_class(None, "left"), "")

    def test_unknown_position_raises(self):
        with self.assertRaises(ValueError):
            grid_class(DEFAULT_GRID, "top")


class OptionClassesTests(SimpleTestCase):
    """オプションのクラス操作のテストケース。"""

    def test_split_classes(self):
        self.assertEqual(split_classes("a b  a"), ["a", "b"])
        self.assertEqual(split_classes(["a b", "c"]), ["a", "b", "c"])
        self.assertEqual(split_classes(None), [])

    def test_inject_classes_appends_without_duplicates(self):
        options = inject_classes("form-control", {"class": "wide form-control", "id": "x"})
        self.assertEqual(options, {"class": "wide form-control", "id": "x"})
        self.assertEqual(inject_classes(["a", "b"], {})["class"], "a b")

    def test_check_classes(self):
        self.assertTrue(check_classes("checkbox-inline", {"class": "checkbox-inline big"}))
        self.assertFalse(check_classes("checkbox-inline", {"class": "checkbox"}))
        self.assertFalse(check_classes("checkbox-inline", {}))

    def test_apply_button_classes_default_style(self):
        self.assertEqual(apply_button_classes({})["class"], "btn btn-default")

    def test_apply_button_classes_alias(self):
        """別名のスタイル指定が btn- 付きのクラスになることを確認する。"""
        self.assertEqual(apply_button_classes({"class": "primary"})["class"], "btn-primary btn")
        self.assertEqual(apply_button_classes({"class": "btn-danger"})["class"], "btn-danger btn")
