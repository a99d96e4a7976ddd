"""ウィジェットとウィジェットレジストリのテスト。"""

from django.test import SimpleTestCase

from ..contexts import NullContext
from ..template_sets import BASE_TEMPLATES, BOOTSTRAP_TEMPLATES
from ..templater import StringTemplater
from ..widgets import (
    BasicWidget,
    ButtonWidget,
    CheckboxWidget,
    SelectBoxWidget,
    WidgetRegistry,
    normalize_choices,
)


class UppercaseWidget:
    """テスト用の独自ウィジェット。"""

    def __init__(self, templater):
        self.templater = templater

    def render(self, data, context):
        return str(data.get("val", "")).upper()

    def secure_fields(self, data):
        return []


class WidgetTestMixin:
    def setUp(self):
        self.templater = StringTemplater({**BASE_TEMPLATES, **BOOTSTRAP_TEMPLATES})
        self.registry = WidgetRegistry(self.templater)
        self.context = NullContext()

    def render(self, name, data):
        return self.registry.get(name).render(data, self.context)


class BasicWidgetTests(WidgetTestMixin, SimpleTestCase):
    """BasicWidgetのテストケース。"""

    def test_render_text_input(self):
        html = self.render("text", {"type": "text", "name": "title", "id": "id_title", "val": "a&b"})
        self.assertHTMLEqual(html, '<input type="text" name="title" id="id_title" value="a&amp;b">')

    def test_password_value_is_not_rendered(self):
        html = self.render("password", {"type": "password", "name": "pw", "val": "secret"})
        self.assertHTMLEqual(html, '<input type="password" name="pw">')

    def test_prepend_and_append(self):
        """prepend / append で input-group になることを確認する。"""
        html = self.render("text", {"type": "text", "name": "price", "prepend": "¥", "append": ".00"})
        self.assertHTMLEqual(
            html,
            '<div class="input-group"><span class="input-group-addon">¥</span>'
            '<input type="text" name="price">'
            '<span class="input-group-addon">.00</span></div>',
        )

    def test_button_addon_uses_input_group_btn(self):
        button = self.render("button", {"text": "検索", "type": "button"})
        html = self.render("text", {"type": "text", "name": "q", "append": button})
        self.assertInHTML(
            '<span class="input-group-btn"><button type="button" class="btn btn-default">検索</button></span>',
            html,
        )

    def test_unknown_type_uses_default_widget(self):
        self.assertIsInstance(self.registry.get("email"), BasicWidget)


class ButtonWidgetTests(WidgetTestMixin, SimpleTestCase):
    """ButtonWidgetのテストケース。"""

    def test_render_default_button(self):
        html = self.render("button", {"text": "保存"})
        self.assertHTMLEqual(html, '<button type="submit" class="btn btn-default">保存</button>')

    def test_escape(self):
        html = self.render("button", {"text": "<i>x</i>"})
        self.assertIn("&lt;i&gt;", html)
        html = self.render("button", {"text": "<i>x</i>", "escape": False})
        self.assertIn("<i>x</i>", html)


class CheckboxWidgetTests(WidgetTestMixin, SimpleTestCase):
    """CheckboxWidgetのテストケース。"""

    def test_checked_when_value_is_true(self):
        html = self.render("checkbox", {"name": "agree", "val": True})
        self.assertHTMLEqual(html, '<input type="checkbox" name="agree" value="1" checked>')

    def test_unchecked(self):
        html = self.render("checkbox", {"name": "agree", "val": False})
        self.assertHTMLEqual(html, '<input type="checkbox" name="agree" value="1">')

    def test_is_checked_compares_values(self):
        self.assertTrue(CheckboxWidget.is_checked("yes", "yes"))
        self.assertFalse(CheckboxWidget.is_checked("0", 1))


class RadioWidgetTests(WidgetTestMixin, SimpleTestCase):
    """RadioWidgetのテストケース。"""

    def test_render_options(self):
        """各選択肢がラベル付きのラジオボタンになることを確認する。"""
        html = self.render(
            "radio",
            {"name": "size", "id": "id_size", "options": [("s", "小"), ("l", "大")], "val": "l"},
        )
        self.assertHTMLEqual(
            html,
            '<div class="radio"><label for="id_size_0">'
            '<input type="radio" name="size" value="s" id="id_size_0">小</label></div>'
            '<div class="radio"><label for="id_size_1">'
            '<input type="radio" name="size" value="l" id="id_size_1" checked>大</label></div>',
        )

    def test_inline(self):
        """inline では div で囲まずラベルのクラスを適用することを確認する。"""
        html = self.render(
            "radio",
            {
                "name": "size",
                "id": "id_size",
                "options": ["s"],
                "inline": True,
                "label": {"class": "radio-inline"},
            },
        )
        self.assertHTMLEqual(
            html,
            '<label class="radio-inline" for="id_size_0">'
            '<input type="radio" name="size" value="s" id="id_size_0">s</label>',
        )


class SelectBoxWidgetTests(WidgetTestMixin, SimpleTestCase):
    """SelectBoxWidgetのテストケース。"""

    def test_render_with_empty_and_selected(self):
        html = self.render(
            "select",
            {"name": "color", "options": {"r": "赤", "g": "緑"}, "val": "g", "empty": "選択してください"},
        )
        self.assertHTMLEqual(
            html,
            '<select name="color"><option value="">選択してください</option>'
            '<option value="r">赤</option><option value="g" selected>緑</option></select>',
        )

    def test_optgroup(self):
        html = self.render("select", {"name": "city", "options": [("関東", [("tk", "東京")])]})
        self.assertHTMLEqual(
            html,
            '<select name="city"><optgroup label="関東"><option value="tk">東京</option></optgroup></select>',
        )

    def test_multiselect(self):
        html = self.render("multiselect", {"name": "tags", "options": ["a", "b"], "val": ["a", "b"]})
        self.assertHTMLEqual(
            html,
            '<select name="tags" multiple="multiple">'
            '<option value="a" selected>a</option><option value="b" selected>b</option></select>',
        )

    def test_normalize_choices(self):
        self.assertEqual(normalize_choices(["a", ("b", "B")]), [("a", "a"), ("b", "B")])
        self.assertEqual(normalize_choices(None), [])


class MultiCheckboxWidgetTests(WidgetTestMixin, SimpleTestCase):
    """MultiCheckboxWidgetのテストケース。"""

    def test_render_uses_checkbox_wrapper(self):
        self.templater.add({"checkboxWrapper": "<p>{{label}}</p>"})
        html = self.render("multicheckbox", {"name": "tags", "id": "id_tags", "options": ["a"], "val": ["a"]})
        self.assertHTMLEqual(
            html,
            '<p><label for="id_tags_0">'
            '<input type="checkbox" name="tags" value="a" id="id_tags_0" checked>a</label></p>',
        )


class TextareaWidgetTests(WidgetTestMixin, SimpleTestCase):
    """TextareaWidgetのテストケース。"""

    def test_render(self):
        html = self.render("textarea", {"name": "body", "val": "<p>", "rows": 3})
        self.assertHTMLEqual(html, '<textarea name="body" rows="3">&lt;p&gt;</textarea>')


class WidgetRegistryTests(WidgetTestMixin, SimpleTestCase):
    """WidgetRegistryのテストケース。"""

    def test_widgets_are_cached(self):
        self.assertIs(self.registry.get("select"), self.registry.get("select"))
        self.assertIsInstance(self.registry.get("select"), SelectBoxWidget)

    def test_add_class(self):
        """独自ウィジェットを登録して使えることを確認する。"""
        self.registry.add({"shout": UppercaseWidget})
        self.assertEqual(self.render("shout", {"val": "abc"}), "ABC")

    def test_add_import_path(self):
        self.registry.add({"shout": "bootstrap_ui.tests.test_widgets.UppercaseWidget"})
        self.assertIsInstance(self.registry.get("shout"), UppercaseWidget)

    def test_override_builtin(self):
        self.registry.add({"button": UppercaseWidget})
        self.assertNotIsInstance(self.registry.get("button"), ButtonWidget)

    def test_bad_import_path_raises(self):
        self.registry.add({"broken": "bootstrap_ui.tests.missing.Widget"})
        with self.assertRaises(ImportError):
            self.registry.get("broken")
