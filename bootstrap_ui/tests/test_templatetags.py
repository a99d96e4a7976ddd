"""テンプレートタグのテスト。"""

from django import forms
from django.template import Context, Template
from django.test import RequestFactory, SimpleTestCase


class SearchForm(forms.Form):
    q = forms.CharField(label="キーワード")
    exact = forms.BooleanField(label="完全一致", required=False)


def render(source: str, **context) -> str:
    return Template("{% load bootstrap_ui %}" + source).render(Context(context))


class BootstrapFormTagTests(SimpleTestCase):
    """bootstrap_form タグのテストケース。"""

    def test_renders_whole_form(self):
        html = render('{% bootstrap_form form align="horizontal" submit="検索" %}', form=SearchForm())
        self.assertTrue(html.startswith("<form "))
        self.assertIn('method="post"', html)
        self.assertIn('class="form-horizontal"', html)
        self.assertIn('<label class="control-label col-md-2" for="id_q">キーワード</label>', html)
        self.assertIn('value="検索"', html)
        self.assertTrue(html.endswith("</form>"))
        self.assertNotIn("<fieldset", html)

    def test_legend(self):
        html = render('{% bootstrap_form form legend="検索条件" %}', form=SearchForm())
        self.assertIn("<fieldset><legend>検索条件</legend>", html)

    def test_csrf_token_from_request(self):
        html = render("{% bootstrap_form form %}", form=SearchForm(), request=RequestFactory().get("/"))
        self.assertIn('name="csrfmiddlewaretoken"', html)


class HelperTagTests(SimpleTestCase):
    """個別のヘルパータグのテストケース。"""

    def test_helper_tags(self):
        """bootstrap_helper で生成したヘルパーを各タグで使えることを確認する。"""
        html = render(
            "{% bootstrap_helper as helper %}"
            '{% bootstrap_create helper form align="inline" %}'
            '{% bootstrap_input helper "q" placeholder="キーワード" %}'
            '{% bootstrap_submit helper "検索" class="primary" %}'
            "{% bootstrap_end helper %}",
            form=SearchForm(),
        )
        self.assertIn('class="form-inline"', html)
        self.assertIn('<label class="sr-only" for="id_q">キーワード</label>', html)
        self.assertIn('placeholder="キーワード"', html)
        self.assertIn('class="btn-primary btn"', html)
        self.assertTrue(html.endswith("</form>"))

    def test_static_tag(self):
        html = render(
            "{% bootstrap_helper as helper %}"
            "{% bootstrap_create helper data %}"
            '{% bootstrap_static helper "code" hidden_field=False %}',
            data={"data": {"code": "<A-1>"}},
        )
        self.assertIn('<p class="form-control-static">&lt;A-1&gt;</p>', html)
