"""demo_siteのテスト。

お問い合わせフォームの表示と、改ざん検知トークン付きの送信を確認する。
"""

import re

from django.test import TestCase
from django.urls import reverse

from bootstrap_ui.conf import DEFAULT_TOKEN_FIELD

TOKEN_PATTERN = re.compile(rf'name="{DEFAULT_TOKEN_FIELD}"[^>]*value="([^"]+)"')


class ContactViewTest(TestCase):
    """お問い合わせビューのテスト。"""

    def setUp(self) -> None:
        self.url = reverse("contact")

    def _token(self) -> str:
        response = self.client.get(self.url)
        match = TOKEN_PATTERN.search(response.content.decode())
        self.assertIsNotNone(match)
        assert match is not None
        return match.group(1)

    def _post_data(self, **extra: str) -> dict[str, str]:
        return {
            DEFAULT_TOKEN_FIELD: self._token(),
            "name": "山田太郎",
            "email": "taro@example.com",
            "topic": "general",
            "message": "テストです。",
            **extra,
        }

    def test_get_renders_form(self) -> None:
        """フォームが横並びのBootstrapマークアップで表示されることを確認する。"""
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "demo_site/contact.html")
        self.assertContains(response, 'class="form-horizontal"')
        self.assertContains(response, 'class="control-label col-md-2"')
        self.assertContains(response, '<p class="help-block">返信先として使用します。</p>', html=True)

    def test_post_valid_redirects(self) -> None:
        """正しいトークンと入力でリダイレクトされることを確認する。"""
        response = self.client.post(self.url, self._post_data())
        self.assertRedirects(response, f"{self.url}?sent=1")

    def test_post_invalid_shows_errors(self) -> None:
        """入力に誤りがある場合にエラー付きで再表示されることを確認する。"""
        response = self.client.post(self.url, self._post_data(email="invalid"))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "has-error")

    def test_post_unexpected_field_is_rejected(self) -> None:
        """描画していないフィールドの送信が400になることを確認する。"""
        response = self.client.post(self.url, self._post_data(is_admin="1"))
        self.assertEqual(response.status_code, 400)

    def test_post_without_token_is_rejected(self) -> None:
        response = self.client.post(self.url, {"name": "山田太郎"})
        self.assertEqual(response.status_code, 400)

    def test_sent_message(self) -> None:
        response = self.client.get(self.url, {"sent": "1"})
        self.assertContains(response, "お問い合わせを受け付けました。")
