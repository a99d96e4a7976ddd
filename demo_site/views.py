"""お問い合わせフォームのビュー。"""

import logging

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render

from bootstrap_ui.conf import DEFAULT_TOKEN_FIELD
from bootstrap_ui.security import verify_token

from .forms import ContactForm

logger = logging.getLogger(__name__)


def contact(request: HttpRequest) -> HttpResponse:
    """お問い合わせフォームを表示・受け付ける。

    POST時は改ざん検知トークンを照合してからフォームを検証する。
    トークンの照合に失敗した場合は FormTamperedError（SuspiciousOperation）により
    Djangoが400を返す。

    Args:
        request: HTTPリクエストオブジェクト。

    Returns:
        GET/検証失敗時: フォームを含むHttpResponse。
        受付成功時: 完了表示へのリダイレクト。
    """
    if request.method == "POST":
        token_field = getattr(settings, "BOOTSTRAP_UI", {}).get("token_field", DEFAULT_TOKEN_FIELD)
        verify_token(request.POST, token_field=token_field)
        form = ContactForm(request.POST)
        if form.is_valid():
            logger.info("お問い合わせを受け付けました: topic=%s", form.cleaned_data["topic"])
            return redirect(f"{request.path}?sent=1")
        logger.warning("お問い合わせの入力に誤りがあります: errors=%s", form.errors.as_json())
    else:
        form = ContactForm()

    return render(
        request,
        "demo_site/contact.html",
        {"form": form, "sent": request.GET.get("sent") == "1"},
    )
