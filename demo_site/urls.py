"""demo_siteプロジェクトのURL設定。

URLパターン:
    - '': お問い合わせフォーム
"""

import django.urls

from . import views

urlpatterns = [
    django.urls.path("", views.contact, name="contact"),
]
