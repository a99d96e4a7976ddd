"""bootstrap_uiアプリケーションの設定。"""

from django.apps import AppConfig


class BootstrapUIConfig(AppConfig):
    """bootstrap_uiアプリケーションの設定クラス。

    Attributes:
        name: アプリケーション名。
        verbose_name: 管理画面等での表示名。
    """

    name = "bootstrap_ui"
    verbose_name = "Bootstrap UI"
