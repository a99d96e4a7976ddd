"""フォームの改ざん検知。

描画したフィールド名と、hidden/静的コントロールで固定した値を記録し、
end() でDjangoの署名付きトークンとして出力する。送信時は verify_token() で
トークンと送信データを照合する。
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from django.core import signing
from django.middleware.csrf import get_token
from django.http import HttpRequest, QueryDict

from .conf import DEFAULT_TOKEN_FIELD
from .errors import FormTamperedError

logger = logging.getLogger(__name__)

TOKEN_SALT: Final[str] = "bootstrap_ui.security"
CSRF_FIELD: Final[str] = "csrfmiddlewaretoken"

# 照合対象から除外する送信フィールド
IGNORED_FIELDS: Final[frozenset[str]] = frozenset({CSRF_FIELD})


@dataclass
class SecureFieldRegistry:
    """描画されたフィールド名と固定値の記録。

    Attributes:
        fields: 送信を許可するフィールド名。
        locked: 値を固定したフィールド名から値への辞書。
        unlocked: 照合しないフィールド名。
    """

    fields: list[str] = field(default_factory=list)
    locked: dict[str, str] = field(default_factory=dict)
    unlocked: list[str] = field(default_factory=list)

    def register(self, name: str, *, lock: bool = False, value: Any = None) -> None:
        """フィールドを登録する。

        Args:
            name: フィールド名。
            lock: Trueなら値も固定する。
            value: 固定する値。
        """
        if not name or name in self.unlocked:
            return
        if name not in self.fields:
            self.fields.append(name)
        if lock:
            self.locked[name] = "" if value is None else str(value)

    def unlock(self, name: str) -> None:
        """フィールドを照合対象から外す。"""
        if name in self.fields:
            self.fields.remove(name)
        self.locked.pop(name, None)
        if name not in self.unlocked:
            self.unlocked.append(name)

    def register_many(self, names: Iterable[str]) -> None:
        for name in names:
            self.register(name)

    def dumps(self) -> str:
        """登録内容を署名付きトークンにする。"""
        return signing.dumps(
            {"fields": sorted(self.fields), "locked": self.locked, "unlocked": sorted(self.unlocked)},
            salt=TOKEN_SALT,
        )


def csrf_token(request: HttpRequest | None) -> str | None:
    """リクエストのCSRFトークンを返す。リクエストがなければNone。"""
    if request is None:
        return None
    return get_token(request)


def _posted_values(data: Mapping[str, Any], name: str) -> list[str]:
    if isinstance(data, QueryDict):
        return data.getlist(name)
    value = data.get(name)
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [] if value is None else [str(value)]


def verify_token(data: Mapping[str, Any], *, token_field: str = DEFAULT_TOKEN_FIELD) -> dict[str, Any]:
    """送信データを改ざん検知トークンと照合する。

    Args:
        data: request.POST 等の送信データ。
        token_field: トークンのフィールド名。

    Returns:
        トークンから復元した登録内容。

    Raises:
        FormTamperedError: トークンがない・不正、固定値が変更された、
            または描画していないフィールドが送信された場合。
    """
    token = data.get(token_field)
    if not token:
        logger.warning("改ざん検知トークンがありません: field=%s", token_field)
        raise FormTamperedError("Missing form token.")

    try:
        payload = signing.loads(str(token), salt=TOKEN_SALT)
    except signing.BadSignature:
        logger.warning("改ざん検知トークンの署名が不正です")
        raise FormTamperedError("Invalid form token.") from None

    allowed = set(payload.get("fields", [])) | set(payload.get("unlocked", []))
    allowed |= IGNORED_FIELDS | {token_field}
    unexpected = sorted(name for name in data if name not in allowed)
    if unexpected:
        logger.warning("想定外のフィールドが送信されました: fields=%s", unexpected)
        raise FormTamperedError(f"Unexpected field(s) in POST data: {', '.join(unexpected)}")

    for name, expected in payload.get("locked", {}).items():
        posted = _posted_values(data, name)
        if posted != [expected]:
            logger.warning("固定値が変更されました: field=%s", name)
            raise FormTamperedError(f"Tampered field in POST data: {name}")

    return payload
