"""お問い合わせフォームの定義。"""

from django import forms

TOPIC_CHOICES = [
    ("general", "一般"),
    ("support", "サポート"),
    ("billing", "請求"),
]

CHANNEL_CHOICES = [
    ("email", "メール"),
    ("phone", "電話"),
    ("letter", "郵送"),
]


class ContactForm(forms.Form):
    """お問い合わせフォーム。

    Bootstrap用のクラスはフォームヘルパーが付与するため、ウィジェットには指定しない。
    """

    name = forms.CharField(label="お名前", max_length=100)
    email = forms.EmailField(label="メールアドレス", help_text="返信先として使用します。")
    topic = forms.ChoiceField(label="種別", choices=TOPIC_CHOICES, widget=forms.RadioSelect)
    channels = forms.MultipleChoiceField(
        label="連絡方法",
        choices=CHANNEL_CHOICES,
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )
    message = forms.CharField(label="内容", widget=forms.Textarea(attrs={"rows": 5}))
    subscribe = forms.BooleanField(label="お知らせを受け取る", required=False)
