"""
HTML output for the account creation page
"""

import html

from join_system.validation import BLANK, DUPLICATE

ERROR_MESSAGES = {
    ('email', BLANK): "＊メールアドレスを入力してください",
    ('email', DUPLICATE): "＊このメールアドレスはすでに登録済みです",
    ('password', BLANK): "＊パスワードを入力してください",
}

CSRF_FAILURE_MESSAGE = "Invalid CSRF token"


def escape_for_html(value):
    """Escape & < > " ' for text and attribute context"""
    if value is None:
        return ''
    return html.escape(str(value), quote=True)


def error_block(field, errors):
    kind = errors.get(field) if errors else None
    if not kind:
        return ''
    message = ERROR_MESSAGES.get((field, kind))
    if message is None:
        return ''
    return f'\n                <p class="error">{escape_for_html(message)}</p>'


def render_join_page(token, values=None, errors=None):
    """Render the form, echoing values and showing inline errors"""
    values = values or {}
    name = escape_for_html(values.get('name'))
    email = escape_for_html(values.get('email'))
    password = escape_for_html(values.get('password'))

    return f"""<!DOCTYPE html>
<html lang="ja">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width,initial-scale=1.0,minimum-scale=1.0">
    <title>アカウント作成</title>
    <link href="https://unpkg.com/sanitize.css" rel="stylesheet"/>
    <link rel="stylesheet" href="css/style.css">
</head>
<body>
    <div class="content">
        <form action="" method="POST">
            <h1>アカウント作成</h1>
            <p>当サービスをご利用するために、次のフォームに必要事項をご記入ください。</p>
            <br>

            <div class="control">
                <label for="name">ユーザー名</label>
                <input id="name" type="text" name="name" value="{name}">
            </div>

            <div class="control">
                <label for="email">メールアドレス<span class="required">必須</span></label>
                <input id="email" type="email" name="email" value="{email}">{error_block('email', errors)}
            </div>

            <div class="control">
                <label for="password">パスワード<span class="required">必須</span></label>
                <input id="password" type="password" name="password" value="{password}">{error_block('password', errors)}
            </div>

            <input type="hidden" name="token" value="{escape_for_html(token)}">

            <div class="control">
                <button type="submit" class="btn">確認する</button>
            </div>
        </form>
    </div>
</body>
</html>
"""


def render_server_error(message="ただいまサービスをご利用いただけません。しばらくしてから再度お試しください。"):
    """Generic failure page; never includes technical details"""
    return f"""<!DOCTYPE html>
<html lang="ja">
<head>
    <meta charset="utf-8">
    <title>エラー</title>
    <link rel="stylesheet" href="css/style.css">
</head>
<body>
    <div class="content">
        <h1>エラー</h1>
        <p class="error">{escape_for_html(message)}</p>
        <div class="error-actions">
            <a href="">アカウント作成に戻る</a>
        </div>
    </div>
</body>
</html>
"""
