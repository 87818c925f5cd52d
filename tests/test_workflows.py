"""
End-to-end registration workflows over HTTP against a local WSGI server
"""

import threading
from wsgiref.simple_server import WSGIRequestHandler, make_server

import pytest
import yaml

from join_client import JoinClient
from join_system.wsgi import make_app


class QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        pass


@pytest.fixture
def base_url(config, members):
    members.add_member("dup@example.com")
    server = make_server("127.0.0.1", 0, make_app(config), handler_class=QuietHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_port}"
    server.shutdown()
    server.server_close()


def _stored_join(config, client):
    with open(f"{config.session_dir}/{client.session_id}.yaml", "r", encoding="utf-8") as f:
        return yaml.safe_load(f)['data'].get('join')


def test_registration_workflow(config, base_url):
    client = JoinClient(base_url)

    form = client.get_form()
    assert form.status_code == 200
    assert form.headers['Content-Type'] == "text/html; charset=utf-8"
    assert client.token
    first_session = client.session_id

    response = client.register("new@example.com", "secret", name="Taro")

    assert response.status_code == 302
    assert response.headers['Location'] == "check.py"
    assert client.session_id != first_session
    assert _stored_join(config, client) == {'name': "Taro", 'email': "new@example.com", 'password': "secret"}


def test_validation_workflow(config, base_url):
    client = JoinClient(base_url)
    client.get_form()

    blank = client.register("", "")
    assert blank.status_code == 200
    assert "＊メールアドレスを入力してください" in blank.text
    assert "＊パスワードを入力してください" in blank.text

    duplicate = client.register("dup@example.com", "secret", name="<b>x</b>")
    assert duplicate.status_code == 200
    assert "＊このメールアドレスはすでに登録済みです" in duplicate.text
    assert "&lt;b&gt;x&lt;/b&gt;" in duplicate.text
    assert _stored_join(config, client) is None


def test_forged_token_workflow(config, base_url):
    client = JoinClient(base_url)
    client.get_form()

    response = client.register("new@example.com", "secret", token="0" * 64)

    assert response.status_code == 400
    assert response.text == "Invalid CSRF token"
    assert _stored_join(config, client) is None


def test_token_from_another_session_is_rejected(base_url):
    victim = JoinClient(base_url)
    victim.get_form()
    attacker = JoinClient(base_url)
    attacker.get_form()

    response = attacker.register("new@example.com", "secret", token=victim.token)

    assert response.status_code == 400
