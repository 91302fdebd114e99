from services.credentials import CredentialStore, Credentials


def test_snapshot_requires_both_fields():
    """トークンとユーザーIDの両方が揃うまでNoneを返すこと"""
    store = CredentialStore()
    assert store.snapshot() is None
    store.offer_token("t" * 30)
    assert store.snapshot() is None
    store.offer_user_id("5f1e2d3c4b5a697887766554")
    assert store.snapshot() == Credentials(token="t" * 30, user_id="5f1e2d3c4b5a697887766554")


def test_first_write_wins():
    """一度保存した値は上書きされないこと"""
    store = CredentialStore()
    assert store.offer_token("first-token-value-xxxxxx") is True
    assert store.offer_token("second-token-value-xxxxx") is False
    assert store.offer_user_id("user-one") is True
    assert store.offer_user_id("user-two") is False
    assert store.token == "first-token-value-xxxxxx"
    assert store.user_id == "user-one"


def test_empty_values_are_ignored():
    """空の値は保存されないこと"""
    store = CredentialStore()
    assert store.offer_token(None) is False
    assert store.offer_token("") is False
    assert store.token is None
    assert store.offer_token("real-token-value-xxxxxxx") is True
