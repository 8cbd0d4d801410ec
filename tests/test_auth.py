from api.auth import key_fingerprint, parse_api_keys


def test_parse_api_keys_drops_blanks():
    assert parse_api_keys(" a, b ,,c ") == frozenset({"a", "b", "c"})
    assert parse_api_keys(None) == frozenset()


def test_fingerprint_is_short_and_stable():
    assert key_fingerprint("secret") == key_fingerprint("secret")
    assert len(key_fingerprint("secret")) == 8
    assert "secret" not in key_fingerprint("secret")
