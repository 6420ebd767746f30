from ad_shotter.auth import SESSION_TOKEN_COOKIE, USER_EMAIL_COOKIE, is_allowed_email, session_from_cookies


def test_session_from_cookies_requires_both_cookies():
    assert session_from_cookies({}) is None
    assert session_from_cookies({SESSION_TOKEN_COOKIE: "uid-1"}) is None
    assert session_from_cookies({USER_EMAIL_COOKIE: "a@example.com"}) is None
    user = session_from_cookies({SESSION_TOKEN_COOKIE: "uid-1", USER_EMAIL_COOKIE: "a@example.com"})
    assert user is not None
    assert user.uid == "uid-1"
    assert user.email == "a@example.com"


def test_is_allowed_email():
    assert is_allowed_email("anyone@anywhere.org", None)
    assert is_allowed_email("Ops@Example.com", "example.com")
    assert is_allowed_email("ops@example.com", "@example.com")
    assert not is_allowed_email("ops@example.com.evil.org", "example.com")
    assert not is_allowed_email("ops@other.com", "example.com")
