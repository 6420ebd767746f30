from ad_shotter.urls import is_http_url, target_hostname


def test_is_http_url():
    assert is_http_url("https://example.com/page")
    assert is_http_url("http://localhost:3000")
    assert not is_http_url("ftp://example.com")
    assert not is_http_url("example.com")
    assert not is_http_url("")
    assert not is_http_url(None)


def test_target_hostname():
    assert target_hostname("https://www.example.com/a?b=1") == "www.example.com"
    assert target_hostname("not a url", default="fallback") == "fallback"
    assert target_hostname(None, default="x") == "x"
