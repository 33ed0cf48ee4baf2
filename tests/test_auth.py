"""Tests for OAuth1 signing module."""

import base64
import hashlib
import hmac
import itertools
import random
import string
from concurrent.futures import ThreadPoolExecutor

import pytest

from twitter_ads_mcp.auth import (
    HmacSha1,
    OAuthParameterSource,
    Plaintext,
    base64_url_encode,
    build_signature,
    normalize_parameters,
    normalize_url,
    percent_decode,
    percent_encode,
    signature_base_string,
    signing_key,
)
from twitter_ads_mcp.exceptions import InvalidRequestError, SigningError
from twitter_ads_mcp.models import Consumer, Token


def test_percent_encode_special_characters():
    """Test that special characters are properly percent-encoded."""
    assert percent_encode("hello world") == "hello%20world"
    assert percent_encode("test+value") == "test%2Bvalue"
    assert percent_encode("foo=bar") == "foo%3Dbar"
    assert percent_encode("a&b") == "a%26b"
    assert percent_encode("a/b") == "a%2Fb"
    assert percent_encode("*") == "%2A"


def test_percent_encode_leaves_unreserved_characters():
    unreserved = string.ascii_letters + string.digits + "-._~"
    assert percent_encode(unreserved) == unreserved


def test_percent_encode_utf8_uppercase_hex():
    assert percent_encode("é") == "%C3%A9"
    assert percent_encode("☃") == "%E2%98%83"


def test_percent_decode_reverses_encode():
    """Round trip holds for arbitrary text."""
    rng = random.Random(1234)
    alphabet = string.printable + "éü☃€漢字"
    samples = ["", "%", "%25", "+", "a b"] + [
        "".join(rng.choice(alphabet) for _ in range(rng.randint(1, 40)))
        for _ in range(200)
    ]

    for value in samples:
        assert percent_decode(percent_encode(value)) == value


def test_normalize_parameters_sorts_by_key_then_value():
    params = [("b", "2"), ("a", "2"), ("a", "10"), ("a", "1")]

    assert normalize_parameters(params) == "a=1&a=10&a=2&b=2"


def test_normalize_parameters_independent_of_insertion_order():
    params = [
        ("status", "hello world"),
        ("oauth_nonce", "abc"),
        ("a3", "a"),
        ("a3", "2 q"),
        ("c@", ""),
    ]
    expected = normalize_parameters(params)

    for permutation in itertools.permutations(params):
        assert normalize_parameters(permutation) == expected


def test_normalize_parameters_rfc5849_example():
    """Parameters from RFC 5849 section 3.4.1.3.2."""
    params = [
        ("b5", "=%3D"),
        ("a3", "a"),
        ("c@", ""),
        ("a2", "r b"),
        ("oauth_consumer_key", "9djdj82h48djs9d2"),
        ("oauth_token", "kkk9d7dh3k39sjv7"),
        ("oauth_signature_method", "HMAC-SHA1"),
        ("oauth_timestamp", "137131201"),
        ("oauth_nonce", "7d8f3e4a"),
        ("c2", ""),
        ("a3", "2 q"),
    ]

    assert normalize_parameters(params) == (
        "a2=r%20b&a3=2%20q&a3=a&b5=%3D%253D&c%40=&c2=&"
        "oauth_consumer_key=9djdj82h48djs9d2&oauth_nonce=7d8f3e4a&"
        "oauth_signature_method=HMAC-SHA1&oauth_timestamp=137131201&"
        "oauth_token=kkk9d7dh3k39sjv7"
    )


def test_normalize_url_strips_query_and_default_port():
    base_url, query = normalize_url("HTTP://Example.COM:80/r%20v/X?id=123")

    assert base_url == "http://example.com/r%20v/X"
    assert query == [("id", "123")]


def test_normalize_url_keeps_non_default_port():
    base_url, query = normalize_url("https://www.example.net:8080/?q=1")

    assert base_url == "https://www.example.net:8080/"
    assert query == [("q", "1")]


@pytest.mark.parametrize("url", ["not a url", "/1/statuses.json", "http://host:port/"])
def test_normalize_url_rejects_malformed(url):
    with pytest.raises(InvalidRequestError):
        normalize_url(url)


def test_signature_base_string_format():
    """Test signature base string is correctly formatted."""
    base_string = signature_base_string(
        "post",
        "https://example.com/api",
        [("b", "2"), ("a", "1"), ("c", "3")],
    )

    assert base_string == "POST&https%3A%2F%2Fexample.com%2Fapi&a%3D1%26b%3D2%26c%3D3"


def test_signature_base_string_includes_url_query_and_skips_signature():
    base_string = signature_base_string(
        "GET",
        "https://example.com/api?b=2",
        [("a", "1"), ("oauth_signature", "old")],
    )

    assert base_string == "GET&https%3A%2F%2Fexample.com%2Fapi&a%3D1%26b%3D2"


def test_signing_key_with_and_without_token():
    consumer = Consumer(key="ck", secret="c s")

    assert signing_key(consumer) == "c%20s&"
    assert signing_key(consumer, Token(key="tk", secret="t&s")) == "c%20s&t%26s"


def test_signing_key_requires_consumer_secret():
    with pytest.raises(SigningError):
        signing_key(Consumer(key="ck", secret=""))


def test_hmac_sha1_matches_manual_digest():
    base_string = "GET&https%3A%2F%2Fexample.com%2F&a%3D1"
    expected = base64.b64encode(
        hmac.new(b"cs&ts", base_string.encode("utf-8"), hashlib.sha1).digest()
    ).decode("utf-8")

    signature = HmacSha1().sign(base_string, "cs&ts")

    assert signature == expected
    assert len(base64.b64decode(signature)) == 20


def test_hmac_sha1_name_is_stable():
    assert HmacSha1.name == "HMAC-SHA1"
    assert Plaintext.name == "PLAINTEXT"


def test_hmac_sha1_rejects_key_without_consumer_secret():
    with pytest.raises(SigningError):
        HmacSha1().sign("GET&x&y", "&ts")


def test_hmac_sha1_wraps_digest_failures():
    # a lone surrogate cannot be encoded as UTF-8
    with pytest.raises(SigningError, match="HMAC-SHA1") as exc_info:
        HmacSha1().sign("GET&x&y", "cs&\ud800")

    assert isinstance(exc_info.value.__cause__, UnicodeEncodeError)


def test_plaintext_signature_is_signing_key():
    assert Plaintext().sign("ignored", "cs&ts") == "cs&ts"


def test_build_signature_twitter_documented_example():
    """Example from Twitter's "Creating a signature" documentation."""
    consumer = Consumer(
        key="xvz1evFS4wEEPTGEFPHBog",
        secret="kAcSOqF21Fu85e7zjz7ZN2U4ZRhfV3WpwPAoE3Z7kBw",
    )
    token = Token(
        key="370773112-GmHxMAgYyLbNEtIKZeRNFsMKPR9EyMZeS9weJAEb",
        secret="LswwdoUaIvS8ltyTt5jkRh4J50vUPVVHtR2YPi5kE",
    )
    url = "https://api.twitter.com/1.1/statuses/update.json"
    params = [
        ("status", "Hello Ladies + Gentlemen, a signed OAuth request!"),
        ("include_entities", "true"),
        ("oauth_consumer_key", consumer.key),
        ("oauth_nonce", "kYjzVBB8Y0ZFabxSWbWovY3uYSQ2pTgmZeNu2VS4cg"),
        ("oauth_signature_method", "HMAC-SHA1"),
        ("oauth_timestamp", "1318622958"),
        ("oauth_token", token.key),
        ("oauth_version", "1.0"),
    ]

    assert signature_base_string("POST", url, params) == (
        "POST&https%3A%2F%2Fapi.twitter.com%2F1.1%2Fstatuses%2Fupdate.json&"
        "include_entities%3Dtrue%26"
        "oauth_consumer_key%3Dxvz1evFS4wEEPTGEFPHBog%26"
        "oauth_nonce%3DkYjzVBB8Y0ZFabxSWbWovY3uYSQ2pTgmZeNu2VS4cg%26"
        "oauth_signature_method%3DHMAC-SHA1%26"
        "oauth_timestamp%3D1318622958%26"
        "oauth_token%3D370773112-GmHxMAgYyLbNEtIKZeRNFsMKPR9EyMZeS9weJAEb%26"
        "oauth_version%3D1.0%26"
        "status%3DHello%2520Ladies%2520%252B%2520Gentlemen%252C%2520a%2520"
        "signed%2520OAuth%2520request%2521"
    )

    for _ in range(3):
        signature = build_signature(HmacSha1(), "POST", url, params, consumer, token)
        assert signature == "hCtSmYh+iHYCEqBWrE7C7hYmtUk="


def test_build_signature_changes_with_nonce():
    consumer = Consumer(key="ck", secret="cs")
    url = "https://example.com/api"

    signatures = {
        build_signature(
            HmacSha1(),
            "GET",
            url,
            [("oauth_nonce", OAuthParameterSource().nonce()), ("a", "1")],
            consumer,
        )
        for _ in range(500)
    }

    assert len(signatures) == 500


def test_parameter_source_defaults():
    """Test that generated oauth params carry version, nonce and timestamp."""
    import time

    before = int(time.time())
    params = OAuthParameterSource().generate(HmacSha1())
    after = int(time.time())

    assert params["oauth_version"] == "1.0"
    assert params["oauth_signature_method"] == "HMAC-SHA1"
    assert len(params["oauth_nonce"]) == 32
    assert before <= int(params["oauth_timestamp"]) <= after


def test_parameter_source_is_injectable():
    source = OAuthParameterSource(nonce_factory=lambda: "n", clock=lambda: 42.9)

    assert source.generate(Plaintext()) == {
        "oauth_version": "1.0",
        "oauth_nonce": "n",
        "oauth_timestamp": "42",
        "oauth_signature_method": "PLAINTEXT",
    }


def test_nonces_unique_across_threads():
    source = OAuthParameterSource()

    with ThreadPoolExecutor(max_workers=8) as pool:
        nonces = list(pool.map(lambda _: source.nonce(), range(2000)))

    assert len(set(nonces)) == len(nonces)


def test_base64_url_encode_strips_padding():
    assert base64_url_encode(b"\xfb\xff") == "-_8"
    assert base64_url_encode("hi") == "aGk"
