"""
店铺标识解析测试
"""

import pytest

from kriya.tenancy.resolver import IdentifierKind, StoreIdentifier, resolve_identifier

BASE = "kriya.store"


class TestLocalDevelopment:
    """本地开发：从 /store/{slug} 路径取 slug"""

    def test_store_path_on_localhost(self):
        identifier = resolve_identifier("localhost:3000", "/store/acme/products", BASE)
        assert identifier == StoreIdentifier.slug("acme")

    def test_store_root_path(self):
        identifier = resolve_identifier("127.0.0.1:8000", "/store/acme", BASE)
        assert identifier == StoreIdentifier.slug("acme")

    def test_other_path_is_demo(self):
        assert resolve_identifier("localhost:3000", "/collections", BASE).is_demo

    def test_missing_host_defaults_to_localhost(self):
        assert resolve_identifier(None, None, BASE).is_demo

    def test_custom_local_patterns(self):
        identifier = resolve_identifier("dev.internal:8080", "/store/acme", BASE, local_patterns=["dev.internal"])
        assert identifier == StoreIdentifier.slug("acme")


class TestProductionHosts:
    """生产环境：子域名 / 自定义域名"""

    @pytest.mark.parametrize(
        "host,expected",
        [
            ("acme.kriya.store", StoreIdentifier.slug("acme")),
            ("acme.kriya.store:443", StoreIdentifier.slug("acme")),
            ("ACME.Kriya.Store", StoreIdentifier.slug("acme")),
            ("www.kriya.store", StoreIdentifier.demo()),
            ("kriya.store", StoreIdentifier.demo()),
            ("kriya.store:8443", StoreIdentifier.demo()),
            ("shop.example.com", StoreIdentifier.domain("shop.example.com")),
            ("shop.example.com:8080", StoreIdentifier.domain("shop.example.com")),
            ("evilkriya.store", StoreIdentifier.domain("evilkriya.store")),
        ],
    )
    def test_resolution(self, host, expected):
        assert resolve_identifier(host, "/", BASE) == expected

    def test_path_ignored_outside_local(self):
        identifier = resolve_identifier("acme.kriya.store", "/store/other", BASE)
        assert identifier == StoreIdentifier.slug("acme")


class TestStoreIdentifier:
    def test_cache_key(self):
        assert StoreIdentifier.slug("acme").cache_key == "slug:acme"
        assert StoreIdentifier.domain("shop.example.com").cache_key == "domain:shop.example.com"

    def test_kind(self):
        assert StoreIdentifier.demo().kind == IdentifierKind.DEMO
        assert not StoreIdentifier.slug("acme").is_demo
