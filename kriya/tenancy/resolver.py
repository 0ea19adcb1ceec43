"""
店铺标识解析

根据请求的 Host 与路径得到店铺标识：
- slug:   {slug}.kriya.store 子域名，或本地开发时的 /store/{slug}/... 路径
- domain: 自定义域名
- demo:   主域名 / www / 无法识别时回退到 Demo 店铺

纯字符串逻辑，不做 I/O，不抛异常
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

_STORE_PATH_RE = re.compile(r"^/store/([^/]+)")
_PORT_RE = re.compile(r":\d+$")

RESERVED_SUBDOMAINS = frozenset({"www"})


class IdentifierKind(str, Enum):
    SLUG = "slug"
    DOMAIN = "domain"
    DEMO = "demo"


@dataclass(frozen=True)
class StoreIdentifier:
    """店铺标识"""

    kind: IdentifierKind
    value: Optional[str] = None

    @property
    def is_demo(self) -> bool:
        return self.kind == IdentifierKind.DEMO

    @property
    def cache_key(self) -> str:
        return f"{self.kind.value}:{self.value}"

    @classmethod
    def slug(cls, value: str) -> "StoreIdentifier":
        return cls(IdentifierKind.SLUG, value)

    @classmethod
    def domain(cls, value: str) -> "StoreIdentifier":
        return cls(IdentifierKind.DOMAIN, value)

    @classmethod
    def demo(cls) -> "StoreIdentifier":
        return cls(IdentifierKind.DEMO)


def strip_port(host: str) -> str:
    return _PORT_RE.sub("", host)


def is_local_host(host: str, local_patterns: Iterable[str]) -> bool:
    return any(pattern in host for pattern in local_patterns)


def resolve_identifier(
    host: Optional[str],
    path: Optional[str],
    base_domain: str,
    local_patterns: Iterable[str] = ("localhost", "127.0.0.1"),
) -> StoreIdentifier:
    """
    解析店铺标识

    Args:
        host: 请求 Host 头（可带端口）
        path: 请求路径（本地开发时从 /store/{slug} 取 slug）
        base_domain: 平台主域名，如 kriya.store
        local_patterns: 本地开发 Host 的匹配片段
    """
    host = (host or "localhost").strip().lower()
    path = path or "/"

    # 本地开发：路径前缀 /store/{slug}
    if is_local_host(host, local_patterns):
        match = _STORE_PATH_RE.match(path)
        if match:
            return StoreIdentifier.slug(match.group(1))
        return StoreIdentifier.demo()

    hostname = strip_port(host)
    base_domain = base_domain.lower()
    if not hostname:
        return StoreIdentifier.demo()

    suffix = f".{base_domain}"

    # 自定义域名（按域名层级比较，evilkriya.store 不算主域名的子域名）
    if hostname != base_domain and not hostname.endswith(suffix):
        return StoreIdentifier.domain(hostname)

    # 子域名：{slug}.kriya.store
    subdomain = "" if hostname == base_domain else hostname[: -len(suffix)]
    if not subdomain or subdomain in RESERVED_SUBDOMAINS:
        return StoreIdentifier.demo()

    return StoreIdentifier.slug(subdomain)
