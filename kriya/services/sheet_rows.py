"""
表格行解析

Google Sheets 的每一行解析为带标签的结果：
- Parsed(record):    解析成功
- Skipped(reason):   缺少必填列（ID / 名称）或重复，整行忽略
- Malformed(reason): 有内容但无法入库（如负价格、超长字段）

列顺序固定：
- Categories!A2:D  external_id, name, slug?, image_url?
- Products!A2:I    external_id, name, description?, price, compare_at_price?,
                   images, category_slug, tags, in_stock
"""

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Generic, List, Optional, Sequence, TypeVar, Union

CATEGORY_RANGE = "Categories!A2:D"
PRODUCT_RANGE = "Products!A2:I"
CONFIG_RANGE = "Config!A2:B"

UNCATEGORIZED = "uncategorized"

MAX_NAME_LENGTH = 200
MAX_PRODUCT_NAME_LENGTH = 300
MAX_EXTERNAL_ID_LENGTH = 200
MAX_IMAGE_URL_LENGTH = 1000
# Numeric(12, 2)
MAX_PRICE = Decimal("10000000000")

_CENT = Decimal("0.01")

_WHITESPACE_RE = re.compile(r"\s+")
_NON_SLUG_RE = re.compile(r"[^a-z0-9-]")
# 与 JavaScript parseFloat 一致：只取开头的数字部分
_LEADING_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

T = TypeVar("T")

Row = Sequence[str]


@dataclass
class CategoryRow:
    external_id: str
    name: str
    slug: str
    image_url: Optional[str] = None


@dataclass
class ProductRow:
    external_id: str
    name: str
    slug: str
    description: Optional[str]
    price: float
    compare_at_price: Optional[float]
    images: List[str] = field(default_factory=list)
    category_slug: str = UNCATEGORIZED
    tags: List[str] = field(default_factory=list)
    in_stock: bool = True


@dataclass(frozen=True)
class Parsed(Generic[T]):
    record: T


@dataclass(frozen=True)
class Skipped:
    reason: str


@dataclass(frozen=True)
class Malformed:
    reason: str


RowResult = Union[Parsed[T], Skipped, Malformed]


def cell(row: Row, index: int) -> str:
    """取单元格文本，缺失的列视为空"""
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index]).strip()


def category_slug(name: str) -> str:
    """分类 slug：小写，空白替换为连字符"""
    return _WHITESPACE_RE.sub("-", name.lower())


def product_slug(name: str) -> str:
    """商品 slug：小写，空白替换为连字符，去掉其他字符"""
    return _NON_SLUG_RE.sub("", category_slug(name))


def parse_number(value: str) -> Optional[float]:
    """解析开头的数字（"19.99 USD" → 19.99），无法解析返回 None"""
    match = _LEADING_NUMBER_RE.match(value.strip())
    if not match:
        return None
    return float(match.group(0))


def money_overflows(value: float) -> bool:
    """按分取整后是否超出价格列的范围"""
    value = abs(value)
    if value >= MAX_PRICE:
        return True
    return Decimal(str(value)).quantize(_CENT) >= MAX_PRICE


def split_list(value: str, lower: bool = False) -> List[str]:
    items = [item.strip() for item in value.split(",")]
    if lower:
        items = [item.lower() for item in items]
    return [item for item in items if item]


def parse_category_row(row: Row) -> "RowResult[CategoryRow]":
    """解析分类行"""
    external_id = cell(row, 0)
    name = cell(row, 1)
    if not external_id or not name:
        return Skipped("missing id or name")
    if len(name) > MAX_NAME_LENGTH:
        return Malformed(f"name longer than {MAX_NAME_LENGTH} characters")

    slug = cell(row, 2) or category_slug(name)
    if len(slug) > MAX_NAME_LENGTH:
        return Malformed(f"slug longer than {MAX_NAME_LENGTH} characters")

    image_url = cell(row, 3) or None
    if image_url and len(image_url) > MAX_IMAGE_URL_LENGTH:
        return Malformed(f"image url longer than {MAX_IMAGE_URL_LENGTH} characters")

    return Parsed(
        CategoryRow(
            external_id=external_id,
            name=name,
            slug=slug,
            image_url=image_url,
        )
    )


def parse_product_row(row: Row) -> "RowResult[ProductRow]":
    """
    解析商品行

    - 价格无法解析 → 0
    - 划线价无法解析 → 无
    - 分类为空 → uncategorized
    - in_stock 仅当值为 "false"（不区分大小写）时为缺货
    """
    external_id = cell(row, 0)
    name = cell(row, 1)
    if not external_id or not name:
        return Skipped("missing id or name")
    if len(name) > MAX_PRODUCT_NAME_LENGTH:
        return Malformed(f"name longer than {MAX_PRODUCT_NAME_LENGTH} characters")
    if len(external_id) > MAX_EXTERNAL_ID_LENGTH:
        return Malformed(f"id longer than {MAX_EXTERNAL_ID_LENGTH} characters")

    price = parse_number(cell(row, 3)) or 0.0
    if not math.isfinite(price):
        return Malformed("price is not a finite number")
    if price < 0:
        return Malformed(f"negative price {price}")
    if money_overflows(price):
        return Malformed(f"price {price} out of range")

    compare_raw = cell(row, 4)
    compare_at_price = parse_number(compare_raw) if compare_raw else None
    if compare_at_price is not None and not math.isfinite(compare_at_price):
        compare_at_price = None
    if compare_at_price is not None and money_overflows(compare_at_price):
        return Malformed(f"compare-at price {compare_at_price} out of range")

    return Parsed(
        ProductRow(
            external_id=external_id,
            name=name,
            slug=product_slug(name),
            description=cell(row, 2) or None,
            price=price,
            compare_at_price=compare_at_price,
            images=split_list(cell(row, 5)),
            category_slug=cell(row, 6) or UNCATEGORIZED,
            tags=split_list(cell(row, 7), lower=True),
            in_stock=cell(row, 8).lower() != "false",
        )
    )


def parse_config_rows(rows: Sequence[Row]) -> Dict[str, str]:
    """配置表：A 列为键，B 列为值，空键或空值忽略"""
    config: Dict[str, str] = {}
    for row in rows:
        key, value = cell(row, 0), cell(row, 1)
        if key and value:
            config[key] = value
    return config
