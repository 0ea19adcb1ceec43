"""
Demo 示例数据

未解析到店铺（Demo 模式）时前台使用的内置目录
"""

from typing import List

from kriya.domain.storefront import (
    CategoryView,
    ProductVariant,
    ProductView,
    SocialLinks,
    StoreConfig,
)

_IMG = "https://images.unsplash.com/photo-{}?w=600&h=800&fit=crop"
_THUMB = "https://images.unsplash.com/photo-{}?w=400&h=400&fit=crop"

DEMO_STORE_CONFIG = StoreConfig(
    name="KRIYA",
    tagline="Curated for the culture",
    theme="neon",
    currency="USD",
    currency_symbol="$",
    announcement="FREE SHIPPING ON ORDERS OVER $50",
    social_links=SocialLinks(
        instagram="https://instagram.com",
        twitter="https://twitter.com",
        tiktok="https://tiktok.com",
    ),
)

DEMO_CATEGORIES: List[CategoryView] = [
    CategoryView(id="1", name="Apparel", slug="apparel", image=_THUMB.format("1523381210434-271e8be1f52b")),
    CategoryView(id="2", name="Accessories", slug="accessories", image=_THUMB.format("1606107557195-0e29a4b5b4aa")),
    CategoryView(id="3", name="Tech", slug="tech", image=_THUMB.format("1505740420928-5e560c06d30e")),
    CategoryView(id="4", name="Home", slug="home", image=_THUMB.format("1616486338812-3dadae4b4ace")),
]

_SIZES = ProductVariant(id="size", name="Size", options=["S", "M", "L", "XL"])

DEMO_PRODUCTS: List[ProductView] = [
    ProductView(
        id="1",
        name="Oversized Graphic Tee",
        description="Premium cotton oversized tee with exclusive print.",
        price=45,
        compare_at_price=60,
        images=[_IMG.format("1521572163474-6864f9cf17ab"), _IMG.format("1583743814966-8936f5b7be1a")],
        category="apparel",
        tags=["new", "bestseller"],
        variants=[_SIZES, ProductVariant(id="color", name="Color", options=["Black", "White", "Sage"])],
    ),
    ProductView(
        id="2",
        name="Retro Sneakers",
        description="Chunky sneakers with a Y2K silhouette.",
        price=129,
        images=[_IMG.format("1606107557195-0e29a4b5b4aa")],
        category="accessories",
        tags=["trending"],
        variants=[ProductVariant(id="size", name="Size", options=["7", "8", "9", "10", "11", "12"])],
    ),
    ProductView(
        id="3",
        name="Minimal Watch",
        description="Japanese movement with a genuine leather strap.",
        price=189,
        compare_at_price=220,
        images=[_IMG.format("1523275335684-37898b6baf30")],
        category="accessories",
        tags=["premium"],
    ),
    ProductView(
        id="4",
        name="Wireless Earbuds Pro",
        description="Active noise cancellation and a 24hr battery.",
        price=149,
        images=[_IMG.format("1590658268037-6bf12165a8df")],
        category="tech",
        tags=["bestseller"],
    ),
    ProductView(
        id="5",
        name="Ceramic Vase Set",
        description="Handcrafted ceramic vases, set of 3.",
        price=78,
        images=[_IMG.format("1612196808214-b8e1d6145a8c")],
        category="home",
        tags=["new"],
    ),
    ProductView(
        id="6",
        name="Cargo Pants",
        description="Relaxed fit with utility pockets.",
        price=89,
        images=[_IMG.format("1624378439575-d8705ad7ae80")],
        category="apparel",
        tags=["trending"],
        variants=[ProductVariant(id="size", name="Size", options=["28", "30", "32", "34", "36"])],
    ),
    ProductView(
        id="7",
        name="LED Desk Lamp",
        description="Touch control with adjustable color temperature.",
        price=65,
        images=[_IMG.format("1507473885765-e6ed057f782c")],
        category="home",
    ),
    ProductView(
        id="8",
        name="Canvas Tote Bag",
        description="Heavy-duty canvas tote for everyday carry.",
        price=35,
        images=[_IMG.format("1544816155-12df9643f363")],
        category="accessories",
        tags=["bestseller"],
        in_stock=False,
    ),
]
