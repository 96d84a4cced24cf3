# models/catalog.py
from __future__ import annotations

from enum import Enum
from typing import List, Optional, TypedDict


class Category(str, Enum):
    CRYPTO = "Crypto"
    FOREX = "Forex"
    STOCKS = "Stocks"
    INDICES = "Indices"
    COMMODITIES = "Commodities"
    DEFI = "DeFi"
    NFT_METAVERSE = "NFT & Metaverse"
    TOKENIZED_ASSETS = "Tokenized Assets"
    DIGITAL_BUSINESS = "Digital Business"
    TRADING_PSYCHOLOGY = "Psychology"
    SPECIAL = "Special"  # 高單價課程，只出現在 Special 專區


class Level(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class _CourseRequired(TypedDict):
    id: str
    title: str
    description: str
    price: float  # 美元
    category: Category
    level: Level
    rating: float
    students: int
    image: str
    tags: List[str]


class Course(_CourseRequired, total=False):
    downloads: int
    downloadUrl: Optional[str]


__all__ = ["Category", "Level", "Course", "COURSE_CATALOG", "copy_course"]


def copy_course(course: Course) -> Course:
    """複製一筆課程（tags 也複製），避免不同 store 之間共用同一個 list。"""
    item: Course = dict(course)  # type: ignore[assignment]
    item["tags"] = list(course.get("tags") or [])
    item["downloads"] = int(course.get("downloads") or 0)
    return item


COURSE_CATALOG: List[Course] = [
    {
        "id": "crypto-foundations",
        "title": "Crypto Foundations: From Wallets to On-Chain Analysis",
        "description": "Self-custody, exchanges, tokenomics and reading the blockchain like an analyst.",
        "price": 49.99,
        "category": Category.CRYPTO,
        "level": Level.BEGINNER,
        "rating": 4.8,
        "students": 4210,
        "downloads": 1320,
        "image": "https://picsum.photos/seed/crypto-foundations/800/600",
        "tags": ["Bitcoin", "Ethereum", "Wallets", "On-Chain"],
        "downloadUrl": "https://files.digitora.example/crypto-foundations.zip",
    },
    {
        "id": "crypto-swing",
        "title": "Altcoin Swing Trading Playbook",
        "description": "Market structure, rotation between majors and alts, and risk-first position sizing.",
        "price": 79.0,
        "category": Category.CRYPTO,
        "level": Level.INTERMEDIATE,
        "rating": 4.6,
        "students": 2380,
        "downloads": 640,
        "image": "https://picsum.photos/seed/crypto-swing/800/600",
        "tags": ["Altcoins", "Swing Trading", "Risk Management"],
        "downloadUrl": "https://files.digitora.example/crypto-swing.zip",
    },
    {
        "id": "forex-sessions",
        "title": "Forex Sessions & Liquidity",
        "description": "Trade the London and New York opens with a repeatable liquidity-sweep model.",
        "price": 59.0,
        "category": Category.FOREX,
        "level": Level.INTERMEDIATE,
        "rating": 4.7,
        "students": 3105,
        "downloads": 980,
        "image": "https://picsum.photos/seed/forex-sessions/800/600",
        "tags": ["EURUSD", "Liquidity", "Price Action"],
        "downloadUrl": "https://files.digitora.example/forex-sessions.zip",
    },
    {
        "id": "stocks-value",
        "title": "Stock Valuation for Busy Investors",
        "description": "Discounted cash flow, moats and building a watchlist you actually follow.",
        "price": 39.0,
        "category": Category.STOCKS,
        "level": Level.BEGINNER,
        "rating": 4.5,
        "students": 5120,
        "downloads": 2210,
        "image": "https://picsum.photos/seed/stocks-value/800/600",
        "tags": ["DCF", "Value Investing", "Options"],
        "downloadUrl": "https://files.digitora.example/stocks-value.zip",
    },
    {
        "id": "indices-futures",
        "title": "Index Futures: ES & NQ Day Trading",
        "description": "Opening range, VWAP and volume profile on the S&P 500 and Nasdaq futures.",
        "price": 89.0,
        "category": Category.INDICES,
        "level": Level.ADVANCED,
        "rating": 4.7,
        "students": 1460,
        "downloads": 410,
        "image": "https://picsum.photos/seed/indices-futures/800/600",
        "tags": ["S&P 500", "Nasdaq", "VWAP"],
        "downloadUrl": "https://files.digitora.example/indices-futures.zip",
    },
    {
        "id": "commodities-gold",
        "title": "Gold & Oil: Commodity Cycles",
        "description": "Macro drivers, seasonality and inflation hedges across precious metals and energy.",
        "price": 54.0,
        "category": Category.COMMODITIES,
        "level": Level.INTERMEDIATE,
        "rating": 4.4,
        "students": 1270,
        "downloads": 300,
        "image": "https://picsum.photos/seed/commodities-gold/800/600",
        "tags": ["Gold", "Oil", "Macro"],
        "downloadUrl": "https://files.digitora.example/commodities-gold.zip",
    },
    {
        "id": "defi-yield",
        "title": "Yield Farming Without Getting Rekt",
        "description": "Liquidity pools, impermanent loss and auditing a protocol before you ape in.",
        "price": 69.0,
        "category": Category.DEFI,
        "level": Level.INTERMEDIATE,
        "rating": 4.6,
        "students": 1980,
        "downloads": 720,
        "image": "https://picsum.photos/seed/defi-yield/800/600",
        "tags": ["DeFi", "Liquidity Pools", "Staking"],
        "downloadUrl": "https://files.digitora.example/defi-yield.zip",
    },
    {
        "id": "nft-metaverse",
        "title": "NFT Markets & Metaverse Land",
        "description": "Collection analytics, royalties and valuing virtual real estate.",
        "price": 45.0,
        "category": Category.NFT_METAVERSE,
        "level": Level.BEGINNER,
        "rating": 4.2,
        "students": 890,
        "downloads": 150,
        "image": "https://picsum.photos/seed/nft-metaverse/800/600",
        "tags": ["NFT", "Metaverse", "Royalties"],
        "downloadUrl": "https://files.digitora.example/nft-metaverse.zip",
    },
    {
        "id": "tokenized-rwa",
        "title": "Tokenized Real-World Assets",
        "description": "Treasuries, real estate and private credit on-chain: structures and risks.",
        "price": 99.0,
        "category": Category.TOKENIZED_ASSETS,
        "level": Level.ADVANCED,
        "rating": 4.8,
        "students": 640,
        "downloads": 120,
        "image": "https://picsum.photos/seed/tokenized-rwa/800/600",
        "tags": ["RWA", "Real Estate", "Tokenization"],
        "downloadUrl": "https://files.digitora.example/tokenized-rwa.zip",
    },
    {
        "id": "digital-business",
        "title": "Launch a Digital Product Business",
        "description": "Package your expertise, build a funnel and take crypto and card payments.",
        "price": 29.0,
        "category": Category.DIGITAL_BUSINESS,
        "level": Level.BEGINNER,
        "rating": 4.3,
        "students": 2750,
        "downloads": 860,
        "image": "https://picsum.photos/seed/digital-business/800/600",
        "tags": ["E-commerce", "Funnels", "Marketing"],
        "downloadUrl": "https://files.digitora.example/digital-business.zip",
    },
    {
        "id": "trading-psychology",
        "title": "The Disciplined Trader",
        "description": "Journaling, tilt control and building rules you follow under pressure.",
        "price": 25.0,
        "category": Category.TRADING_PSYCHOLOGY,
        "level": Level.BEGINNER,
        "rating": 4.9,
        "students": 6030,
        "downloads": 2900,
        "image": "https://picsum.photos/seed/trading-psychology/800/600",
        "tags": ["Mindset", "Journaling", "Discipline"],
        "downloadUrl": "https://files.digitora.example/trading-psychology.zip",
    },
    {
        "id": "special-mev",
        "title": "MEV Bots: Searcher Strategies",
        "description": "Mempool monitoring, bundle building and backrunning on Ethereum L1 and L2s.",
        "price": 1499.0,
        "category": Category.SPECIAL,
        "level": Level.ADVANCED,
        "rating": 4.9,
        "students": 210,
        "downloads": 75,
        "image": "https://picsum.photos/seed/special-mev/800/600",
        "tags": ["MEV", "Ethereum", "Bots"],
        "downloadUrl": "https://files.digitora.example/special-mev.zip",
    },
    {
        "id": "special-hedge-fund",
        "title": "Structuring a Crypto Hedge Fund",
        "description": "Legal wrappers, custody, fund administration and raising the first allocation.",
        "price": 2499.0,
        "category": Category.SPECIAL,
        "level": Level.ADVANCED,
        "rating": 4.8,
        "students": 95,
        "downloads": 40,
        "image": "https://picsum.photos/seed/special-hedge-fund/800/600",
        "tags": ["Hedge Fund", "Compliance", "DeFi"],
        "downloadUrl": "https://files.digitora.example/special-hedge-fund.zip",
    },
    {
        "id": "special-zk-rollups",
        "title": "ZK-Rollup Architecture",
        "description": "Provers, data availability and sequencer economics for scaling blockchains.",
        "price": 1999.0,
        "category": Category.SPECIAL,
        "level": Level.ADVANCED,
        "rating": 4.7,
        "students": 130,
        "image": "https://picsum.photos/seed/special-zk-rollups/800/600",
        "tags": ["ZK", "Rollups", "Layer 2"],
    },
]
