"""Seed a MongoDB deployment with fake queries and recommendations.

Useful for local development and demos. Query and recommendation
documents are generated with random products, brands and users, then
written through the persistence gateway so they look exactly like data
created by the API.

Example:
    Seed the configured database with the defaults:
        $ python scripts/seed_data.py

    Or choose the amounts:
        $ python scripts/seed_data.py --queries 20 --recommendations 50

    Or import and use programmatically:
        from scripts.seed_data import generate_fake_queries
        queries = generate_fake_queries(num_queries=5)
"""

import argparse
import asyncio
import logging
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bson import ObjectId

from products4u.api.config import get_settings
from products4u.storage.gateway import PersistenceGateway

# Setup logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

# Default configuration constants
DEFAULT_NUM_QUERIES = 10
DEFAULT_NUM_RECOMMENDATIONS = 25
DEFAULT_NUM_USERS = 5
DEFAULT_DAYS_BACK = 30
SECONDS_PER_DAY = 86400

PRODUCTS = [
    ("Cola", "FizzCo"),
    ("Chocolate Bar", "Sweetland"),
    ("Running Shoes", "Stride"),
    ("Instant Noodles", "QuickBowl"),
    ("Bottled Water", "PureSpring"),
    ("Coffee Pods", "BrewMax"),
]

REASONS = [
    "Unethical sourcing of raw materials",
    "Poor working conditions in factories",
    "Excessive single-use plastic packaging",
    "Misleading health claims",
]


def _user(index: int) -> Dict[str, str]:
    return {"email": f"user{index}@example.com", "name": f"User {index}"}


def generate_fake_queries(
    num_queries: int = DEFAULT_NUM_QUERIES,
    num_users: int = DEFAULT_NUM_USERS,
) -> List[Dict[str, Any]]:
    """Generate query bodies as a client would submit them.

    Args:
        num_queries: Number of queries to generate. Must be positive.
        num_users: Number of distinct submitting users. Must be positive.

    Returns:
        List of dictionaries with the five required query fields plus
        ``userEmail``.

    Raises:
        ValueError: If any count is non-positive.
    """
    if num_queries <= 0 or num_users <= 0:
        raise ValueError("num_queries and num_users must be positive")

    queries = []
    for i in range(num_queries):
        product, brand = random.choice(PRODUCTS)
        user = _user(random.randint(1, num_users))
        queries.append(
            {
                "productName": product,
                "productBrand": brand,
                "productImageURL": f"https://img.example.org/{brand.lower()}/{i}.png",
                "queryTitle": f"Should I boycott {brand} {product}?",
                "boycottingReasonDetails": random.choice(REASONS),
                "userEmail": user["email"],
            }
        )
    return queries


def generate_fake_recommendations(
    queries: List[Dict[str, Any]],
    num_recommendations: int = DEFAULT_NUM_RECOMMENDATIONS,
    num_users: int = DEFAULT_NUM_USERS,
    end_date: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Generate recommendations pointing at the given queries.

    Args:
        queries: Stored queries; each needs ``_id``, ``queryTitle`` and
            ``userEmail``.
        num_recommendations: Number of recommendations to generate.
        num_users: Number of distinct recommenders.
        end_date: Latest timestamp to use. Defaults to now.

    Returns:
        List of recommendation bodies with ISO 8601 timestamps.
    """
    if not queries:
        raise ValueError("At least one query is required")

    if end_date is None:
        end_date = datetime.now(timezone.utc)

    recommendations = []
    for _ in range(num_recommendations):
        query = random.choice(queries)
        recommender = _user(random.randint(1, num_users))
        product, brand = random.choice(PRODUCTS)
        timestamp = end_date - timedelta(
            days=random.randrange(DEFAULT_DAYS_BACK),
            seconds=random.randrange(SECONDS_PER_DAY),
        )
        recommendations.append(
            {
                "title": f"Try {brand} {product}",
                "productName": product,
                "productImage": f"https://img.example.org/alt/{brand.lower()}.png",
                "reason": "Ethically sourced alternative",
                "queryId": query["_id"],
                "queryTitle": query["queryTitle"],
                "userEmail": query.get("userEmail"),
                "userName": None,
                "recommenderEmail": recommender["email"],
                "recommenderName": recommender["name"],
                "timestamp": timestamp.isoformat(),
            }
        )
    return recommendations


async def seed(
    gateway: PersistenceGateway,
    num_queries: int,
    num_recommendations: int,
) -> Dict[str, int]:
    """Write fake data through the gateway.

    Each recommendation is followed by a counter increment on its query,
    the same two calls a client makes.

    Returns:
        Counts of created queries and recommendations.
    """
    query_bodies = generate_fake_queries(num_queries)
    stored_queries = []
    for body in query_bodies:
        query_id = await gateway.create_query(body)
        stored_queries.append({**body, "_id": query_id})

    created_recommendations = 0
    for body in generate_fake_recommendations(stored_queries, num_recommendations):
        if await gateway.create_recommendation(body) is None:
            logger.warning(f"No id returned for recommendation on {body['queryId']}")
            continue
        created_recommendations += 1
        await gateway.increment_recommendation_count(ObjectId(body["queryId"]))

    return {"queries": len(stored_queries), "recommendations": created_recommendations}


async def _run(args: argparse.Namespace) -> int:
    settings = get_settings()
    gateway = PersistenceGateway.from_uri(
        settings.mongodb_uri,
        database_name=settings.database_name,
        queries_collection=settings.queries_collection,
        recommendations_collection=settings.recommendations_collection,
        timeout_ms=settings.mongodb_timeout_ms,
    )
    await gateway.connect()
    try:
        counts = await seed(gateway, args.queries, args.recommendations)
    finally:
        await gateway.close()

    print("\nData seeded successfully!")
    print(f"  Queries: {counts['queries']}")
    print(f"  Recommendations: {counts['recommendations']}")
    return 0


def main() -> int:
    """Main entry point for the seeding script."""
    parser = argparse.ArgumentParser(
        description="Seed MongoDB with fake queries and recommendations",
    )
    parser.add_argument(
        "--queries",
        type=int,
        default=DEFAULT_NUM_QUERIES,
        help=f"Number of queries to create (default: {DEFAULT_NUM_QUERIES})",
    )
    parser.add_argument(
        "--recommendations",
        type=int,
        default=DEFAULT_NUM_RECOMMENDATIONS,
        help=(
            "Number of recommendations to create "
            f"(default: {DEFAULT_NUM_RECOMMENDATIONS})"
        ),
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible data",
    )
    args = parser.parse_args()

    if args.seed is not None:
        random.seed(args.seed)

    try:
        return asyncio.run(_run(args))
    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
