#!/usr/bin/env python3
"""
Seed script: creates sellers and listings via the API (no direct DB).
Tokens are minted locally with the API's secret, so SECRET_KEY must match the server.
Run: API must be running.
  python scripts/seed_data.py
  python scripts/seed_data.py --sellers 20 --products-per-seller 15 --lat 37.77 --lng -122.42
"""

import argparse
import random
import sys
from pathlib import Path

# Project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import httpx

from marketplace.core.security import create_identity_token

API_BASE = "http://localhost:8000/api/v1"

CATEGORIES = ["produce", "dairy", "bakery", "crafts", "furniture", "electronics", "garden"]

TITLES = {
    "produce": ["Basket of apples", "Heirloom tomatoes", "Fresh kale bunch", "Organic carrots", "Strawberries"],
    "dairy": ["Goat cheese", "Farm eggs (dozen)", "Raw honey jar", "Butter block"],
    "bakery": ["Sourdough loaf", "Cinnamon rolls", "Rye bread", "Banana bread"],
    "crafts": ["Hand-knit scarf", "Ceramic mug", "Beeswax candles", "Woven basket"],
    "furniture": ["Oak side table", "Vintage armchair", "Bookshelf", "Dining chairs (set of 4)"],
    "electronics": ["Bluetooth speaker", "Used laptop", "Desk lamp", "Mechanical keyboard"],
    "garden": ["Tomato seedlings", "Compost bag", "Terracotta pots", "Herb starter kit"],
}

DESCRIPTIONS = [
    "Picked this morning, pickup only.",
    "Gently used, works perfectly.",
    "Homemade in small batches.",
    "Local pickup or meet halfway.",
    "Priced to sell this weekend.",
]


def random_product(lat: float, lng: float, spread_km: float) -> dict:
    category = random.choice(CATEGORIES)
    # ~111 km per degree of latitude
    dlat = random.uniform(-spread_km, spread_km) / 111.0
    dlng = random.uniform(-spread_km, spread_km) / 111.0
    return {
        "title": random.choice(TITLES[category]),
        "description": random.choice(DESCRIPTIONS),
        "price": round(random.choice([0, 2.5, 4, 5, 9.99, 19.99, 45, 120]), 2),
        "category": category,
        "location": {
            "coordinates": [round(lng + dlng, 6), round(lat + dlat, 6)],
            "address": "Near downtown",
        },
        "images": [f"https://picsum.photos/seed/{random.randint(1, 10_000)}/600/400"],
        "quantity": random.randint(1, 10),
    }


def main():
    ap = argparse.ArgumentParser(description="Seed sellers and listings via API")
    ap.add_argument("--sellers", type=int, default=10, help="Number of sellers to create")
    ap.add_argument("--products-per-seller", type=int, default=10, help="Listings per seller")
    ap.add_argument("--lat", type=float, default=37.7749, help="Latitude of the seeded area")
    ap.add_argument("--lng", type=float, default=-122.4194, help="Longitude of the seeded area")
    ap.add_argument("--spread-km", type=float, default=15.0, help="Listings are scattered this far around the center")
    ap.add_argument("--base-url", default=API_BASE, help="API base URL")
    args = ap.parse_args()

    created_products = 0
    errors = []

    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        print(f"Creating {args.sellers} sellers with {args.products_per_seller} listings each...")
        for i in range(args.sellers):
            uid = f"seed-seller-{i + 1}"
            email = f"seller{i + 1}@example.com"
            headers = {"Authorization": f"Bearer {create_identity_token(uid, email)}"}
            r = client.post("/users/register", headers=headers, json={"name": f"Seller {i + 1}"})
            if r.status_code not in (200, 201):
                errors.append(f"Register {uid}: {r.status_code} {r.text[:80]}")
                continue
            for _ in range(args.products_per_seller):
                try:
                    r = client.post("/products", headers=headers, json=random_product(args.lat, args.lng, args.spread_km))
                    if r.status_code == 201:
                        created_products += 1
                    else:
                        errors.append(f"Product {uid}: {r.status_code} {r.text[:80]}")
                except httpx.HTTPError as e:
                    errors.append(f"Product {uid}: {e}")
            print(f"  {uid}: total listings so far {created_products}")

    print(f"\nDone. Listings created: {created_products}")
    if errors:
        print(f"Errors ({len(errors)}):")
        for e in errors[:15]:
            print("  ", e)
        if len(errors) > 15:
            print("  ... and", len(errors) - 15, "more")


if __name__ == "__main__":
    main()
