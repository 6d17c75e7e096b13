#!/usr/bin/env python3
"""Create the e-commerce tables in PostgreSQL and load the sample rows.

Usage:
    python scripts/load_sample_data.py                # DSN from config.yaml
    python scripts/load_sample_data.py --dsn postgresql://user:pw@host/db
"""

from __future__ import annotations

import argparse
import asyncio
import datetime as dt
from decimal import Decimal

import asyncpg

from askdata.config import load_settings

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS ad_sales (
    product_id TEXT NOT NULL,
    date DATE NOT NULL,
    ad_spend NUMERIC NOT NULL,
    ad_sales NUMERIC NOT NULL,
    clicks INTEGER NOT NULL,
    impressions INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS total_sales (
    product_id TEXT NOT NULL,
    date DATE NOT NULL,
    total_sales_units INTEGER NOT NULL,
    total_sales_revenue NUMERIC NOT NULL
);

CREATE TABLE IF NOT EXISTS eligibility (
    product_id TEXT PRIMARY KEY,
    product_name TEXT NOT NULL,
    is_eligible BOOLEAN NOT NULL
);
"""

# (product_id, date, ad_spend, ad_sales, clicks, impressions)
AD_SALES = [
    ("P001", "2024-07-13", 100, 1500, 300, 10000),
    ("P002", "2024-07-13", 150, 2500, 450, 15000),
    ("P001", "2024-07-14", 120, 1800, 350, 12000),
    ("P003", "2024-07-14", 80, 1200, 250, 8000),
    ("P002", "2024-07-15", 200, 3000, 500, 20000),
    ("P001", "2024-07-16", 110, 1650, 320, 11000),
    ("P003", "2024-07-17", 90, 1350, 280, 9000),
    ("P002", "2024-07-18", 220, 3300, 550, 22000),
    ("P001", "2024-07-19", 130, 1950, 380, 13000),
    ("P003", "2024-07-20", 100, 1500, 300, 10000),
]

# (product_id, date, total_sales_units, total_sales_revenue)
TOTAL_SALES = [
    ("P001", "2024-07-13", 50, 5000),
    ("P002", "2024-07-13", 70, 8400),
    ("P001", "2024-07-14", 60, 6000),
    ("P003", "2024-07-14", 40, 4800),
    ("P002", "2024-07-15", 80, 9600),
    ("P001", "2024-07-16", 55, 5500),
    ("P003", "2024-07-17", 45, 5400),
    ("P002", "2024-07-18", 85, 10200),
    ("P001", "2024-07-19", 65, 6500),
    ("P003", "2024-07-20", 50, 6000),
]

ELIGIBILITY = [
    ("P001", "SuperWidget", True),
    ("P002", "MegaGadget", True),
    ("P003", "HyperGrommet", False),
]


def _ad_sales_rows():
    return [
        (pid, dt.date.fromisoformat(day), Decimal(spend), Decimal(sales), clicks, impressions)
        for pid, day, spend, sales, clicks, impressions in AD_SALES
    ]


def _total_sales_rows():
    return [
        (pid, dt.date.fromisoformat(day), units, Decimal(revenue))
        for pid, day, units, revenue in TOTAL_SALES
    ]


async def load(dsn: str) -> None:
    conn = await asyncpg.connect(dsn)
    try:
        async with conn.transaction():
            await conn.execute(SCHEMA_SQL)
            await conn.execute("TRUNCATE ad_sales, total_sales, eligibility")
            await conn.executemany(
                "INSERT INTO ad_sales VALUES ($1, $2, $3, $4, $5, $6)",
                _ad_sales_rows(),
            )
            await conn.executemany(
                "INSERT INTO total_sales VALUES ($1, $2, $3, $4)",
                _total_sales_rows(),
            )
            await conn.executemany("INSERT INTO eligibility VALUES ($1, $2, $3)", ELIGIBILITY)
    finally:
        await conn.close()
    print(f"Loaded {len(AD_SALES)} ad_sales, {len(TOTAL_SALES)} total_sales, {len(ELIGIBILITY)} eligibility rows")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--dsn", help="PostgreSQL DSN; defaults to database.dsn from the config file")
    parser.add_argument("--config", help="Path to config.yaml")
    args = parser.parse_args()

    dsn = args.dsn or load_settings(args.config).database.dsn
    asyncio.run(load(dsn))


if __name__ == "__main__":
    main()
