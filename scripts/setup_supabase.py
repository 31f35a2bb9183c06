#!/usr/bin/env python3
"""Supabase database setup script for DirectoryHub.

This script outputs the SQL needed to create the directory tables in Supabase.
Copy the SQL output and run it in the Supabase SQL Editor.

Usage:
    # Print all SQL to console
    python scripts/setup_supabase.py

    # Print SQL and save to file
    python scripts/setup_supabase.py --output setup.sql

    # Verify tables exist
    python scripts/setup_supabase.py --verify

Tables Created:
    - states: Top level of the directory hierarchy
    - cities: Cities, each owned by one state
    - listings: Businesses, each in one city
    - articles: Content pages with globally unique slugs
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime

# =============================================================================
# SQL Schema Definitions
# =============================================================================

SCHEMA_SQL = """
-- =============================================================================
-- DirectoryHub Database Schema for Supabase
-- =============================================================================
-- Generated: {generated_at}
--
-- Instructions:
-- 1. Open your Supabase project dashboard
-- 2. Go to SQL Editor
-- 3. Paste this entire script
-- 4. Click "Run" to execute
-- =============================================================================

-- Enable UUID extension (should already be enabled in Supabase)
CREATE EXTENSION IF NOT EXISTS "uuid-ossp";

-- =============================================================================
-- Table: states
-- =============================================================================

CREATE TABLE IF NOT EXISTS states (
    id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
    name TEXT NOT NULL,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW(),

    CONSTRAINT states_name_not_empty CHECK (name <> '')
);

CREATE INDEX IF NOT EXISTS idx_states_name ON states(name);

-- =============================================================================
-- Table: cities
-- =============================================================================
-- state_id is not a foreign key: rows imported in bulk may arrive before
-- their state. The admin orphan scan reports unresolved references.
-- =============================================================================

CREATE TABLE IF NOT EXISTS cities (
    id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
    name TEXT NOT NULL,
    state_id UUID NOT NULL,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW(),

    CONSTRAINT cities_name_not_empty CHECK (name <> '')
);

CREATE INDEX IF NOT EXISTS idx_cities_state_id ON cities(state_id);
CREATE INDEX IF NOT EXISTS idx_cities_name ON cities(name);

-- =============================================================================
-- Table: listings
-- =============================================================================

CREATE TABLE IF NOT EXISTS listings (
    id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
    business TEXT NOT NULL,
    category TEXT NOT NULL,
    review_rating NUMERIC(2, 1) DEFAULT 0,
    number_of_reviews INTEGER DEFAULT 0,
    address TEXT DEFAULT '',
    website TEXT DEFAULT '',
    phone TEXT DEFAULT '',
    email TEXT,
    city_id UUID NOT NULL,
    featured BOOLEAN DEFAULT false,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW(),

    CONSTRAINT listings_business_not_empty CHECK (business <> ''),
    CONSTRAINT listings_review_rating_range CHECK (review_rating >= 0 AND review_rating <= 5),
    CONSTRAINT listings_number_of_reviews_positive CHECK (number_of_reviews >= 0)
);

CREATE INDEX IF NOT EXISTS idx_listings_city_id ON listings(city_id);
CREATE INDEX IF NOT EXISTS idx_listings_featured ON listings(featured) WHERE featured = true;

-- =============================================================================
-- Table: articles
-- =============================================================================

CREATE TABLE IF NOT EXISTS articles (
    id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    slug TEXT NOT NULL,
    featured_image TEXT,
    published BOOLEAN DEFAULT false,
    city_id UUID,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW(),

    CONSTRAINT articles_slug_unique UNIQUE (slug),
    CONSTRAINT articles_slug_format CHECK (slug ~ '^[a-z0-9]+(-[a-z0-9]+)*$')
);

CREATE INDEX IF NOT EXISTS idx_articles_slug_pattern ON articles(slug text_pattern_ops);
CREATE INDEX IF NOT EXISTS idx_articles_created_at ON articles(created_at DESC);

-- =============================================================================
-- Triggers: keep updated_at current
-- =============================================================================

CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = NOW();
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;

DROP TRIGGER IF EXISTS update_states_updated_at ON states;
CREATE TRIGGER update_states_updated_at
    BEFORE UPDATE ON states
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();

DROP TRIGGER IF EXISTS update_cities_updated_at ON cities;
CREATE TRIGGER update_cities_updated_at
    BEFORE UPDATE ON cities
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();

DROP TRIGGER IF EXISTS update_listings_updated_at ON listings;
CREATE TRIGGER update_listings_updated_at
    BEFORE UPDATE ON listings
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();

DROP TRIGGER IF EXISTS update_articles_updated_at ON articles;
CREATE TRIGGER update_articles_updated_at
    BEFORE UPDATE ON articles
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
"""


# =============================================================================
# Migration SQL (for existing databases)
# =============================================================================

MIGRATION_SQL = """
-- =============================================================================
-- DirectoryHub Migration Script
-- =============================================================================
-- Run this against databases created before articles could belong to a city.
-- =============================================================================

DO $$
BEGIN
    IF NOT EXISTS (SELECT 1 FROM information_schema.columns
                   WHERE table_name = 'articles' AND column_name = 'city_id') THEN
        ALTER TABLE articles ADD COLUMN city_id UUID;
    END IF;
END $$;

CREATE INDEX IF NOT EXISTS idx_articles_city_id ON articles(city_id);

-- Listings created before the featured flag had a default are left as NULL;
-- NULL is read as "not featured".
ALTER TABLE listings ALTER COLUMN featured SET DEFAULT false;
"""


# =============================================================================
# Drop Tables SQL (use with caution!)
# =============================================================================

DROP_TABLES_SQL = """
-- =============================================================================
-- DROP ALL TABLES (USE WITH EXTREME CAUTION!)
-- =============================================================================
-- This will delete ALL data. Only use for complete reset during development.
-- =============================================================================

DROP TABLE IF EXISTS articles CASCADE;
DROP TABLE IF EXISTS listings CASCADE;
DROP TABLE IF EXISTS cities CASCADE;
DROP TABLE IF EXISTS states CASCADE;

DROP FUNCTION IF EXISTS update_updated_at_column() CASCADE;
"""

REQUIRED_TABLES = ['states', 'cities', 'listings', 'articles']

# Columns added by migrations; reported separately so an old schema is visible.
OPTIONAL_COLUMNS = [('articles', 'city_id')]


# =============================================================================
# Verification Functions
# =============================================================================

def verify_tables() -> dict:
    """Verify that all required tables exist in Supabase.

    Returns:
        Dictionary with verification results.
    """
    from supabase import create_client

    from src.config.settings import get_settings
    from src.maintenance.integrity import IntegrityChecker
    from src.store import EntityStore, ErrorKind
    from src.store.tables import Entity

    settings = get_settings()
    store = EntityStore(
        create_client(settings.supabase_url, settings.supabase_key.get_secret_value()),
        page_size=settings.store_page_size,
    )

    results = {
        'success': True,
        'tables': {},
        'columns': {},
        'missing': [],
        'errors': [],
    }

    for table in REQUIRED_TABLES:
        result = store.execute(store.table(table).select('id').limit(1), retry=True)
        if result.ok:
            results['tables'][table] = {'exists': True, 'accessible': True}
        elif result.kind is ErrorKind.SCHEMA:
            results['tables'][table] = {'exists': False, 'accessible': False}
            results['missing'].append(table)
            results['success'] = False
        else:
            results['tables'][table] = {
                'exists': 'unknown',
                'accessible': False,
                'error': result.detail[:100],
            }
            results['errors'].append(f"{table}: {result.detail[:100]}")
            results['success'] = False

    checker = IntegrityChecker(store)
    for table, column in OPTIONAL_COLUMNS:
        if table in results['missing']:
            continue
        results['columns'][f"{table}.{column}"] = checker.has_column(Entity(table), column)

    return results


def print_verification_results(results: dict) -> None:
    """Print verification results in a formatted way."""
    print("\n" + "=" * 70)
    print("Supabase Table Verification Results")
    print("=" * 70)

    print(f"\nOverall Status: {'PASS' if results['success'] else 'FAIL'}")
    print("-" * 70)

    print("\nTable Status:")
    for table, info in results.get('tables', {}).items():
        status = "OK" if info.get('exists') is True and info.get('accessible') else "MISSING"
        icon = "[+]" if status == "OK" else "[-]"
        print(f"  {icon} {table}: {status}")
        if info.get('error'):
            print(f"      Error: {info['error']}")

    if results.get('columns'):
        print("\nOptional Columns:")
        for column, present in results['columns'].items():
            icon = "[+]" if present else "[-]"
            print(f"  {icon} {column}: {'present' if present else 'absent (run --type migration)'}")

    if results.get('missing'):
        print(f"\nMissing Tables: {', '.join(results['missing'])}")
        print("\nRun this script without --verify to get the SQL to create missing tables.")

    if results.get('errors'):
        print("\nErrors:")
        for error in results['errors']:
            print(f"  - {error}")

    print("\n" + "=" * 70)


# =============================================================================
# Main Functions
# =============================================================================

def get_sql(sql_type: str = 'setup') -> str:
    """Get the requested SQL script."""
    if sql_type == 'setup':
        return SCHEMA_SQL.format(generated_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
    if sql_type == 'migration':
        return MIGRATION_SQL
    if sql_type == 'drop':
        return DROP_TABLES_SQL
    raise ValueError(f"Unknown SQL type: {sql_type}")


def main():
    """Main entry point for the setup script."""
    parser = argparse.ArgumentParser(
        description='Generate Supabase setup SQL for DirectoryHub',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Print setup SQL to console
    python scripts/setup_supabase.py

    # Save setup SQL to file
    python scripts/setup_supabase.py --output setup.sql

    # Print migration SQL (adds articles.city_id to older databases)
    python scripts/setup_supabase.py --type migration

    # Verify tables exist in Supabase
    python scripts/setup_supabase.py --verify

    # Print drop SQL (use with caution!)
    python scripts/setup_supabase.py --type drop
        """
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Save SQL to file instead of printing'
    )

    parser.add_argument(
        '--type', '-t',
        type=str,
        choices=['setup', 'migration', 'drop'],
        default='setup',
        help='Type of SQL to generate (default: setup)'
    )

    parser.add_argument(
        '--verify', '-v',
        action='store_true',
        help='Verify that tables exist in Supabase'
    )

    args = parser.parse_args()

    if args.verify:
        results = verify_tables()
        print_verification_results(results)
        sys.exit(0 if results.get('success') else 1)

    sql = get_sql(args.type)

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(sql)
        print(f"SQL saved to: {args.output}")
        return

    if args.type == 'drop':
        print("\n" + "!" * 70)
        print("WARNING: This will DELETE ALL DATA!")
        print("!" * 70 + "\n")
    print(sql)


if __name__ == '__main__':
    main()
