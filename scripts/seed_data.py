#!/usr/bin/env python3
"""
Seed data script for the canteen ledger.
Creates the expense categories and the administrator account that owns
receipts from unmapped Telegram users.
"""

import boto3
import os
import sys
from datetime import datetime
import uuid

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shared.config import Settings
from shared.validators import EXPENSE_CATEGORIES


CATEGORY_COLORS = {
    'İşçi': '#EF4444',
    'Kasap': '#F97316',
    'Toptancı': '#F59E0B',
    'Nakliye': '#EAB308',
    'Yemekhane Kurulum': '#84CC16',
    'Fırın': '#22C55E',
    'Market': '#10B981',
    'Sebze-Meyve': '#14B8A6',
    'Kira': '#06B6D4',
    'Fatura': '#0EA5E9',
    'Diğer': '#6B7280'
}


def seed_categories(dynamodb, table_name):
    """Create or recolor the expense categories."""
    table = dynamodb.Table(table_name)

    print(f"Writing {len(EXPENSE_CATEGORIES)} categories...")

    with table.batch_writer() as batch:
        for name in EXPENSE_CATEGORIES:
            batch.put_item(Item={'name': name, 'color': CATEGORY_COLORS.get(name, '#6B7280')})

    print(f"Wrote {len(EXPENSE_CATEGORIES)} categories")


def seed_admin(dynamodb, table_name, username, telegram_id=None):
    """Create the administrator unless one with this username exists."""
    table = dynamodb.Table(table_name)

    existing = table.scan(
        FilterExpression=boto3.dynamodb.conditions.Attr('username').eq(username)
    ).get('Items', [])
    if existing:
        print(f"User '{username}' already exists ({existing[0]['user_id']})")
        return existing[0]

    user = {
        'user_id': str(uuid.uuid4()),
        'username': username,
        'name': username.capitalize(),
        'role': 'admin',
        'created_at': datetime.utcnow().isoformat()
    }
    if telegram_id:
        user['telegram_id'] = telegram_id

    table.put_item(Item=user)
    print(f"Created admin '{username}' ({user['user_id']})")
    return user


def main():
    """Main function."""
    print("=" * 50)
    print("Canteen Ledger - Seed Data Script")
    print("=" * 50)

    settings = Settings.from_env()

    print("\nTable names:")
    print(f"  categories: {settings.categories_table}")
    print(f"  users: {settings.users_table}")

    username = input("\nAdmin username (default: admin): ").strip() or 'admin'
    telegram_id = input("Admin Telegram ID (optional): ").strip() or None

    print("\nConnecting to DynamoDB...")
    dynamodb = boto3.resource('dynamodb', region_name=settings.aws_region)

    print("\nSeeding categories...")
    seed_categories(dynamodb, settings.categories_table)

    print("\nSeeding admin user...")
    seed_admin(dynamodb, settings.users_table, username, telegram_id)

    print("\n" + "=" * 50)
    print("Data seeding complete!")
    print("=" * 50)


if __name__ == '__main__':
    main()
