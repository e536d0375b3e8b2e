#!/usr/bin/env python3
"""
Generate secure secrets for the betting league
Run this script to generate the required SECRET_KEY and WTF_CSRF_SECRET_KEY
"""

import secrets


def generate_secrets():
    """Generate secure random keys for the application"""
    print("Generating secure secrets for the betting league...")
    print("=" * 50)

    print(f"SECRET_KEY={secrets.token_urlsafe(32)}")
    print(f"WTF_CSRF_SECRET_KEY={secrets.token_urlsafe(32)}")

    print("=" * 50)
    print("Copy these values to your .env file, next to LEAGUE_ADMIN_EMAIL")
    print("Keep these secrets out of version control!")


if __name__ == "__main__":
    generate_secrets()
