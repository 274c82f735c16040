#!/usr/bin/env python3
"""
Database management script for deployment.
Run this during the build/deployment pipeline to apply migrations and seed
the default tournaments.
"""
import os
import sys

from flask_migrate import upgrade

from registration.app import create_app
from registration.models import db
from registration.seed import seed_tournaments


def deploy():
    """Run deployment tasks."""
    print("Starting database migration...")
    app = create_app()
    with app.app_context():
        migrations_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'migrations')
        try:
            if os.path.isdir(migrations_dir):
                upgrade(directory=migrations_dir)
                print("✓ Database migrations applied.")
            else:
                db.create_all()
                print("✓ Database tables created (no migrations directory).")
        except Exception as e:
            print(f"Error applying migrations: {e}")
            sys.exit(1)

        added = seed_tournaments()
        print(f"✓ Seeded {added} tournaments.")


if __name__ == '__main__':
    deploy()
