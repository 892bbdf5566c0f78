#!/usr/bin/env python3
"""
Seed script for the Life Score database.
This script creates the tables and populates the achievement catalog.
"""

import sys
from app import create_app
from extensions import db
from models import Achievement, UserAchievement
from services.achievement_service import seed_achievements


def seed_achievement_catalog():
    """Seed the database with the achievement catalog."""
    print("🌱 Starting database seeding...")

    # Create Flask app context
    app = create_app()

    with app.app_context():
        try:
            # Create all tables if they don't exist
            db.create_all()
            print("✅ Database tables created/verified")

            initial_count = Achievement.query.count()
            print(f"📊 Current achievements in database: {initial_count}")

            print("🔄 Upserting achievement catalog...")
            seed_achievements()

            final_count = Achievement.query.count()
            print(f"✅ Seeding completed successfully!")
            print(f"📈 Added {final_count - initial_count} new achievements")

            print("\n📋 Achievements in database:")
            for achievement in Achievement.query.order_by(Achievement.category, Achievement.points).all():
                print(f"   • [{achievement.category}] {achievement.name} ({achievement.points} pts)")

        except Exception as e:
            print(f"❌ Error during seeding: {e}")
            db.session.rollback()
            sys.exit(1)


def clear_achievement_catalog():
    """Remove the catalog; refuses while any user has unlocked an achievement."""
    app = create_app()

    with app.app_context():
        try:
            if UserAchievement.query.count() > 0:
                print("❌ Achievements have been unlocked; refusing to clear the catalog")
                sys.exit(1)

            count = Achievement.query.count()
            if count == 0:
                print("ℹ️  No achievements to clear")
                return

            Achievement.query.delete()
            db.session.commit()
            print(f"🗑️  Cleared {count} achievements from database")

        except Exception as e:
            print(f"❌ Error clearing achievements: {e}")
            db.session.rollback()
            sys.exit(1)


def main():
    """Main function to handle command line arguments."""
    if len(sys.argv) > 1:
        if sys.argv[1] == '--clear':
            print("🗑️  Clearing achievement catalog...")
            clear_achievement_catalog()
            return
        elif sys.argv[1] == '--help' or sys.argv[1] == '-h':
            print("Life Score Database Seeder")
            print("Usage:")
            print("  python seed.py          - Seed the achievement catalog")
            print("  python seed.py --clear  - Clear the achievement catalog")
            print("  python seed.py --help   - Show this help message")
            return
        else:
            print(f"❌ Unknown argument: {sys.argv[1]}")
            print("Use 'python seed.py --help' for usage information")
            sys.exit(1)

    # Default action: seed the database
    seed_achievement_catalog()


if __name__ == '__main__':
    main()
