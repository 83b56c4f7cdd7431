#!/usr/bin/env python3
"""
Database Integrity Checker - Standalone version
Checks the booking database for consistency issues without requiring project dependencies
"""
import asyncio
import asyncpg
import json
import os
from datetime import datetime

from dotenv import load_dotenv

# Try python/.env first, then the current directory
env_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'python', '.env')
if os.path.exists(env_path):
    load_dotenv(env_path)
    print(f"Loaded environment from {env_path}")
else:
    load_dotenv()

REPORT_PATH = '/tmp/db_integrity_report.json'

CHECKS = [
    (
        'paid_without_transaction',
        "Paid gym bookings without a transaction row",
        """
        SELECT b.id, b.payment_id, b.total_amount
        FROM bookings b
        WHERE b.payment_status = 'completed'
          AND NOT EXISTS (SELECT 1 FROM transactions t WHERE t.payment_id = b.payment_id)
        """,
    ),
    (
        'confirmed_without_pass',
        "Confirmed gym bookings without a QR pass",
        """
        SELECT id, user_id, gym_id
        FROM bookings
        WHERE status = 'confirmed' AND (qr_code IS NULL OR qr_code = '')
        """,
    ),
    (
        'used_with_sessions_left',
        "Used bookings that still report remaining sessions",
        """
        SELECT id, remaining_sessions
        FROM bookings
        WHERE status = 'used' AND remaining_sessions > 0
        """,
    ),
    (
        'overbooked_slots',
        "Slots booked beyond capacity",
        """
        SELECT s.id AS slot_id, b.booking_date, s.max_capacity, COUNT(*) AS booked
        FROM gym_time_slots s
        JOIN bookings b ON b.gym_id = s.gym_id
            AND EXTRACT(DOW FROM b.booking_date) = s.day_of_week
            AND b.start_time <= s.start_time AND b.end_time > s.start_time
            AND b.status IN ('confirmed', 'completed')
        WHERE s.is_active = true
        GROUP BY s.id, b.booking_date, s.max_capacity
        HAVING COUNT(*) > s.max_capacity
        """,
    ),
    (
        'gym_rating_drift',
        "Gyms whose stored rating differs from their reviews",
        """
        SELECT g.id, g.rating, g.total_reviews,
               ROUND(AVG(r.rating)::numeric, 2) AS actual_rating, COUNT(r.id) AS actual_total
        FROM gyms g
        JOIN reviews r ON r.gym_id = g.id
        GROUP BY g.id
        HAVING g.total_reviews <> COUNT(r.id)
            OR ABS(g.rating - ROUND(AVG(r.rating)::numeric, 2)) > 0.01
        """,
    ),
    (
        'expired_featured',
        "Gyms still featured after featured_until",
        """
        SELECT id, name, featured_until
        FROM gyms
        WHERE is_featured = true AND featured_until IS NOT NULL AND featured_until < NOW()
        """,
    ),
]


async def check_integrity():
    db_url = os.getenv('DATABASE_URL')
    if not db_url:
        print("Error: DATABASE_URL environment variable not set")
        return

    print("=" * 60)
    print("DATABASE INTEGRITY CHECK")
    print("=" * 60)
    print(f"Started at: {datetime.now().isoformat()}")
    print()

    conn = await asyncpg.connect(db_url)

    try:
        issues = {}
        total_issues = 0

        for index, (key, title, query) in enumerate(CHECKS, start=1):
            print(f"[{index}/{len(CHECKS)}] Checking {title.lower()}...")
            rows = await conn.fetch(query)
            count = len(rows)
            issues[key] = {
                'count': count,
                'records': [dict(r) for r in rows[:10]]  # First 10 examples
            }
            total_issues += count
            print(f"   Found: {count}")

        # Summary
        print()
        print("=" * 60)
        print("SUMMARY")
        print("=" * 60)
        for key, value in issues.items():
            print(f"{key}: {value['count']} issues")
        print(f"\nTotal issues found: {total_issues}")
        print("=" * 60)

        report = {
            'timestamp': datetime.now().isoformat(),
            'total_issues': total_issues,
            'issues': issues
        }

        with open(REPORT_PATH, 'w') as f:
            json.dump(report, f, indent=2, default=str)

        print(f"\nDetailed report saved to: {REPORT_PATH}")

    finally:
        await conn.close()

if __name__ == '__main__':
    asyncio.run(check_integrity())
