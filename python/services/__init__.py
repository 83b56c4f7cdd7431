"""
Services package.

Domain services (one per API area, built in main.py around a Repositories bundle):
- users_service.py - Profile, wishlist, stats, metrics
- gyms_service.py - Discovery and gym registration
- bookings_service.py - Gym bookings, payment capture, entry passes
- trainers_service.py - Trainer directory and trainer bookings
- reviews_service.py - Verified reviews and rating aggregates
- monetization_service.py - Featured listings and trainer premium
- gym_admin_service.py - Gym owner dashboard
- platform_admin_service.py - Platform administration
- content_service.py - Public CMS reads

Pure domain logic:
- pricing.py - Booking prices and commission split
- scheduling.py - Times, weekdays, expiry
- stats.py - Streak and BMI
- qr.py - Entry pass tokens and QR images

Other:
- auth.py - Token verification and role dependencies
- platform_settings.py - Prices and commission from system_settings
- database/ - asyncpg pool
"""
