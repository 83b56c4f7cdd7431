"""
Infrastructure package - external dependencies and integrations.

Modules:
- razorpay.py - Payment gateway client
- mailer.py - SMTP notifications
- minio_storage.py - Media storage
"""

from infrastructure.razorpay import RazorpayClient
from infrastructure.mailer import Mailer, get_mailer
from infrastructure.minio_storage import MinioStorage, get_minio_storage

__all__ = [
    'RazorpayClient',
    'Mailer',
    'get_mailer',
    'MinioStorage',
    'get_minio_storage',
]
