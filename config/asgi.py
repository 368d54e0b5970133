"""
ASGI config for Taskboard.

Served by Uvicorn/Daphne locally and wrapped with Mangum on AWS Lambda
(see lambda_handlers.api_handler).
"""
import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

from django.core.asgi import get_asgi_application

# Initialized at import so Lambda pays the cost once per container
application = get_asgi_application()
