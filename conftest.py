"""Root conftest: puts the project on sys.path and configures Django for tests."""
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'django_config.settings')

import django

django.setup()
