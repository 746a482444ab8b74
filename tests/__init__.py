"""Test package: pin settings before any stockroom module reads them."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["APP_ENV"] = "dev"
# Minimum bcrypt cost keeps the suite fast; production default is 12.
os.environ["BCRYPT_ROUNDS"] = "4"
