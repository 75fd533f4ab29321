"""Marketplace Migrator: moves product listings between Ozon and Wildberries."""
from dotenv import load_dotenv

# Marketplace credentials and DATABASE_URL usually live in .env
load_dotenv()
