"""Infraestructura: Postgres (psycopg), pool y repositorios."""
