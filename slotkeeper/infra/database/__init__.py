"""PostgreSQL persistence: ORM models, repositories and engine helpers."""
