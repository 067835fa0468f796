"""ORM models and persistence for QuakeBot."""
