import json
import sys
import psycopg2
from psycopg2.extras import Json
from pydantic import ValidationError
from spontis.core.config import settings
from spontis.schemas.pricing import PricingSetCreate
from urllib.parse import urlparse

def create_pricing_set(payload: PricingSetCreate, activate: bool = False) -> bool:
    try:
        db_url = urlparse(settings.DATABASE_URL.replace("postgresql+asyncpg://", "postgresql://"))

        conn = psycopg2.connect(
            host=db_url.hostname or "localhost",
            port=db_url.port or 5432,
            user=db_url.username or "postgres",
            password=db_url.password or "postgres",
            database=db_url.path.lstrip("/") or "postgres"
        )

        with conn:
            with conn.cursor() as cursor:
                cursor.execute(
                    "INSERT INTO pricing_sets (name, variables, supplements, is_active, created_by, created_at) "
                    "VALUES (%s, %s, %s, FALSE, %s, NOW()) RETURNING id",
                    (
                        payload.name,
                        Json(payload.variables.model_dump()),
                        Json([s.model_dump() for s in payload.supplements]),
                        "cli",
                    )
                )
                pricing_set_id = cursor.fetchone()[0]

                if activate:
                    cursor.execute("UPDATE pricing_sets SET is_active = FALSE WHERE id <> %s", (pricing_set_id,))
                    cursor.execute(
                        "UPDATE pricing_sets SET is_active = TRUE, activated_at = NOW() WHERE id = %s",
                        (pricing_set_id,)
                    )

        conn.close()

        print(f"Pricing set '{payload.name}' created successfully")
        print(f"Pricing set ID: {pricing_set_id}")
        print(f"Active: {'yes' if activate else 'no'}")
        return True

    except Exception as e:
        print(f"Error creating pricing set: {str(e)}")
        return False


def main():
    args = [a for a in sys.argv[1:] if a != "--activate"]
    activate = "--activate" in sys.argv[1:]

    if len(args) < 2:
        print("Usage: python create_pricing_set.py <name> <json-file> [--activate]")
        print('  json-file: {"variables": {...}, "supplements": [{"nom": ..., "type": "pct|fix", "montant": ...}]}')
        sys.exit(1)

    name, path = args[0], args[1]

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        payload = PricingSetCreate(name=name, **data)
    except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
        print(f"Error: invalid pricing file {path}: {e}")
        sys.exit(1)

    success = create_pricing_set(payload, activate=activate)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
