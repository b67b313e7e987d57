#!/usr/bin/env python3
# =============================================================================
# scripts/issue_dev_token.py - Issue an API Token for Local Testing
# =============================================================================
# Signs a bearer token with the configured JWT_SECRET_KEY, the same way
# POST /api/auth/token does, and prints a ready-to-use principal header.
# The email still has to be on the approved list to get past the gate.
#
# Usage:
#   python scripts/issue_dev_token.py jane@example.com
#   curl -H "Authorization: Bearer <token>" http://localhost:8000/api/recipes
# =============================================================================

import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from app.auth.principal import PRINCIPAL_HEADER, encode_client_principal
from app.auth.tokens import TokenService
from app.config import settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Issue a Recipe Catalog API token")
    parser.add_argument("email", help="Email to put in the token")
    args = parser.parse_args()

    if settings.is_production:
        sys.exit("Refusing to issue tokens with production settings")

    service = TokenService.from_settings(settings)
    token = service.generate_token(args.email)

    principal = encode_client_principal({
        "userId": args.email,
        "claims": [{"typ": "emails", "val": args.email}],
    })

    print(f"Token (valid {service.lifetime_seconds // 3600}h):")
    print(token)
    print()
    print(f"{PRINCIPAL_HEADER}: {principal}")


if __name__ == "__main__":
    main()
