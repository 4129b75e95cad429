#!/usr/bin/env python3
"""
Generate a signing key for the demo records API's JWTs.
Run this and copy the output to your .env file.
"""

import secrets

if __name__ == "__main__":
    print("=" * 60)
    print("VetEMR .env Generator")
    print("=" * 60)
    print("\nGenerating a signing key for bearer tokens...\n")

    print(f"JWT_SECRET_KEY={secrets.token_hex(32)}")
    print("VETEMR_API_URL=http://localhost:8000/api")
    print("\n" + "=" * 60)
    print("Copy the lines above to your .env file")
    print("=" * 60)
