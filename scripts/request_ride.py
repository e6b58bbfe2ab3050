#!/usr/bin/env python3
"""
Send ride requests to a running ride API.

Usage:
    python scripts/request_ride.py ride                  # Request one ride as 'alice'
    python scripts/request_ride.py ride --count 5        # Request 5 rides
    python scripts/request_ride.py health                # Check API health
"""
import argparse
import os
import sys
from datetime import datetime, timezone

import requests
from jose import jwt

# Configuration
RIDE_API_URL = os.getenv("RIDE_API_URL", "http://localhost:8000")
JWT_SECRET = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "ride-api")


def generate_jwt_token(username):
    """Generate a JWT token carrying the username claim the API expects."""
    now = datetime.now(timezone.utc).timestamp()
    payload = {
        "sub": username,
        "cognito:username": username,
        "aud": JWT_AUDIENCE,
        "iat": int(now),
        "exp": int(now) + 3600,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def request_rides(username, count=1, latitude=47.61, longitude=-122.28):
    """Request rides and print the assigned drivers."""
    print(f"\nRequesting {count} ride(s) from {RIDE_API_URL} as {username}")
    print("=" * 60)

    headers = {
        "Authorization": f"Bearer {generate_jwt_token(username)}",
        "Content-Type": "application/json",
    }
    body = {"PickupLocation": {"Latitude": latitude, "Longitude": longitude}}

    successful = 0
    failed = 0
    for i in range(1, count + 1):
        try:
            response = requests.post(f"{RIDE_API_URL}/ride", headers=headers, json=body, timeout=10)
            result = response.json()
            if response.status_code == 201:
                unicorn = result["Unicorn"]
                print(f"  [{i}/{count}] {result['RideId']}: {unicorn['Name']} ({unicorn['Color']}), eta {result['Eta']}")
                successful += 1
            else:
                print(f"  [{i}/{count}] HTTP {response.status_code}: {result.get('Error')} (ref {result.get('Reference')})")
                failed += 1
        except requests.exceptions.RequestException as e:
            print(f"  [{i}/{count}] Error: {e}")
            failed += 1

    print("=" * 60)
    print(f"Results: {successful} successful, {failed} failed")
    return successful, failed


def check_health():
    """Check the API health endpoint."""
    try:
        response = requests.get(f"{RIDE_API_URL}/health", timeout=5)
        print(f"HTTP {response.status_code}: {response.text}")
        return response.status_code == 200
    except requests.exceptions.RequestException as e:
        print(f"Ride API unreachable: {e}")
        return False


def main():
    parser = argparse.ArgumentParser(description="Send ride requests to the ride API")
    parser.add_argument("action", choices=["ride", "health"], help="Action to perform")
    parser.add_argument("--user", default="alice", help="Rider username (default: alice)")
    parser.add_argument("--count", type=int, default=1, help="Number of rides to request (default: 1)")
    parser.add_argument("--latitude", type=float, default=47.61)
    parser.add_argument("--longitude", type=float, default=-122.28)
    args = parser.parse_args()

    if args.action == "health":
        sys.exit(0 if check_health() else 1)

    _, failed = request_rides(args.user, args.count, args.latitude, args.longitude)
    sys.exit(0 if failed == 0 else 1)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
